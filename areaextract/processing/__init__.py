"""
Processing of raw OSM elements into features, stats and display hints
"""

from .features import (
    DroppedElement,
    FeatureProcessor,
    PartialDataLoss,
    ProcessingResult,
    process_elements,
)
from .stats import summarize
from .display import BOUNDARY_STYLE, CLICK_STYLE, display_hints, feature_label

__all__ = [
    "DroppedElement",
    "FeatureProcessor",
    "PartialDataLoss",
    "ProcessingResult",
    "process_elements",
    "summarize",
    "BOUNDARY_STYLE",
    "CLICK_STYLE",
    "display_hints",
    "feature_label",
]
