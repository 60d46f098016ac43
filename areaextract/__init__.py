"""
Area Extract

Draw a boundary polygon from clicks, pull the OSM features inside it from
Overpass, and export them as GeoJSON, OSM XML (simple and JOSM) or CSV.
"""

from .config import ExtractionConfig, get_config
from .errors import AreaExtractError, ExportFailure, InvalidInput, RetrievalFailure
from .models import ClickPoint, ExtractionStats, Feature, FeatureCollection
from .pipeline import ExtractionPipeline, ExtractionResult

__version__ = "1.0.0"

__all__ = [
    "ExtractionConfig",
    "get_config",
    "AreaExtractError",
    "ExportFailure",
    "InvalidInput",
    "RetrievalFailure",
    "ClickPoint",
    "ExtractionStats",
    "Feature",
    "FeatureCollection",
    "ExtractionPipeline",
    "ExtractionResult",
]
