"""
OpenStreetMap retrieval module

Modular OSM retrieval with separate components for:
- Query: Overpass QL construction
- API client: Overpass communication with endpoint fallback
- Models: Raw elements (OSMNode, OSMWay, OSMRelation)
- Parser: Response parsing
- Synthetic: Degraded-mode data generator
- Collector: Main orchestrator class
"""

from .models import OSMNode, OSMRelation, OSMWay, RawElement
from .api_client import OverpassAPIClient
from .collector import OSMCollector, RetrievalResult
from .parser import OSMResponseParser
from .query import bbox_of, build_query
from .synthetic import SyntheticDataGenerator

__all__ = [
    "OSMNode",
    "OSMWay",
    "OSMRelation",
    "RawElement",
    "OverpassAPIClient",
    "OSMCollector",
    "RetrievalResult",
    "OSMResponseParser",
    "bbox_of",
    "build_query",
    "SyntheticDataGenerator",
]
