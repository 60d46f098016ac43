"""
Extraction statistics

Boundary area plus overlapping per-category counts
"""

from typing import Optional, Sequence

from ..geometry.utils import geodesic_area_m2
from ..models import ExtractionStats, FeatureCollection


# Category -> tag key whose presence counts the feature
ROAD_KEY = "highway"
BUILDING_KEY = "building"
POI_KEY = "amenity"


def summarize(
    collection: FeatureCollection,
    boundary: Optional[Sequence[Sequence[float]]] = None
) -> ExtractionStats:
    """
    Compute stats for a processed collection

    Area is geodesic (WGS84 ellipsoid) in km^2. A feature with several
    matching keys counts once in each category, so the counts need not
    add up to total_features.

    Args:
        collection: Processed features
        boundary: Ring to measure; defaults to collection.boundary
    """
    ring = boundary if boundary is not None else collection.boundary
    features = collection.features

    return ExtractionStats(
        area_km2=geodesic_area_m2(ring) / 1_000_000,
        total_features=len(features),
        road_count=sum(1 for f in features if ROAD_KEY in f.tags),
        building_count=sum(1 for f in features if BUILDING_KEY in f.tags),
        poi_count=sum(1 for f in features if POI_KEY in f.tags),
    )
