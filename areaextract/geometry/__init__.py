"""
Geometry helpers: click collection, boundary polygons, containment and area
"""

from .polygon import PolygonBuilder, build_polygon
from .clicks import add_click, clamp_point_cap, click_coordinates, is_complete, preview_polygon
from .utils import (
    BoundaryTester,
    geodesic_area_m2,
    point_in_polygon,
    representative_point,
    ring_bounds,
    ring_centroid,
)

__all__ = [
    "PolygonBuilder",
    "build_polygon",
    "add_click",
    "clamp_point_cap",
    "click_coordinates",
    "is_complete",
    "preview_polygon",
    "BoundaryTester",
    "geodesic_area_m2",
    "point_in_polygon",
    "representative_point",
    "ring_bounds",
    "ring_centroid",
]
