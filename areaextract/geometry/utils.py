"""
Geometry utility functions

Representative points, containment and area for [lon, lat] coordinates
"""

import math
from typing import List, Sequence, Tuple

from pyproj import Geod
from shapely.geometry import Point as ShapelyPoint
from shapely.geometry import Polygon
from shapely.prepared import prep

from ..models import GeoJSONLineString, GeoJSONPoint, GeoJSONPolygon, Point


GEOD = Geod(ellps="WGS84")

# CSV "anchor" labels for how a representative point was derived
ANCHOR_POINT = "Point"
ANCHOR_MIDPOINT = "Midpoint"
ANCHOR_CENTROID = "Centroid"


def ensure_finite(coords: Sequence[Sequence[float]]) -> None:
    """Raise ValueError if any coordinate is missing or not finite"""
    for c in coords:
        if len(c) < 2 or not (math.isfinite(c[0]) and math.isfinite(c[1])):
            raise ValueError(f"Non-finite coordinate {list(c)}")


def ring_centroid(ring: Sequence[Sequence[float]]) -> Point:
    """Mean of the ring vertices, closing vertex excluded"""
    if not ring:
        raise ValueError("Cannot take the centroid of an empty ring")

    n = len(ring)
    if n > 1 and ring[0] == ring[-1]:
        n -= 1

    sum_x = sum(c[0] for c in ring[:n])
    sum_y = sum(c[1] for c in ring[:n])

    return (sum_x / n, sum_y / n)


def representative_point(geometry) -> Tuple[Point, str]:
    """
    Single coordinate used to locate a geometry

    Point -> itself; LineString -> coordinate at index len // 2;
    Polygon -> vertex centroid of the outer ring.

    Returns:
        ((lon, lat), anchor label)

    Raises:
        ValueError: degenerate or non-finite geometry
    """
    if isinstance(geometry, GeoJSONPoint):
        coords = [geometry.coordinates]
        ensure_finite(coords)
        return (geometry.coordinates[0], geometry.coordinates[1]), ANCHOR_POINT

    if isinstance(geometry, GeoJSONLineString):
        coords = geometry.coordinates
        ensure_finite(coords)
        mid = coords[len(coords) // 2]
        return (mid[0], mid[1]), ANCHOR_MIDPOINT

    if isinstance(geometry, GeoJSONPolygon):
        ring = geometry.coordinates[0]
        ensure_finite(ring)
        return ring_centroid(ring), ANCHOR_CENTROID

    raise ValueError(f"Unsupported geometry: {type(geometry).__name__}")


class BoundaryTester:
    """Boundary-inclusive point-in-polygon test over a fixed ring"""

    def __init__(self, ring: Sequence[Sequence[float]]):
        self.polygon = Polygon([(c[0], c[1]) for c in ring])
        self._prepared = prep(self.polygon)

    def contains(self, point: Sequence[float]) -> bool:
        # covers() is True on the boundary too, unlike contains()
        return self._prepared.covers(ShapelyPoint(point[0], point[1]))


def point_in_polygon(point: Sequence[float], ring: Sequence[Sequence[float]]) -> bool:
    """One-off boundary-inclusive containment check"""
    return BoundaryTester(ring).contains(point)


def geodesic_area_m2(ring: Sequence[Sequence[float]]) -> float:
    """Area of a [lon, lat] ring in square meters on the WGS84 ellipsoid"""
    if len(ring) < 4:
        return 0.0
    area, _ = GEOD.geometry_area_perimeter(Polygon([(c[0], c[1]) for c in ring]))
    return abs(area)


def ring_bounds(coords: Sequence[Sequence[float]]) -> Tuple[float, float, float, float]:
    """(minLng, minLat, maxLng, maxLat) of a coordinate list"""
    if not coords:
        raise ValueError("Cannot take the bounds of no coordinates")
    lons: List[float] = [c[0] for c in coords]
    lats: List[float] = [c[1] for c in coords]
    return (min(lons), min(lats), max(lons), max(lats))
