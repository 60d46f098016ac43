"""
Boundary polygon construction

Turns unordered user clicks into a closed ring. Two strategies:

- angular (default): sort every click by its angle around the centroid.
  Keeps all points, gives a star-shaped ring. Concave click patterns can
  still self-intersect; see PolygonBuilder.build.
- convex_hull: shapely convex hull. Always simple, but interior clicks
  are discarded, which changes area and containment results.
"""

import math
from typing import Optional, Sequence

from loguru import logger
from shapely.geometry import LinearRing, MultiPoint, Polygon
from shapely.geometry.polygon import orient

from ..config import PolygonConfig, get_config
from ..errors import InvalidInput
from ..models import Point, Ring


STRATEGIES = ("angular", "convex_hull")


class PolygonBuilder:
    """Builds a BoundaryPolygon ring from click coordinates"""

    def __init__(
        self,
        strategy: Optional[str] = None,
        reject_self_intersecting: Optional[bool] = None,
        config: Optional[PolygonConfig] = None
    ):
        cfg = config or get_config().polygon
        self.strategy = strategy or cfg.strategy
        self.reject_self_intersecting = (
            cfg.reject_self_intersecting
            if reject_self_intersecting is None
            else reject_self_intersecting
        )
        self.min_points = cfg.min_points
        if self.strategy not in STRATEGIES:
            raise InvalidInput(f"Unknown polygon strategy {self.strategy!r}, expected one of {STRATEGIES}")

    def build(self, points: Sequence[Sequence[float]]) -> Ring:
        """
        Build a closed ring (first == last) from at least 3 points

        The ring is checked for self-intersection but never repaired:
        a non-simple ring is logged and returned as-is, or rejected when
        reject_self_intersecting is set.

        Args:
            points: (lon, lat) pairs in click order

        Returns:
            Closed ring of (lon, lat) tuples

        Raises:
            InvalidInput: fewer than 3 points, non-finite coordinates,
                degenerate hull, or a rejected self-intersecting ring
        """
        if len(points) < self.min_points:
            raise InvalidInput(
                f"At least {self.min_points} points are needed to build a polygon, got {len(points)}"
            )

        pts = []
        for p in points:
            lon, lat = float(p[0]), float(p[1])
            if not (math.isfinite(lon) and math.isfinite(lat)):
                raise InvalidInput(f"Non-finite click coordinate ({p[0]}, {p[1]})")
            pts.append((lon, lat))

        if self.strategy == "convex_hull":
            ring = self._convex_hull(pts)
        else:
            ring = self._angular_sort(pts)

        if not LinearRing(ring).is_simple:
            if self.reject_self_intersecting:
                raise InvalidInput("Click pattern produces a self-intersecting polygon")
            logger.warning("Boundary polygon self-intersects; containment results may be unreliable")

        logger.debug(f"Built {self.strategy} polygon with {len(ring)} ring points from {len(pts)} clicks")
        return ring

    @staticmethod
    def _angular_sort(pts: Sequence[Point]) -> Ring:
        n = len(pts)
        # fsum keeps the centroid independent of click order
        cx = math.fsum(p[0] for p in pts) / n
        cy = math.fsum(p[1] for p in pts) / n

        # sorted() is stable: equal angles keep their click order
        ordered = sorted(pts, key=lambda p: math.atan2(p[1] - cy, p[0] - cx))
        return ordered + [ordered[0]]

    @staticmethod
    def _convex_hull(pts: Sequence[Point]) -> Ring:
        hull = MultiPoint(pts).convex_hull
        if not isinstance(hull, Polygon):
            raise InvalidInput("Clicks are collinear or coincident; no polygon can be formed")
        hull = orient(hull, sign=1.0)  # counter-clockwise
        return [(x, y) for x, y in hull.exterior.coords]


def build_polygon(
    points: Sequence[Sequence[float]],
    strategy: Optional[str] = None,
    config: Optional[PolygonConfig] = None
) -> Ring:
    """Build a boundary ring with the configured (or given) strategy"""
    return PolygonBuilder(strategy=strategy, config=config).build(points)
