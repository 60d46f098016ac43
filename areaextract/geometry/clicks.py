"""
Click point collection

The host owns the click state; these helpers take a snapshot tuple and
return a new one. Nothing here is stored between calls.
"""

from typing import Any, List, Optional, Tuple

from ..config import PolygonConfig, get_config
from ..errors import InvalidInput
from ..models import ClickPoint, Point, Ring
from .polygon import PolygonBuilder


Clicks = Tuple[ClickPoint, ...]


def clamp_point_cap(value: Any, config: Optional[PolygonConfig] = None) -> int:
    """
    Clamp a user-entered point cap into the configured bounds

    Unparseable or zero values fall back to the default cap.
    """
    cfg = config or get_config().polygon
    low, high = cfg.cap_bounds
    try:
        cap = int(value)
    except (TypeError, ValueError):
        cap = 0
    if not cap:
        cap = cfg.default_max_points
    return min(high, max(low, cap))


def add_click(clicks: Clicks, lon: float, lat: float, cap: int) -> Clicks:
    """
    Append a click, numbering it by position

    Raises:
        InvalidInput: the cap is already reached (clicks are never truncated)
    """
    if len(clicks) >= cap:
        raise InvalidInput(f"Point cap of {cap} reached; clear the points to start over")
    return clicks + (ClickPoint(ordinal=len(clicks) + 1, lon=lon, lat=lat),)


def click_coordinates(clicks: Clicks) -> List[Point]:
    return [c.point for c in clicks]


def is_complete(clicks: Clicks, cap: int) -> bool:
    """Extraction is offered once the cap is filled"""
    return len(clicks) >= cap


def preview_polygon(
    clicks: Clicks,
    strategy: Optional[str] = None,
    config: Optional[PolygonConfig] = None
) -> Optional[Ring]:
    """Ring to draw while the user is still clicking; None below 3 points"""
    cfg = config or get_config().polygon
    if len(clicks) < cfg.min_points:
        return None
    return PolygonBuilder(strategy=strategy, config=cfg).build(click_coordinates(clicks))
