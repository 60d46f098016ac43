"""
Overpass QL query construction

Selects every node/way/relation carrying any of the given tag keys
(any value) inside a bounding box, then recurses down so member nodes
come back too and way geometry can be rebuilt.
"""

import math
from typing import Iterable, List, Optional, Sequence, Tuple

from ..config import get_config
from ..errors import InvalidInput
from ..geometry.utils import ring_bounds


BBox = Tuple[float, float, float, float]  # (minLng, minLat, maxLng, maxLat)


def bbox_of(ring: Sequence[Sequence[float]]) -> BBox:
    """Axis-aligned (minLng, minLat, maxLng, maxLat) of a ring"""
    return ring_bounds(ring)


def normalize_categories(categories: Iterable[str]) -> List[str]:
    """
    Deduplicate tag keys, keeping first-seen order

    Raises:
        InvalidInput: empty set, blank key, or a key that would break
            out of the quoted filter
    """
    result: List[str] = []
    for cat in categories:
        if not isinstance(cat, str) or not cat.strip():
            raise InvalidInput(f"Invalid category {cat!r}")
        cat = cat.strip()
        if '"' in cat or "\\" in cat:
            raise InvalidInput(f"Category {cat!r} contains a quote or backslash")
        if cat not in result:
            result.append(cat)
    if not result:
        raise InvalidInput("Select at least one data category")
    return result


def build_query(
    bbox: BBox,
    categories: Iterable[str],
    timeout: Optional[int] = None
) -> str:
    """
    Build the Overpass query string

    Args:
        bbox: (minLng, minLat, maxLng, maxLat)
        categories: Tag keys such as "amenity", "highway"
        timeout: Server-side timeout in seconds (default from config)

    Returns:
        Query string; the bbox is emitted as south,west,north,east
    """
    keys = normalize_categories(categories)

    if len(bbox) != 4 or not all(math.isfinite(v) for v in bbox):
        raise InvalidInput(f"Bounding box must be four finite numbers, got {bbox}")
    min_lng, min_lat, max_lng, max_lat = bbox
    if min_lng > max_lng or min_lat > max_lat:
        raise InvalidInput(f"Bounding box is inverted: {bbox}")

    timeout = timeout or get_config().api.overpass_timeout
    bbox_str = f"{min_lat},{min_lng},{max_lat},{max_lng}"

    filters = "".join(
        f'node["{key}"]({bbox_str});'
        f'way["{key}"]({bbox_str});'
        f'relation["{key}"]({bbox_str});'
        for key in keys
    )

    return f"[out:json][timeout:{timeout}];({filters});out body;>;out skel qt;"
