"""
CSV export

One row per feature: id, geometry type, display name, representative
lat/lon, single category, how the point was derived (anchor) and the full
property blob as JSON. Text cells are double-quoted with inner quotes
doubled; lat/lon are written as bare numbers.
"""

import csv
import io
import json
import math
from typing import List

from ..errors import ExportFailure
from ..geometry.utils import representative_point
from ..models import Feature, FeatureCollection


HEADER = ["id", "type", "name", "lat", "lon", "category", "anchor", "tags"]

NAME_KEYS = ("name", "amenity", "highway", "building", "natural")

# Highest priority first; anything else is "other"
CATEGORY_PRIORITY = ("highway", "building", "amenity", "natural", "landuse", "waterway")


def feature_name(feature: Feature) -> str:
    for key in NAME_KEYS:
        if feature.tags.get(key):
            return feature.tags[key]
    return ""


def feature_category(feature: Feature) -> str:
    for key in CATEGORY_PRIORITY:
        if key in feature.tags:
            return key
    return "other"


def feature_row(feature: Feature) -> List[object]:
    try:
        (lon, lat), anchor = representative_point(feature.geometry)
    except ValueError as e:
        raise ExportFailure(f"Feature {feature.id}: {e}") from e
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise ExportFailure(f"Feature {feature.id} has a non-finite representative point")

    blob = json.dumps(feature.properties, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return [
        str(feature.id),
        feature.geometry_type,
        feature_name(feature),
        float(lat),
        float(lon),
        feature_category(feature),
        anchor,
        blob,
    ]


def to_csv(collection: FeatureCollection) -> str:
    """Header row plus one row per feature; header only when empty"""
    buffer = io.StringIO()
    # QUOTE_NONNUMERIC quotes every str cell and leaves the float cells bare
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, doublequote=True, lineterminator="\n")
    writer.writerow(HEADER)
    for feature in collection.features:
        writer.writerow(feature_row(feature))
    return buffer.getvalue()
