"""
GeoJSON export: the processed collection, pretty-printed as-is
"""

import json

from ..errors import ExportFailure
from ..models import FeatureCollection


def to_geojson(collection: FeatureCollection, indent: int = 2) -> str:
    try:
        return json.dumps(collection.to_geojson(), indent=indent, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise ExportFailure(f"GeoJSON serialization failed: {e}") from e
