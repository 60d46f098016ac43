"""
Display hints for the host map

Labels and style dictionaries only; drawing is up to the host.
"""

from typing import Any, Dict, List

from ..models import Feature, FeatureCollection


BOUNDARY_STYLE: Dict[str, Any] = {
    "color": "#764ba2",
    "weight": 3,
    "fillColor": "#667eea",
    "fillOpacity": 0.2,
}

CLICK_STYLE: Dict[str, Any] = {
    "radius": 8,
    "fillColor": "#667eea",
    "color": "#fff",
    "weight": 2,
    "fillOpacity": 0.8,
}

FEATURE_STYLE: Dict[str, Any] = {
    "color": "#e74c3c",
    "weight": 2,
    "fillOpacity": 0.3,
}

POINT_FEATURE_STYLE: Dict[str, Any] = {
    "radius": 5,
    "fillColor": "#e74c3c",
    "color": "#fff",
    "weight": 1,
    "fillOpacity": 0.8,
}


def feature_label(feature: Feature) -> str:
    """Popup title: name, else amenity, else highway"""
    tags = feature.tags
    return tags.get("name") or tags.get("amenity") or tags.get("highway") or "Unknown"


def display_hints(collection: FeatureCollection) -> List[Dict[str, Any]]:
    """One hint per feature, in collection order"""
    hints = []
    for feature in collection.features:
        is_point = feature.geometry_type == "Point"
        hints.append({
            "id": feature.id,
            "label": feature_label(feature),
            "popup": f"{feature_label(feature)}\nID: {feature.id}",
            "style": POINT_FEATURE_STYLE if is_point else FEATURE_STYLE,
        })
    return hints
