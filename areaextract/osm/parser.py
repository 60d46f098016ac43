"""
OSM response parser

Parses Overpass API responses into OSMNode, OSMWay and OSMRelation objects
"""

from typing import Any, Dict, List, Optional

from loguru import logger

from .models import OSMNode, OSMRelation, OSMWay, RawElement


class OSMResponseParser:
    """Parses Overpass API responses"""

    @staticmethod
    def parse_elements(data: Dict[str, Any]) -> List[RawElement]:
        """
        Parse Overpass response into raw elements, in response order

        Handles 'out body' (tagged elements with node references) and
        'out skel' (bare member nodes) output alike. Elements without a
        type or an integer id are skipped.

        Args:
            data: JSON response from Overpass API

        Returns:
            List of OSMNode / OSMWay / OSMRelation
        """
        elements: List[RawElement] = []
        skipped = 0

        for element in data.get("elements", []):
            if not isinstance(element, dict):
                skipped += 1
                continue
            element_type = element.get("type")
            element_id = element.get("id")
            if not isinstance(element_id, int) or isinstance(element_id, bool):
                skipped += 1
                continue
            tags = OSMResponseParser._parse_tags(element.get("tags"))

            if element_type == "node":
                elements.append(OSMNode(
                    id=element_id,
                    lat=OSMResponseParser._as_float(element.get("lat")),
                    lon=OSMResponseParser._as_float(element.get("lon")),
                    tags=tags
                ))
            elif element_type == "way":
                elements.append(OSMWay(
                    id=element_id,
                    node_ids=OSMResponseParser._as_list(element.get("nodes")),
                    tags=tags
                ))
            elif element_type == "relation":
                elements.append(OSMRelation(
                    id=element_id,
                    members=OSMResponseParser._as_list(element.get("members")),
                    tags=tags
                ))
            else:
                skipped += 1

        if skipped:
            logger.debug(f"Parser skipped {skipped} elements without a known type or id")
        return elements

    @staticmethod
    def _parse_tags(raw: Optional[Dict[str, Any]]) -> Dict[str, str]:
        if not raw or not isinstance(raw, dict):
            return {}
        return {str(k): str(v) for k, v in raw.items()}

    @staticmethod
    def _as_list(value: Any) -> List[Any]:
        return list(value) if isinstance(value, list) else []

    @staticmethod
    def _as_float(value: Any) -> Optional[float]:
        if value is None:
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None
