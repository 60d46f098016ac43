"""
Synthetic data generator for degraded mode.

Fabricates a plausible Overpass response inside a bounding box when every
live endpoint has failed:

- amenity  -> POI nodes (cafes, banks, ...)
- highway  -> 2-4 node road ways
- building -> rectangular closed ways
- any other key -> nodes tagged key=yes

Output has the same {"elements": [...]} shape as a real response, so it
runs through the normal parser and processor. It is never used unless the
caller opts in; see OSMCollector.fetch_elements.
"""

import random
from typing import Any, Dict, Iterable, List, Optional, Tuple

from loguru import logger

from ..config import SyntheticConfig, get_config


AMENITY_VALUES = ["cafe", "restaurant", "bank", "pharmacy", "school", "parking", "fuel", "post_office"]
HIGHWAY_VALUES = ["residential", "primary", "secondary", "tertiary", "footway", "service"]
BUILDING_VALUES = ["yes", "house", "apartments", "commercial", "retail"]


class SyntheticDataGenerator:
    """
    Generates a synthetic Overpass response within a bounding box.

    Example:
        >>> generator = SyntheticDataGenerator(seed=7)
        >>> data = generator.generate((-74.01, 40.70, -73.99, 40.72), ["amenity"])
        >>> data["synthetic"]
        True
    """

    def __init__(self, seed: Optional[int] = None, config: Optional[SyntheticConfig] = None):
        self.config = config or get_config().synthetic
        self.seed = self.config.seed if seed is None else seed
        self._rng = random.Random(self.seed)
        self._next_node_id = 1
        self._next_way_id = 1

    def generate(
        self,
        bbox: Tuple[float, float, float, float],
        categories: Iterable[str]
    ) -> Dict[str, Any]:
        """
        Build a fake response for the requested categories.

        Args:
            bbox: (minLng, minLat, maxLng, maxLat)
            categories: Tag keys that were queried

        Returns:
            Dict with "elements" plus "synthetic": True
        """
        self._rng = random.Random(self.seed)
        self._next_node_id = 1
        self._next_way_id = 1

        elements: List[Dict[str, Any]] = []
        for key in categories:
            if key == "amenity":
                elements.extend(self._generate_pois(bbox))
            elif key == "highway":
                elements.extend(self._generate_roads(bbox))
            elif key == "building":
                elements.extend(self._generate_buildings(bbox))
            else:
                elements.extend(self._generate_tagged_nodes(bbox, key))

        logger.info(f"Generated {len(elements)} synthetic elements")
        return {
            "version": 0.6,
            "generator": "areaextract synthetic",
            "synthetic": True,
            "elements": elements,
        }

    def _random_point(self, bbox: Tuple[float, float, float, float]) -> Tuple[float, float]:
        """Uniform (lon, lat) inside the box"""
        min_lng, min_lat, max_lng, max_lat = bbox
        return (
            round(self._rng.uniform(min_lng, max_lng), 7),
            round(self._rng.uniform(min_lat, max_lat), 7),
        )

    def _node(self, lon: float, lat: float, tags: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        node = {"type": "node", "id": self._next_node_id, "lat": lat, "lon": lon}
        if tags:
            node["tags"] = tags
        self._next_node_id += 1
        return node

    def _way(self, node_ids: List[int], tags: Dict[str, str]) -> Dict[str, Any]:
        way = {"type": "way", "id": self._next_way_id, "nodes": node_ids, "tags": tags}
        self._next_way_id += 1
        return way

    def _generate_pois(self, bbox) -> List[Dict[str, Any]]:
        pois = []
        for i in range(self.config.poi_count):
            lon, lat = self._random_point(bbox)
            value = self._rng.choice(AMENITY_VALUES)
            pois.append(self._node(lon, lat, {"amenity": value, "name": f"Synthetic {value} {i + 1}"}))
        return pois

    def _generate_roads(self, bbox) -> List[Dict[str, Any]]:
        elements = []
        for i in range(self.config.road_count):
            members = []
            for _ in range(self._rng.randint(2, 4)):
                lon, lat = self._random_point(bbox)
                node = self._node(lon, lat)
                elements.append(node)
                members.append(node["id"])
            value = self._rng.choice(HIGHWAY_VALUES)
            elements.append(self._way(members, {"highway": value, "name": f"Synthetic Road {i + 1}"}))
        return elements

    def _generate_buildings(self, bbox) -> List[Dict[str, Any]]:
        min_lng, min_lat, max_lng, max_lat = bbox
        # Footprints are a small fraction of the box so they stay inside it
        half_w = (max_lng - min_lng) * 0.01
        half_h = (max_lat - min_lat) * 0.01

        elements = []
        for _ in range(self.config.building_count):
            cx = self._rng.uniform(min_lng + half_w, max_lng - half_w)
            cy = self._rng.uniform(min_lat + half_h, max_lat - half_h)
            corners = [
                (cx - half_w, cy - half_h),
                (cx + half_w, cy - half_h),
                (cx + half_w, cy + half_h),
                (cx - half_w, cy + half_h),
            ]
            members = []
            for lon, lat in corners:
                node = self._node(round(lon, 7), round(lat, 7))
                elements.append(node)
                members.append(node["id"])
            members.append(members[0])  # close the ring
            elements.append(self._way(members, {"building": self._rng.choice(BUILDING_VALUES)}))
        return elements

    def _generate_tagged_nodes(self, bbox, key: str) -> List[Dict[str, Any]]:
        nodes = []
        for _ in range(max(1, self.config.poi_count // 2)):
            lon, lat = self._random_point(bbox)
            nodes.append(self._node(lon, lat, {key: "yes"}))
        return nodes
