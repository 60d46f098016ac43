"""
OSM data models

Data classes for raw Overpass elements (nodes, ways, relations)
"""

from typing import Any, Dict, List, Mapping, Optional, Union
from dataclasses import dataclass, field

from ..models import Point


@dataclass
class OSMNode:
    """Represents an OSM node (point)"""
    id: int
    lat: Optional[float]
    lon: Optional[float]
    tags: Dict[str, str] = field(default_factory=dict)

    type = "node"

    @property
    def coordinates(self) -> Point:
        """(lon, lat) of the node"""
        return (self.lon, self.lat)


@dataclass
class OSMWay:
    """Represents an OSM way (line or polygon) by node reference"""
    id: int
    node_ids: List[int]
    tags: Dict[str, str] = field(default_factory=dict)

    type = "way"

    def resolve_coordinates(self, node_index: Mapping[int, Point]) -> List[List[float]]:
        """
        Get coordinates as [lon, lat] list

        Node ids missing from the index are skipped, so the result may be
        shorter than node_ids.
        """
        return [list(node_index[n]) for n in self.node_ids if n in node_index]


@dataclass
class OSMRelation:
    """Represents an OSM relation; kept for counting, never turned into geometry"""
    id: int
    members: List[Dict[str, Any]] = field(default_factory=list)
    tags: Dict[str, str] = field(default_factory=dict)

    type = "relation"


RawElement = Union[OSMNode, OSMWay, OSMRelation]
