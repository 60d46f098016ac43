"""
OSM XML export

Two flavours:

- to_osm_xml: one <node> per Point feature under its original id.
  LineString and Polygon features are not written.
- to_josm_xml: full document for JOSM with <bounds>, shared nodes, <way>
  elements and fixed editor metadata. All ids come from a counter starting
  above josm_id_offset so they cannot collide with real OSM ids.
"""

import itertools
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from ..config import ExportConfig, get_config
from ..geometry.utils import ring_bounds
from ..models import FeatureCollection, GeoJSONPoint, GeoJSONPolygon
from .base import format_coordinate, osm_tags, tag_lines, with_fallback_tag, xml_escape


XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'


def to_osm_xml(collection: FeatureCollection, config: Optional[ExportConfig] = None) -> str:
    """Simple OSM XML with Point features only"""
    cfg = config or get_config().export
    parts = [XML_DECLARATION, f'<osm version="0.6" generator="{xml_escape(cfg.generator)}">\n']

    for feature in collection.features:
        if not isinstance(feature.geometry, GeoJSONPoint):
            continue
        lon, lat = feature.geometry.coordinates
        tags = with_fallback_tag(osm_tags(feature.properties, cfg), cfg)
        parts.append(
            f'  <node id="{xml_escape(feature.id)}" '
            f'lat="{format_coordinate(lat)}" lon="{format_coordinate(lon)}">\n'
        )
        parts.append(tag_lines(tags))
        parts.append('  </node>\n')

    parts.append('</osm>\n')
    return "".join(parts)


@dataclass
class _JosmNode:
    id: int
    lon: str
    lat: str
    tags: Dict[str, str] = field(default_factory=dict)
    is_feature: bool = False


@dataclass
class _JosmWay:
    id: int
    refs: List[int]
    tags: Dict[str, str]


class JosmDocument:
    """Accumulates deduplicated nodes and ways for one export"""

    def __init__(self, id_offset: Optional[int] = None, config: Optional[ExportConfig] = None):
        self.config = config or get_config().export
        start = self.config.josm_id_offset if id_offset is None else id_offset
        self._ids = itertools.count(start + 1)
        # Keyed by exact "lon,lat" text; near-equal floats stay separate
        self.nodes: Dict[str, _JosmNode] = {}
        self.ways: List[_JosmWay] = []

    def node_for(self, coord: Sequence[float]) -> _JosmNode:
        lon, lat = format_coordinate(coord[0]), format_coordinate(coord[1])
        key = f"{lon},{lat}"
        node = self.nodes.get(key)
        if node is None:
            node = _JosmNode(id=next(self._ids), lon=lon, lat=lat)
            self.nodes[key] = node
        return node

    def add_point(self, coord: Sequence[float], tags: Dict[str, str]) -> _JosmNode:
        node = self.node_for(coord)
        node.is_feature = True
        for k, v in tags.items():
            node.tags.setdefault(k, v)  # first feature at a coordinate wins
        return node

    def add_way(self, coords: Sequence[Sequence[float]], tags: Dict[str, str]) -> _JosmWay:
        refs = [self.node_for(c).id for c in coords]
        way = _JosmWay(id=next(self._ids), refs=refs, tags=with_fallback_tag(tags, self.config))
        self.ways.append(way)
        return way


def _josm_bounds(collection: FeatureCollection) -> Optional[Tuple[float, float, float, float]]:
    if collection.boundary:
        return ring_bounds(collection.boundary)
    coords: List[Sequence[float]] = []
    for feature in collection.features:
        geometry = feature.geometry
        if isinstance(geometry, GeoJSONPoint):
            coords.append(geometry.coordinates)
        elif isinstance(geometry, GeoJSONPolygon):
            coords.extend(geometry.coordinates[0])
        else:
            coords.extend(geometry.coordinates)
    return ring_bounds(coords) if coords else None


def to_josm_xml(collection: FeatureCollection, config: Optional[ExportConfig] = None) -> str:
    """JOSM-compatible OSM XML (nodes first, then ways)"""
    cfg = config or get_config().export
    doc = JosmDocument(config=cfg)

    for feature in collection.features:
        geometry = feature.geometry
        tags = osm_tags(feature.properties, cfg)
        if isinstance(geometry, GeoJSONPoint):
            doc.add_point(geometry.coordinates, tags)
        elif isinstance(geometry, GeoJSONPolygon):
            doc.add_way(geometry.coordinates[0], tags)
        else:
            doc.add_way(geometry.coordinates, tags)

    meta = (
        f'version="1" changeset="1" timestamp="{xml_escape(cfg.josm_timestamp)}" '
        f'user="{xml_escape(cfg.josm_user)}" uid="{xml_escape(cfg.josm_uid)}" visible="true"'
    )

    parts = [
        XML_DECLARATION,
        f'<osm version="0.6" generator="{xml_escape(cfg.generator)}" upload="false">\n',
    ]

    bounds = _josm_bounds(collection)
    if bounds is not None:
        min_lng, min_lat, max_lng, max_lat = bounds
        parts.append(
            f'  <bounds minlat="{format_coordinate(min_lat)}" minlon="{format_coordinate(min_lng)}" '
            f'maxlat="{format_coordinate(max_lat)}" maxlon="{format_coordinate(max_lng)}"/>\n'
        )

    for node in doc.nodes.values():
        opening = f'  <node id="{node.id}" {meta} lat="{node.lat}" lon="{node.lon}"'
        tags = with_fallback_tag(node.tags, cfg) if node.is_feature else node.tags
        if tags:
            parts.append(opening + '>\n')
            parts.append(tag_lines(tags))
            parts.append('  </node>\n')
        else:
            parts.append(opening + '/>\n')

    for way in doc.ways:
        parts.append(f'  <way id="{way.id}" {meta}>\n')
        parts.extend(f'    <nd ref="{ref}"/>\n' for ref in way.refs)
        parts.append(tag_lines(way.tags))
        parts.append('  </way>\n')

    parts.append('</osm>\n')
    return "".join(parts)
