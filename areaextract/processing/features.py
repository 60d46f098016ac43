"""
Feature processing

Turns raw nodes/ways into typed features, rebuilds way geometry from node
references, classifies closed vs open ways and keeps only features whose
representative point lies inside the boundary polygon.

Per-element failures never abort the batch: each one is recorded as a
DroppedElement so losses stay countable.
"""

import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from loguru import logger
from pydantic import ValidationError
from shapely.errors import ShapelyError

from ..errors import InvalidInput
from ..geometry.utils import BoundaryTester, representative_point
from ..models import (
    Feature,
    FeatureCollection,
    GeoJSONLineString,
    GeoJSONPoint,
    GeoJSONPolygon,
    Point,
)
from ..osm.models import OSMNode, OSMRelation, OSMWay, RawElement


# Drop reasons
UNRESOLVED_NODES = "unresolved_nodes"
INVALID_COORDINATES = "invalid_coordinates"
INVALID_GEOMETRY = "invalid_geometry"
CONTAINMENT_ERROR = "containment_error"


@dataclass
class DroppedElement:
    element_id: int
    element_type: str
    reason: str
    detail: str = ""


@dataclass
class PartialDataLoss:
    """Elements lost during processing; informational, never raised"""
    dropped: List[DroppedElement] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.dropped)

    def by_reason(self) -> Dict[str, int]:
        return dict(Counter(d.reason for d in self.dropped))

    def record(self, element: RawElement, reason: str, detail: str = "") -> None:
        logger.debug(f"Dropping {element.type} {element.id}: {reason} {detail}".rstrip())
        self.dropped.append(DroppedElement(element.id, element.type, reason, detail))


@dataclass
class ProcessingResult:
    collection: FeatureCollection
    loss: PartialDataLoss
    untagged: int = 0  # skipped, e.g. bare way member nodes
    outside: int = 0  # filtered by containment
    relations: int = 0  # never materialized


class FeatureProcessor:
    """Processes raw OSM elements into a filtered FeatureCollection"""

    @staticmethod
    def index_nodes(elements: Iterable[RawElement]) -> Dict[int, Point]:
        """Map node id -> (lon, lat) for every node with finite coordinates"""
        index: Dict[int, Point] = {}
        for element in elements:
            if isinstance(element, OSMNode) and _finite(element.lon, element.lat):
                index[element.id] = element.coordinates
        return index

    @staticmethod
    def build_geometry(element: RawElement, node_index: Dict[int, Point]):
        """
        Geometry for a node or way

        A way is a Polygon when it resolves to >= 4 coordinates with
        first == last, otherwise a LineString.

        Returns:
            (geometry, None) or (None, drop reason)
        """
        if isinstance(element, OSMNode):
            if not _finite(element.lon, element.lat):
                return None, INVALID_COORDINATES
            return GeoJSONPoint(coordinates=[element.lon, element.lat]), None

        if isinstance(element, OSMWay):
            coords = element.resolve_coordinates(node_index)
            if len(coords) < 2:
                return None, UNRESOLVED_NODES
            if coords[0] == coords[-1] and len(coords) >= 4:
                return GeoJSONPolygon(coordinates=[coords]), None
            return GeoJSONLineString(coordinates=coords), None

        return None, INVALID_GEOMETRY

    def process(
        self,
        elements: Sequence[RawElement],
        boundary: Sequence[Sequence[float]]
    ) -> ProcessingResult:
        """
        Build and filter features

        Args:
            elements: Raw elements in response order
            boundary: Closed (lon, lat) ring

        Returns:
            ProcessingResult; features keep input order

        Raises:
            InvalidInput: boundary is not a closed ring of >= 4 points
        """
        if len(boundary) < 4 or tuple(boundary[0]) != tuple(boundary[-1]):
            raise InvalidInput("Boundary must be a closed ring of at least 4 points")

        tester = BoundaryTester(boundary)
        node_index = self.index_nodes(elements)
        loss = PartialDataLoss()
        features: List[Feature] = []
        untagged = outside = relations = 0

        for element in elements:
            if isinstance(element, OSMRelation):
                relations += 1
                continue
            if not element.tags:
                untagged += 1
                continue

            try:
                geometry, reason = self.build_geometry(element, node_index)
                if geometry is None:
                    loss.record(element, reason)
                    continue
                feature = Feature(id=element.id, tags=dict(element.tags), geometry=geometry)
            except (ValidationError, TypeError, ValueError) as e:
                loss.record(element, INVALID_GEOMETRY, str(e).split("\n", 1)[0])
                continue

            try:
                point, _ = representative_point(feature.geometry)
                inside = tester.contains(point)
            except (ValueError, TypeError, ShapelyError) as e:
                loss.record(element, CONTAINMENT_ERROR, str(e))
                continue

            if inside:
                features.append(feature)
            else:
                outside += 1

        if loss.count:
            logger.warning(f"Dropped {loss.count} elements during processing: {loss.by_reason()}")
        logger.info(
            f"Processed {len(elements)} elements: {len(features)} features kept, "
            f"{outside} outside boundary, {untagged} untagged, {relations} relations skipped"
        )

        return ProcessingResult(
            collection=FeatureCollection(features=features, boundary=[tuple(p) for p in boundary]),
            loss=loss,
            untagged=untagged,
            outside=outside,
            relations=relations
        )


def _finite(*values: Optional[float]) -> bool:
    return all(v is not None and math.isfinite(v) for v in values)


def process_elements(
    elements: Sequence[RawElement],
    boundary: Sequence[Sequence[float]]
) -> ProcessingResult:
    return FeatureProcessor().process(elements, boundary)
