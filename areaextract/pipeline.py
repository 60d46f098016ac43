"""
Main Pipeline Orchestrator for area extraction

Flow (strictly one direction, fresh on every run):

  1. Click points -> boundary polygon
  2. Polygon bbox + categories -> Overpass query
  3. Query -> raw elements (endpoint fallback, optional synthetic data)
  4. Raw elements -> filtered FeatureCollection
  5. Collection -> stats and exports

The pipeline holds no click or result state between runs; the host passes
snapshots in and keeps what comes back.
"""

import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from loguru import logger

from .config import ExtractionConfig, get_config
from .errors import InvalidInput
from .exporters import ExportPayload, export
from .geometry.clicks import clamp_point_cap
from .geometry.polygon import PolygonBuilder
from .models import ExtractionStats, FeatureCollection, Ring
from .osm.api_client import OverpassAPIClient
from .osm.collector import OSMCollector
from .osm.parser import OSMResponseParser
from .osm.synthetic import SyntheticDataGenerator
from .processing.features import FeatureProcessor, PartialDataLoss, ProcessingResult
from .processing.stats import summarize


@dataclass
class ExtractionResult:
    boundary: Ring
    collection: FeatureCollection
    stats: ExtractionStats
    processing: ProcessingResult
    endpoint: str = ""
    degraded: bool = False

    @property
    def loss(self) -> PartialDataLoss:
        return self.processing.loss


class ExtractionPipeline:
    """
    Main pipeline from click points to exportable features

    Usage:
        pipeline = ExtractionPipeline()
        result = pipeline.run(points, ["amenity", "highway"])
        payload = pipeline.export(result, "csv")
    """

    def __init__(
        self,
        config: Optional[ExtractionConfig] = None,
        collector: Optional[OSMCollector] = None
    ):
        self.config = config or get_config()
        self.polygon_builder = PolygonBuilder(config=self.config.polygon)
        self.collector = collector or OSMCollector(
            api_client=OverpassAPIClient(config=self.config.api),
            synthetic_generator=SyntheticDataGenerator(config=self.config.synthetic),
            query_timeout=self.config.api.overpass_timeout
        )
        self.processor = FeatureProcessor()

    def build_boundary(
        self,
        points: Sequence[Sequence[float]],
        point_cap: Optional[int] = None
    ) -> Ring:
        """
        Validate the click snapshot and build the ring

        Raises:
            InvalidInput: more points than the (clamped) cap, or fewer than 3
        """
        if point_cap is not None:
            cap = clamp_point_cap(point_cap, self.config.polygon)
            if len(points) > cap:
                raise InvalidInput(f"{len(points)} points exceed the cap of {cap}")
        return self.polygon_builder.build(points)

    def run(
        self,
        points: Sequence[Sequence[float]],
        categories: Optional[Iterable[str]] = None,
        point_cap: Optional[int] = None,
        allow_synthetic: bool = False,
        cancel_event: Optional[threading.Event] = None
    ) -> ExtractionResult:
        """
        Run the complete extraction

        Args:
            points: (lon, lat) clicks
            categories: Tag keys to extract; None means config.default_categories
            point_cap: Host's cap, checked after clamping
            allow_synthetic: Use generated data if every endpoint fails
            cancel_event: Cancels retrieval between attempts

        Returns:
            ExtractionResult (check .degraded and .loss)

        Raises:
            InvalidInput, RetrievalFailure
        """
        if categories is None:
            categories = self.config.default_categories
        categories = list(categories)
        logger.info(f"Starting extraction for {len(points)} points, categories {categories}")

        logger.info("Stage 1: Building boundary polygon...")
        boundary = self.build_boundary(points, point_cap)

        logger.info("Stage 2: Retrieving OSM elements...")
        retrieval = self.collector.fetch_elements(
            boundary,
            categories,
            allow_synthetic=allow_synthetic,
            cancel_event=cancel_event
        )
        if retrieval.degraded:
            logger.warning("Results are SYNTHETIC (degraded mode), not live OSM data")

        logger.info("Stage 3: Processing features...")
        result = self._finish(boundary, self.processor.process(retrieval.elements, boundary))
        result.endpoint = retrieval.endpoint
        result.degraded = retrieval.degraded
        return result

    def process_response(
        self,
        data: Dict[str, Any],
        points: Sequence[Sequence[float]],
        point_cap: Optional[int] = None
    ) -> ExtractionResult:
        """
        Run stages 1, 4 and 5 on an already fetched Overpass response

        Raises:
            InvalidInput: data is not an object with an "elements" list
        """
        if not isinstance(data, dict) or not isinstance(data.get("elements", []), list):
            raise InvalidInput("Overpass response must be a JSON object with an \"elements\" list")
        boundary = self.build_boundary(points, point_cap)
        elements = OSMResponseParser.parse_elements(data)
        return self._finish(boundary, self.processor.process(elements, boundary))

    def _finish(self, boundary: Ring, processing: ProcessingResult) -> ExtractionResult:
        stats = summarize(processing.collection, boundary)
        logger.info(
            f"Area {stats.area_km2:.2f} km2: {stats.total_features} features "
            f"({stats.road_count} roads, {stats.building_count} buildings, {stats.poi_count} POIs)"
        )
        return ExtractionResult(
            boundary=boundary,
            collection=processing.collection,
            stats=stats,
            processing=processing
        )

    def export(self, result: ExtractionResult, fmt: str) -> ExportPayload:
        return export(result.collection, fmt, self.config.export)

    def export_many(self, result: ExtractionResult, formats: Iterable[str]) -> List[ExportPayload]:
        return [self.export(result, fmt) for fmt in formats]
