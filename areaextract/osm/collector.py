"""
Main OSM Collector

Sequences query building, endpoint fallback and the (opt-in) synthetic
degraded mode
"""

import threading
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from loguru import logger

from ..config import get_config
from ..errors import RetrievalFailure
from .api_client import OverpassAPIClient
from .models import RawElement
from .parser import OSMResponseParser
from .query import bbox_of, build_query, normalize_categories
from .synthetic import SyntheticDataGenerator


SYNTHETIC_ENDPOINT = "synthetic"


@dataclass
class RetrievalResult:
    """Raw elements plus where they came from"""
    elements: List[RawElement]
    endpoint: str
    query: str
    degraded: bool = False
    failure: Optional[RetrievalFailure] = None  # why degraded mode was entered


class OSMCollector:
    """
    Collect raw elements from OpenStreetMap via Overpass API

    Uses a single query for all selected categories. When every endpoint
    fails, the RetrievalFailure reaches the caller unless they passed
    allow_synthetic=True, in which case the result is flagged degraded.
    """

    def __init__(
        self,
        api_client: Optional[OverpassAPIClient] = None,
        synthetic_generator: Optional[SyntheticDataGenerator] = None,
        query_timeout: Optional[int] = None
    ):
        self.config = get_config()
        self.api_client = api_client or OverpassAPIClient()
        self.synthetic_generator = synthetic_generator or SyntheticDataGenerator()
        self.parser = OSMResponseParser()
        self.timeout = query_timeout or self.config.api.overpass_timeout

    def build_query(self, boundary: Sequence[Sequence[float]], categories: Iterable[str]) -> str:
        """Query for the boundary's bounding box"""
        return build_query(bbox_of(boundary), categories, timeout=self.timeout)

    def fetch_elements(
        self,
        boundary: Sequence[Sequence[float]],
        categories: Iterable[str],
        allow_synthetic: bool = False,
        cancel_event: Optional[threading.Event] = None
    ) -> RetrievalResult:
        """
        Fetch raw elements for every selected category inside the boundary's bbox

        Args:
            boundary: Closed (lon, lat) ring
            categories: Tag keys to query
            allow_synthetic: Substitute generated data if all endpoints fail
            cancel_event: Stops retrieval early; never triggers synthetic data

        Returns:
            RetrievalResult (degraded=True when synthetic data was used)

        Raises:
            InvalidInput: empty categories or bad bbox
            RetrievalFailure: endpoints exhausted and allow_synthetic is False,
                or the caller cancelled
        """
        keys = normalize_categories(categories)
        bbox = bbox_of(boundary)
        query = build_query(bbox, keys, timeout=self.timeout)

        logger.info(f"Fetching OSM features for {keys} in bbox {bbox}")

        try:
            data = self.api_client.query(query, cancel_event=cancel_event)
        except RetrievalFailure as e:
            if e.cancelled or not allow_synthetic:
                raise
            logger.warning(f"Entering degraded mode with synthetic data: {e}")
            data = self.synthetic_generator.generate(bbox, keys)
            return RetrievalResult(
                elements=self.parser.parse_elements(data),
                endpoint=SYNTHETIC_ENDPOINT,
                query=query,
                degraded=True,
                failure=e
            )

        elements = self.parser.parse_elements(data)
        logger.info(f"Retrieved {len(elements)} raw elements")
        return RetrievalResult(
            elements=elements,
            endpoint=self.api_client.last_endpoint or "",
            query=query
        )
