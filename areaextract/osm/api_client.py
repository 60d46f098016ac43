"""
Overpass API client

Handles communication with Overpass API including:
- Endpoint fallback (strictly sequential, in priority order)
- Per-attempt timeouts and a fixed backoff between endpoints
- Cancellation between attempts; an in-flight attempt is bounded by its
  timeout and its result is discarded once cancellation is requested
"""

import threading
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests
from loguru import logger

from ..config import APIConfig, get_config
from ..errors import RetrievalFailure


class OverpassAPIClient:
    """Client for interacting with one or more Overpass API endpoints"""

    def __init__(
        self,
        endpoints: Optional[List[str]] = None,
        request_timeout: Optional[float] = None,
        retry_delay: Optional[float] = None,
        session_factory: Callable[[], requests.Session] = requests.Session,
        sleep: Callable[[float], None] = time.sleep,
        config: Optional[APIConfig] = None
    ):
        self.config = config or get_config().api
        self.endpoints = list(endpoints or self.config.overpass_urls)
        self.request_timeout = request_timeout or self.config.request_timeout
        self.retry_delay = self.config.retry_delay if retry_delay is None else retry_delay
        self.session_factory = session_factory
        self._sleep = sleep
        self.last_endpoint: Optional[str] = None

    def query(
        self,
        query: str,
        cancel_event: Optional[threading.Event] = None
    ) -> Dict[str, Any]:
        """
        Execute Overpass API query, falling back through the endpoints

        Args:
            query: Overpass QL query string
            cancel_event: Set it to stop before the next attempt or during
                the backoff wait. requests cannot abort a POST that is
                already in flight, so that attempt runs until it finishes
                or hits request_timeout; its outcome is then discarded and
                the call raises as cancelled.

        Returns:
            JSON response from Overpass API (has an "elements" list)

        Raises:
            RetrievalFailure: every endpoint failed, or cancel_event was set
        """
        attempts: List[Tuple[str, str]] = []
        last_error: Optional[BaseException] = None
        total = len(self.endpoints)

        for index, endpoint in enumerate(self.endpoints):
            if cancel_event is not None and cancel_event.is_set():
                raise self._cancelled(attempts, last_error)

            try:
                data = self._post(endpoint, query)
                if cancel_event is not None and cancel_event.is_set():
                    raise self._cancelled(attempts, last_error)
                self.last_endpoint = endpoint
                logger.info(f"Overpass query succeeded on {endpoint} ({len(data['elements'])} elements)")
                return data
            except requests.exceptions.Timeout as e:
                last_error = e
                message = f"timeout after {self.request_timeout}s"
            except requests.exceptions.HTTPError as e:
                last_error = e
                status = e.response.status_code if e.response is not None else "?"
                message = f"HTTP {status}"
            except requests.exceptions.RequestException as e:
                last_error = e
                message = f"request failed: {e}"
            except ValueError as e:
                last_error = e
                message = f"invalid response: {e}"

            attempts.append((endpoint, message))
            logger.warning(f"Overpass {message} on {endpoint} (endpoint {index + 1}/{total})")
            if cancel_event is not None and cancel_event.is_set():
                raise self._cancelled(attempts, last_error)

            if index < total - 1:
                logger.info(f"Trying next endpoint in {self.retry_delay}s...")
                if cancel_event is not None:
                    if cancel_event.wait(self.retry_delay):
                        raise self._cancelled(attempts, last_error)
                else:
                    self._sleep(self.retry_delay)

        logger.error(f"OSM API failed: all {total} Overpass endpoints exhausted")
        raise RetrievalFailure(
            f"All {total} Overpass endpoints failed; last error: {attempts[-1][1] if attempts else 'none configured'}",
            last_error=last_error,
            attempts=attempts
        )

    def _post(self, endpoint: str, query: str) -> Dict[str, Any]:
        """One attempt; session and response are closed on every path"""
        headers = {
            "User-Agent": self.config.user_agent,
            "Content-Type": "application/x-www-form-urlencoded"
        }
        with self.session_factory() as session:
            with session.post(
                endpoint,
                data={"data": query},
                headers=headers,
                timeout=self.request_timeout
            ) as response:
                response.raise_for_status()
                data = response.json()

        if not isinstance(data, dict) or not isinstance(data.get("elements"), list):
            raise ValueError("response has no 'elements' list")
        return data

    @staticmethod
    def _cancelled(attempts: List[Tuple[str, str]], last_error: Optional[BaseException]) -> RetrievalFailure:
        logger.warning("Overpass retrieval cancelled by caller")
        return RetrievalFailure(
            "Retrieval cancelled",
            last_error=last_error,
            attempts=attempts,
            cancelled=True
        )
