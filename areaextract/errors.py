"""
Error taxonomy

Typed failures raised by the extraction core. Per-element losses during
processing are not exceptions; see processing.features.PartialDataLoss.
"""

from typing import List, Optional, Tuple


class AreaExtractError(Exception):
    """Base class for every failure the core raises"""


class InvalidInput(AreaExtractError, ValueError):
    """Too few points, an empty category set, a bad format name, ..."""


class RetrievalFailure(AreaExtractError, RuntimeError):
    """
    Every Overpass endpoint failed (or the caller cancelled).

    Attributes:
        last_error: The exception from the final attempt, if any
        attempts: (endpoint, error message) per attempt, in order
        cancelled: True when a cancellation signal stopped the retrieval
    """

    def __init__(
        self,
        message: str,
        last_error: Optional[BaseException] = None,
        attempts: Optional[List[Tuple[str, str]]] = None,
        cancelled: bool = False
    ):
        super().__init__(message)
        self.last_error = last_error
        self.attempts = attempts or []
        self.cancelled = cancelled


class ExportFailure(AreaExtractError):
    """A serializer could not produce output (e.g. non-finite coordinate)"""
