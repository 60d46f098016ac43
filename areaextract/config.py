"""
Configuration settings for Area Extract
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import os

from loguru import logger


@dataclass
class APIConfig:
    """Overpass endpoints and request settings"""
    # Tried strictly in order; the first healthy one wins
    overpass_urls: List[str] = field(default_factory=lambda: [
        "https://overpass-api.de/api/interpreter",
        "https://overpass.kumi.systems/api/interpreter",
        "https://z.overpass-api.de/api/interpreter",
    ])
    overpass_timeout: int = 60  # Server-side [timeout:] in the query

    # Request settings
    request_timeout: float = 30.0  # Client-side, per endpoint attempt
    retry_delay: float = 2.0  # Fixed wait before moving to the next endpoint

    # User agent for API requests
    user_agent: str = "AreaExtract/1.0"


@dataclass
class PolygonConfig:
    """Boundary polygon construction"""
    # "angular" keeps every click, "convex_hull" drops interior clicks
    strategy: str = "angular"
    reject_self_intersecting: bool = False

    min_points: int = 3
    default_max_points: int = 5
    cap_bounds: Tuple[int, int] = (5, 10)


@dataclass
class ExportConfig:
    """Serializer settings"""
    generator: str = "area-extract"

    # JOSM export: ids start above anything real OSM hands out
    josm_id_offset: int = 900_000_000
    josm_timestamp: str = "1970-01-01T00:00:00Z"
    josm_user: str = "area-extract"
    josm_uid: int = 1

    # Emitted when filtering leaves an element with no tags
    fallback_tag: Tuple[str, str] = ("source", "area-extract")

    # Bookkeeping keys never written as OSM tags
    stripped_keys: Tuple[str, ...] = (
        "id", "type", "timestamp", "version", "changeset", "user", "uid"
    )


@dataclass
class SyntheticConfig:
    """Degraded-mode data generator"""
    poi_count: int = 20
    road_count: int = 8
    building_count: int = 12
    seed: Optional[int] = 42


@dataclass
class ExtractionConfig:
    """Top-level configuration"""
    api: APIConfig = field(default_factory=APIConfig)
    polygon: PolygonConfig = field(default_factory=PolygonConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    synthetic: SyntheticConfig = field(default_factory=SyntheticConfig)

    # Offered to the user when nothing is pre-selected
    default_categories: List[str] = field(default_factory=lambda: [
        "highway", "building", "amenity"
    ])


# Global config instance
config = ExtractionConfig()


def get_config() -> ExtractionConfig:
    """Get global configuration"""
    return config


def load_config_from_env(env_path: Optional[str] = None) -> ExtractionConfig:
    """
    Build a configuration with overrides from the environment.

    Reads a .env file when python-dotenv finds one (existing variables win),
    then applies OVERPASS_URLS (comma separated) and OVERPASS_TIMEOUT.
    """
    from dotenv import load_dotenv

    if env_path:
        load_dotenv(env_path, override=False)
    else:
        load_dotenv()

    cfg = ExtractionConfig()

    urls = os.getenv("OVERPASS_URLS", "")
    if urls.strip():
        # Deduplicate while preserving order
        endpoints: List[str] = []
        for url in urls.split(","):
            url = url.strip()
            if url and url not in endpoints:
                endpoints.append(url)
        cfg.api.overpass_urls = endpoints
        logger.debug(f"Overpass endpoints from environment: {endpoints}")

    timeout = os.getenv("OVERPASS_TIMEOUT")
    if timeout:
        try:
            cfg.api.overpass_timeout = int(timeout)
        except ValueError:
            logger.warning(f"Ignoring non-integer OVERPASS_TIMEOUT={timeout!r}")

    return cfg


def validate_config(config: ExtractionConfig) -> None:
    """
    Validate that all required configuration values are set.
    Raises ValueError if any required value is missing or invalid.
    """
    errors = []

    if not config.api.overpass_urls:
        errors.append("api.overpass_urls must list at least one endpoint")
    if config.api.overpass_timeout <= 0:
        errors.append(f"api.overpass_timeout must be positive, got {config.api.overpass_timeout}")
    if config.api.request_timeout <= 0:
        errors.append(f"api.request_timeout must be positive, got {config.api.request_timeout}")
    if config.api.retry_delay < 0:
        errors.append(f"api.retry_delay must not be negative, got {config.api.retry_delay}")

    if config.polygon.strategy not in ("angular", "convex_hull"):
        errors.append(f"polygon.strategy must be 'angular' or 'convex_hull', got {config.polygon.strategy!r}")
    low, high = config.polygon.cap_bounds
    if not config.polygon.min_points <= low <= high:
        errors.append(f"polygon.cap_bounds {config.polygon.cap_bounds} must satisfy min_points <= low <= high")
    elif not low <= config.polygon.default_max_points <= high:
        errors.append(f"polygon.default_max_points must lie within {config.polygon.cap_bounds}")

    if config.export.josm_id_offset < 900_000_000:
        errors.append(f"export.josm_id_offset must be >= 900000000, got {config.export.josm_id_offset}")
    if not config.export.fallback_tag[0]:
        errors.append("export.fallback_tag needs a non-empty key")

    if not config.default_categories:
        errors.append("default_categories must name at least one tag key")

    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ValueError(error_msg)
