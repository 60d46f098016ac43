"""
Shared exporter helpers

Payload/format descriptors, XML escaping, tag filtering and coordinate
formatting used by the individual writers
"""

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from ..config import ExportConfig, get_config
from ..errors import ExportFailure


@dataclass(frozen=True)
class ExportFormat:
    name: str
    filename: str
    mime_type: str
    writer: Callable[..., str]
    # Writer takes an ExportConfig as its second argument
    configurable: bool = False


@dataclass(frozen=True)
class ExportPayload:
    """Serialized content for the host's save/download collaborator"""
    content: str
    filename: str
    mime_type: str

    def to_bytes(self) -> bytes:
        return self.content.encode("utf-8")


def xml_escape(text: Any) -> str:
    """Escape special XML characters (all five, for text and attributes)"""
    return (str(text)
            .replace('&', '&amp;')
            .replace('<', '&lt;')
            .replace('>', '&gt;')
            .replace('"', '&quot;')
            .replace("'", '&apos;'))


def format_coordinate(value: float) -> str:
    """Shortest round-tripping text for a coordinate"""
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ExportFailure(f"Coordinate {value!r} is not a number") from e
    if not math.isfinite(number):
        raise ExportFailure(f"Cannot export non-finite coordinate {value!r}")
    return repr(number)


def osm_tags(properties: Mapping[str, Any], config: Optional[ExportConfig] = None) -> Dict[str, str]:
    """Properties minus bookkeeping keys (no fallback applied)"""
    stripped = (config or get_config().export).stripped_keys
    return {str(k): str(v) for k, v in properties.items() if k not in stripped}


def with_fallback_tag(tags: Dict[str, str], config: Optional[ExportConfig] = None) -> Dict[str, str]:
    """Give a tag-less element the configured fallback tag"""
    if tags:
        return tags
    key, value = (config or get_config().export).fallback_tag
    return {key: value}


def tag_lines(tags: Mapping[str, str], indent: str = "    ") -> str:
    return "".join(
        f'{indent}<tag k="{xml_escape(k)}" v="{xml_escape(v)}"/>\n'
        for k, v in tags.items()
    )
