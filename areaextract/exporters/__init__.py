"""
Exporters

Four independent serializers over a FeatureCollection, plus a registry
that pairs each with its download filename and MIME type.
"""

from typing import Dict, List, Optional

from ..config import ExportConfig
from ..errors import InvalidInput
from ..models import FeatureCollection
from .base import ExportFormat, ExportPayload, xml_escape
from .csv_export import to_csv
from .geojson import to_geojson
from .osm_xml import to_josm_xml, to_osm_xml


EXPORT_FORMATS: Dict[str, ExportFormat] = {
    "geojson": ExportFormat("geojson", "osm_data.geojson", "application/json", to_geojson),
    "osm": ExportFormat("osm", "osm_data.osm", "application/xml", to_osm_xml, configurable=True),
    "josm": ExportFormat("josm", "osm_data_josm.osm", "application/xml", to_josm_xml, configurable=True),
    "csv": ExportFormat("csv", "osm_data.csv", "text/csv", to_csv),
}


def export(
    collection: FeatureCollection,
    fmt: str,
    config: Optional[ExportConfig] = None
) -> ExportPayload:
    """
    Serialize a collection in one format

    The XML writers take ids, metadata and tag filtering from config,
    or from the global config when none is given.

    Raises:
        InvalidInput: unknown format name
        ExportFailure: serialization error
    """
    try:
        entry = EXPORT_FORMATS[fmt]
    except KeyError:
        raise InvalidInput(f"Unknown export format {fmt!r}; choose from {sorted(EXPORT_FORMATS)}") from None
    if entry.configurable:
        content = entry.writer(collection, config)
    else:
        content = entry.writer(collection)
    return ExportPayload(content, entry.filename, entry.mime_type)


def export_all(collection: FeatureCollection, config: Optional[ExportConfig] = None) -> List[ExportPayload]:
    return [export(collection, name, config) for name in EXPORT_FORMATS]


__all__ = [
    "EXPORT_FORMATS",
    "ExportFormat",
    "ExportPayload",
    "export",
    "export_all",
    "to_csv",
    "to_geojson",
    "to_josm_xml",
    "to_osm_xml",
    "xml_escape",
]
