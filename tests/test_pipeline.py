"""
Test script for the end-to-end extraction pipeline

Usage:
    pytest tests/test_pipeline.py
"""

import json
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import cli
from areaextract.config import (
    ExportConfig,
    ExtractionConfig,
    PolygonConfig,
    SyntheticConfig,
    load_config_from_env,
    validate_config,
)
from areaextract.errors import InvalidInput, RetrievalFailure
from areaextract.osm import OSMCollector, SyntheticDataGenerator
from areaextract.pipeline import ExtractionPipeline


POINTS = [(-74.01, 40.71), (-74.00, 40.72), (-73.99, 40.71), (-74.00, 40.70)]

RESPONSE = {"elements": [
    {"type": "node", "id": 1, "lat": 40.711, "lon": -74.005, "tags": {"amenity": "cafe"}},
    {"type": "node", "id": 2, "lat": 41.5, "lon": -75.0, "tags": {"amenity": "bar"}},
    {"type": "node", "id": 3, "lat": 40.709, "lon": -74.001},
    {"type": "node", "id": 4, "lat": 40.712, "lon": -73.998},
    {"type": "way", "id": 10, "nodes": [3, 4], "tags": {"highway": "residential", "name": "Main St"}},
]}


class StubClient:
    def __init__(self, data=None, error=None):
        self.data = data
        self.error = error
        self.queries = []
        self.last_endpoint = "https://stub/api"

    def query(self, query, cancel_event=None):
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return self.data


def make_pipeline(data=None, error=None):
    collector = OSMCollector(api_client=StubClient(data, error), synthetic_generator=SyntheticDataGenerator(seed=9))
    return ExtractionPipeline(collector=collector)


def test_end_to_end_example():
    pipeline = make_pipeline(RESPONSE)
    result = pipeline.run(POINTS, {"amenity"})

    assert len(result.boundary) == 5
    assert result.boundary[0] == result.boundary[-1]
    assert result.stats.area_km2 > 0
    assert not result.degraded
    assert result.endpoint == "https://stub/api"

    ids = [f.id for f in result.collection.features]
    assert ids == [1, 10]
    assert result.collection.features[0].geometry_type == "Point"
    assert result.processing.outside == 1

    csv_lines = pipeline.export(result, "csv").content.splitlines()
    assert csv_lines[1] == '"1","Point","cafe",40.711,-74.005,"amenity","Point","{""amenity"":""cafe"",""id"":1}"'


def test_stats_follow_the_collection():
    result = make_pipeline(RESPONSE).run(POINTS, ["amenity", "highway"])
    assert result.stats.total_features == 2
    assert result.stats.poi_count == 1
    assert result.stats.road_count == 1
    assert result.stats.building_count == 0


def test_points_over_cap_rejected():
    points = POINTS + [(-74.0, 40.71), (-74.002, 40.712)]
    with pytest.raises(InvalidInput):
        make_pipeline(RESPONSE).run(points, ["amenity"], point_cap=5)


def test_too_few_points_rejected_regardless_of_cap():
    with pytest.raises(InvalidInput):
        make_pipeline(RESPONSE).run(POINTS[:2], ["amenity"], point_cap=10)


def test_failure_surfaces_without_synthetic_opt_in():
    with pytest.raises(RetrievalFailure):
        make_pipeline(error=RetrievalFailure("down")).run(POINTS, ["amenity"])


def test_degraded_mode_is_visible_to_caller():
    result = make_pipeline(error=RetrievalFailure("down")).run(POINTS, ["amenity"], allow_synthetic=True)
    assert result.degraded
    assert result.endpoint == "synthetic"


def test_runs_are_independent():
    pipeline = make_pipeline(RESPONSE)
    first = pipeline.run(POINTS, ["amenity"])
    second = pipeline.run(POINTS, ["amenity"])
    assert first.collection is not second.collection
    assert first.collection == second.collection


def test_process_saved_response_and_export_all():
    pipeline = make_pipeline()
    result = pipeline.process_response(RESPONSE, POINTS)
    payloads = pipeline.export_many(result, ["geojson", "josm"])
    geojson = json.loads(payloads[0].content)
    assert [f["properties"]["id"] for f in geojson["features"]] == [1, 10]
    assert "<bounds " in payloads[1].content


def test_config_validation_reports_every_problem():
    config = ExtractionConfig()
    config.api.overpass_urls = []
    config.polygon.strategy = "spiral"
    config.export.josm_id_offset = 10
    config.default_categories = []
    with pytest.raises(ValueError) as excinfo:
        validate_config(config)
    message = str(excinfo.value)
    assert "overpass_urls" in message
    assert "strategy" in message
    assert "josm_id_offset" in message
    assert "default_categories" in message

    validate_config(ExtractionConfig())


def test_env_overrides_endpoints(monkeypatch, tmp_path):
    monkeypatch.setenv("OVERPASS_URLS", "https://one/api, https://two/api,https://one/api")
    monkeypatch.setenv("OVERPASS_TIMEOUT", "25")
    config = load_config_from_env(str(tmp_path / "missing.env"))
    assert config.api.overpass_urls == ["https://one/api", "https://two/api"]
    assert config.api.overpass_timeout == 25

    pipeline = ExtractionPipeline(config=config)
    assert pipeline.collector.api_client.endpoints == ["https://one/api", "https://two/api"]
    assert "[timeout:25]" in pipeline.collector.build_query(pipeline.build_boundary(POINTS), ["amenity"])


def test_pipeline_applies_its_own_config_throughout():
    config = ExtractionConfig(
        polygon=PolygonConfig(default_max_points=4, cap_bounds=(4, 6)),
        export=ExportConfig(
            josm_id_offset=950_000_000,
            fallback_tag=("note", "generated"),
            stripped_keys=("id", "name")
        ),
        synthetic=SyntheticConfig(poi_count=3, road_count=1, building_count=1, seed=5),
    )
    validate_config(config)
    pipeline = ExtractionPipeline(config=config)

    # Cap of 4 is only reachable through the pipeline's polygon config
    with pytest.raises(InvalidInput):
        pipeline.build_boundary(POINTS + [(-74.0, 40.71)], point_cap=4)

    assert pipeline.collector.synthetic_generator.config.poi_count == 3
    pipeline.collector.api_client = StubClient(error=RetrievalFailure("down"))
    degraded = pipeline.run(POINTS, ["amenity"], allow_synthetic=True)
    assert degraded.degraded
    assert len(degraded.collection) + degraded.processing.outside == 3

    response = {"elements": [
        {"type": "node", "id": 1, "lat": 40.711, "lon": -74.005, "tags": {"amenity": "cafe", "name": "Joe's"}},
        {"type": "node", "id": 5, "lat": 40.71, "lon": -74.0, "tags": {"name": "Plaque"}},
    ]}
    result = pipeline.process_response(response, POINTS)
    josm = pipeline.export(result, "josm").content
    assert '<node id="950000001" ' in josm
    assert 'id="900000001"' not in josm
    assert 'k="name"' not in josm
    assert '<tag k="note" v="generated"/>' in josm
    assert '<tag k="note" v="generated"/>' in pipeline.export(result, "osm").content

    default_josm = make_pipeline().export(result, "josm").content
    assert '<node id="900000001" ' in default_josm
    assert 'k="name" v="Plaque"' in default_josm


def test_default_categories_used_when_none_given():
    client = StubClient(RESPONSE)
    collector = OSMCollector(api_client=client, synthetic_generator=SyntheticDataGenerator(seed=9))
    pipeline = ExtractionPipeline(config=ExtractionConfig(default_categories=["amenity"]), collector=collector)
    result = pipeline.run(POINTS)
    assert 'node["amenity"]' in client.queries[0]
    assert "highway" not in client.queries[0]
    assert [f.id for f in result.collection.features] == [1]


@pytest.mark.parametrize("data", [[RESPONSE], {"elements": 5}, "elements"])
def test_saved_response_must_be_an_object_with_elements(data):
    with pytest.raises(InvalidInput):
        make_pipeline().process_response(data, POINTS)


def test_cli_export_reports_malformed_saved_response(tmp_path, monkeypatch):
    saved = tmp_path / "response.json"
    saved.write_text(json.dumps([RESPONSE]), encoding="utf-8")
    argv = ["cli.py", "export", "-i", str(saved), "-o", str(tmp_path / "out")]
    for lon, lat in POINTS:
        argv.append(f"--point={lon},{lat}")
    monkeypatch.setattr(sys, "argv", argv)

    assert cli.main() == 1
    assert not (tmp_path / "out").exists()
