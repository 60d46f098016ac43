"""
Test script for Overpass query construction

Usage:
    pytest tests/test_query.py
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from areaextract.errors import InvalidInput
from areaextract.osm.query import bbox_of, build_query


BBOX = (-74.01, 40.70, -73.99, 40.72)


def test_query_lists_all_element_types_in_south_west_north_east_order():
    query = build_query(BBOX, ["amenity"], timeout=60)
    box = "(40.7,-74.01,40.72,-73.99)"
    assert query == (
        "[out:json][timeout:60];("
        f'node["amenity"]{box};way["amenity"]{box};relation["amenity"]{box};'
        ");out body;>;out skel qt;"
    )


def test_query_uses_configured_timeout_by_default():
    assert build_query(BBOX, ["highway"]).startswith("[out:json][timeout:60];")


def test_categories_deduplicated_in_order():
    query = build_query(BBOX, ["highway", "amenity", "highway"])
    assert query.count('node["highway"]') == 1
    assert query.index('node["highway"]') < query.index('node["amenity"]')


def test_empty_categories_rejected():
    with pytest.raises(InvalidInput):
        build_query(BBOX, [])


@pytest.mark.parametrize("bad", ["", "   ", 'name"]', "a\\b"])
def test_unsafe_category_rejected(bad):
    with pytest.raises(InvalidInput):
        build_query(BBOX, [bad])


def test_inverted_bbox_rejected():
    with pytest.raises(InvalidInput):
        build_query((-73.99, 40.70, -74.01, 40.72), ["amenity"])


def test_bbox_of_ring():
    ring = [(-74.01, 40.71), (-74.00, 40.72), (-73.99, 40.71), (-74.00, 40.70), (-74.01, 40.71)]
    assert bbox_of(ring) == (-74.01, 40.70, -73.99, 40.72)
