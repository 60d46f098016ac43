"""
Test script for boundary polygon construction and click collection

Usage:
    pytest tests/test_polygon.py
"""

import itertools
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from areaextract.config import PolygonConfig
from areaextract.errors import InvalidInput
from areaextract.geometry import (
    PolygonBuilder,
    add_click,
    build_polygon,
    clamp_point_cap,
    click_coordinates,
    is_complete,
    preview_polygon,
)


DIAMOND = [(-74.01, 40.71), (-74.00, 40.72), (-73.99, 40.71), (-74.00, 40.70)]


def test_ring_is_closed_and_keeps_every_point():
    ring = build_polygon(DIAMOND)
    assert ring[0] == ring[-1]
    assert len(ring) == len(DIAMOND) + 1
    assert sorted(ring[:-1]) == sorted(DIAMOND)


@pytest.mark.parametrize("n", [3, 5, 10])
def test_ring_length_is_input_plus_one(n):
    import math
    points = [(math.cos(i * 2.1), math.sin(i * 2.1) * 0.5) for i in range(n)]
    ring = build_polygon(points)
    assert len(ring) == n + 1
    assert ring[0] == ring[-1]


def test_fewer_than_three_points_rejected():
    with pytest.raises(InvalidInput):
        build_polygon([(0.0, 0.0), (1.0, 1.0)])


def test_non_finite_point_rejected():
    with pytest.raises(InvalidInput):
        build_polygon([(0.0, 0.0), (1.0, float("nan")), (1.0, 0.0)])


def test_same_ring_for_any_click_order():
    expected = build_polygon(DIAMOND)
    for perm in itertools.permutations(DIAMOND):
        assert build_polygon(list(perm)) == expected


def test_sorted_counter_clockwise_from_minus_pi():
    points = [(1.0, 1.0), (-1.0, 1.0), (-1.0, -1.0), (1.0, -1.0)]
    ring = build_polygon(points)
    assert ring[:-1] == [(-1.0, -1.0), (1.0, -1.0), (1.0, 1.0), (-1.0, 1.0)]


def test_equal_angles_keep_click_order():
    # Centroid is exactly (0, 0); A and B share angle 0
    a, b = (2.0, 0.0), (1.0, 0.0)
    c, d = (-1.5, 1.0), (-1.5, -1.0)
    assert build_polygon([a, b, c, d])[:-1] == [d, a, b, c]
    assert build_polygon([b, a, c, d])[:-1] == [d, b, a, c]


def test_convex_hull_drops_interior_points():
    points = [(0.0, 0.0), (4.0, 0.0), (4.0, 4.0), (0.0, 4.0), (2.0, 2.0)]
    ring = PolygonBuilder(strategy="convex_hull").build(points)
    assert ring[0] == ring[-1]
    assert (2.0, 2.0) not in ring
    assert len(ring) == 5


def test_convex_hull_rejects_collinear_points():
    with pytest.raises(InvalidInput):
        PolygonBuilder(strategy="convex_hull").build([(0.0, 0.0), (1.0, 0.0), (2.0, 0.0)])


def test_unknown_strategy_rejected():
    with pytest.raises(InvalidInput):
        PolygonBuilder(strategy="spiral")


def test_self_intersecting_ring_rejected_when_configured():
    collinear = [(0.0, 0.0), (1.0, 0.0), (2.0, 0.0)]
    # Accepted (with a warning) by default
    assert len(PolygonBuilder().build(collinear)) == 4
    with pytest.raises(InvalidInput):
        PolygonBuilder(reject_self_intersecting=True).build(collinear)


@pytest.mark.parametrize("value,expected", [
    (3, 5), (5, 5), (7, 7), (10, 10), (12, 10), ("8", 8), ("abc", 5), (None, 5), (0, 5),
])
def test_point_cap_is_clamped(value, expected):
    assert clamp_point_cap(value) == expected


def test_clicks_are_numbered_and_capped():
    clicks = ()
    for lon, lat in DIAMOND:
        clicks = add_click(clicks, lon, lat, cap=5)
    assert [c.ordinal for c in clicks] == [1, 2, 3, 4]
    assert click_coordinates(clicks) == DIAMOND
    assert not is_complete(clicks, cap=5)

    clicks = add_click(clicks, -74.0, 40.71, cap=5)
    assert is_complete(clicks, cap=5)
    with pytest.raises(InvalidInput):
        add_click(clicks, -74.0, 40.715, cap=5)
    assert len(clicks) == 5


def test_add_click_returns_new_snapshot():
    first = add_click((), 1.0, 2.0, cap=5)
    second = add_click(first, 3.0, 4.0, cap=5)
    assert len(first) == 1
    assert len(second) == 2


def test_preview_needs_three_clicks():
    clicks = add_click(add_click((), 0.0, 0.0, cap=5), 1.0, 0.0, cap=5)
    assert preview_polygon(clicks) is None
    clicks = add_click(clicks, 0.5, 1.0, cap=5)
    assert len(preview_polygon(clicks)) == 4


def test_explicit_polygon_config_overrides_global():
    cfg = PolygonConfig(strategy="convex_hull", min_points=4, default_max_points=6, cap_bounds=(4, 8))

    assert clamp_point_cap(None, cfg) == 6
    assert clamp_point_cap(3, cfg) == 4
    assert clamp_point_cap(9, cfg) == 8

    builder = PolygonBuilder(config=cfg)
    assert builder.strategy == "convex_hull"
    with pytest.raises(InvalidInput):
        builder.build(DIAMOND[:3])

    clicks = ()
    for lon, lat in DIAMOND[:3]:
        clicks = add_click(clicks, lon, lat, cap=8)
    assert preview_polygon(clicks, config=cfg) is None
    assert preview_polygon(clicks) is not None
