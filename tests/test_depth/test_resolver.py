"""Tests for the depth resolution chain."""
import math

import pytest

from tube_strata import config
from tube_strata.depth.resolver import (
    DepthResolver, ExactAnchor, GlobalDefault, LineHeuristic,
    depth_for_station, depth_stats,
)
from tube_strata.network.route_sequence import LineStop


def stop_at_km(station_id: str, km: float) -> LineStop:
    lon = math.degrees(km * 1000.0 / config.EARTH_RADIUS_M)
    return LineStop(station_id=station_id, name=station_id, lat=0.0, lon=lon)


@pytest.fixture
def stops():
    return [stop_at_km("A", 0), stop_at_km("B", 2), stop_at_km("C", 5), stop_at_km("D", 8)]


class TestDepthForStation:
    def test_anchor_wins(self):
        assert depth_for_station("A", "victoria", {"A": 21.5}) == 21.5

    def test_line_heuristic(self):
        assert depth_for_station("A", "victoria", {"B": 21.5}) == 33.0
        assert depth_for_station("A", "circle", None) == 8.0

    def test_global_default(self):
        assert depth_for_station("A", "elizabeth", {}) == config.DEFAULT_DEPTH_M
        assert depth_for_station(None, None, None) == 18.0

    def test_heuristic_table_ranges(self):
        for line_id, depth in config.LINE_DEPTH_M.items():
            if config.LINE_KIND[line_id] is config.LineKind.SUB_SURFACE:
                assert 8.0 <= depth <= 10.0
            else:
                assert 25.0 <= depth <= 35.0


class TestDepthResolver:
    def test_exact_anchor_law(self, stops):
        anchors = {"A": 10.0, "C": 19.25, "D": 30.0}
        resolver = DepthResolver.for_line("victoria", anchors, stops)
        for sid, depth in anchors.items():
            assert resolver.resolve(sid) == depth
            assert depth_for_station(sid, "victoria", anchors) == depth

    def test_chain_order(self, stops):
        resolver = DepthResolver.for_line("victoria", {"A": 10.0, "D": 30.0}, stops)
        assert resolver.resolve_with_source("A").strategy == "exact"
        b = resolver.resolve_with_source("B")
        assert b.strategy == "interpolate"
        assert b.depth == pytest.approx(15.0)
        off_line = resolver.resolve_with_source("Z")
        assert off_line.strategy == "line"
        assert off_line.depth == 33.0

    def test_no_anchor_line_falls_back_to_heuristic(self, stops):
        resolver = DepthResolver.for_line("jubilee", {}, stops)
        for stop in stops:
            r = resolver.resolve_with_source(stop.station_id)
            assert r.strategy == "line"
            assert r.depth == 32.0

    def test_unknown_line_uses_default(self):
        resolver = DepthResolver.for_line("elizabeth", None)
        r = resolver.resolve_with_source("A")
        assert r.strategy == "default"
        assert r.depth == config.DEFAULT_DEPTH_M

    def test_without_stops_skips_interpolation(self):
        resolver = DepthResolver.for_line("victoria", {"A": 10.0})
        assert [s.name for s in resolver.strategies] == ["exact", "line", "default"]

    def test_custom_chain_gets_default_appended(self):
        resolver = DepthResolver([ExactAnchor({"A": 4.0}), LineHeuristic(None)])
        assert isinstance(resolver.strategies[-1], GlobalDefault)
        assert resolver.resolve("A") == 4.0
        assert resolver.resolve("B") == config.DEFAULT_DEPTH_M

    def test_custom_default_value(self):
        resolver = DepthResolver([GlobalDefault(12.0)])
        assert resolver.resolve("anything") == 12.0

    def test_resolve_all(self, stops):
        resolver = DepthResolver.for_line("victoria", {"A": 10.0, "D": 30.0}, stops)
        depths = resolver.resolve_all([s.station_id for s in stops])
        assert depths["A"] == 10.0
        assert depths["C"] == pytest.approx(22.5)

    def test_returns_float(self):
        resolver = DepthResolver.for_line("victoria", {"A": 7})
        assert isinstance(resolver.resolve("A"), float)


class TestDepthStats:
    def test_stats(self, stops):
        stats = depth_stats("victoria", stops, {"A": 10.0, "B": 40.0})
        assert stats.count == 4
        assert stats.min == 10.0
        assert stats.max == 40.0

    def test_empty(self):
        stats = depth_stats("victoria", [], {})
        assert stats.count == 0
        assert stats.min is None
        assert stats.max is None
