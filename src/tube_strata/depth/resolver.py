"""Resolve a depth for every station on a line.

Depth sources are tried in priority order until one answers:

1. exact      -- measured depth from the anchor table
2. interpolate -- linear along the line between anchored stations
3. line       -- per-line heuristic from ``config.LINE_DEPTH_M``
4. default    -- ``config.DEFAULT_DEPTH_M``

The last strategy always answers, so ``DepthResolver.resolve`` always returns
a number.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence

from tube_strata import config
from tube_strata.depth.interpolator import DepthInterpolator, build_depth_interpolator
from tube_strata.network.route_sequence import LineStop


def depth_for_station(
    station_id: Optional[str],
    line_id: Optional[str],
    anchors: Optional[Mapping[str, float]],
) -> float:
    """Measured depth, else the line heuristic, else the generic default."""
    if anchors and station_id and station_id in anchors:
        return anchors[station_id]
    if line_id and line_id in config.LINE_DEPTH_M:
        return config.LINE_DEPTH_M[line_id]
    return config.DEFAULT_DEPTH_M


class DepthStrategy:
    """One link of the resolution chain."""
    name = ""

    def depth(self, station_id: str) -> Optional[float]:
        raise NotImplementedError


class ExactAnchor(DepthStrategy):
    name = "exact"

    def __init__(self, anchors: Optional[Mapping[str, float]]):
        self.anchors = anchors or {}

    def depth(self, station_id: str) -> Optional[float]:
        return self.anchors.get(station_id)


class Interpolated(DepthStrategy):
    name = "interpolate"

    def __init__(self, interpolator: DepthInterpolator):
        self.interpolator = interpolator

    def depth(self, station_id: str) -> Optional[float]:
        return self.interpolator.depth_at(station_id)


class LineHeuristic(DepthStrategy):
    name = "line"

    def __init__(self, line_id: Optional[str]):
        self.line_id = line_id

    def depth(self, station_id: str) -> Optional[float]:
        if not self.line_id:
            return None
        return config.LINE_DEPTH_M.get(self.line_id)


class GlobalDefault(DepthStrategy):
    name = "default"

    def __init__(self, depth: float = config.DEFAULT_DEPTH_M):
        self.value = depth

    def depth(self, station_id: str) -> Optional[float]:
        return self.value


@dataclass(frozen=True)
class Resolution:
    """A resolved depth and the strategy that produced it."""
    station_id: str
    depth: float
    strategy: str


class DepthResolver:
    """Ordered chain of depth strategies; the first non-None answer wins."""

    def __init__(self, strategies: Sequence[DepthStrategy]):
        self.strategies: List[DepthStrategy] = list(strategies)
        if not any(isinstance(s, GlobalDefault) for s in self.strategies):
            self.strategies.append(GlobalDefault())

    @classmethod
    def for_line(
        cls,
        line_id: Optional[str],
        anchors: Optional[Mapping[str, float]],
        stops: Optional[Sequence[LineStop]] = None,
    ) -> DepthResolver:
        """Standard chain for a line: exact, interpolate, line, default."""
        strategies: List[DepthStrategy] = [ExactAnchor(anchors)]
        if stops:
            strategies.append(Interpolated(build_depth_interpolator(stops, anchors)))
        strategies.append(LineHeuristic(line_id))
        strategies.append(GlobalDefault())
        return cls(strategies)

    def resolve_with_source(self, station_id: str) -> Resolution:
        for strategy in self.strategies:
            depth = strategy.depth(station_id)
            if depth is not None:
                return Resolution(station_id, float(depth), strategy.name)
        # GlobalDefault is always present
        raise AssertionError("depth chain produced no value")

    def resolve(self, station_id: str) -> float:
        """Depth in metres below ground for a station."""
        return self.resolve_with_source(station_id).depth

    def resolve_all(self, station_ids: Sequence[str]) -> dict:
        """``{station_id: depth}`` for each id."""
        return {sid: self.resolve(sid) for sid in station_ids}


@dataclass(frozen=True)
class DepthStats:
    """Summary of heuristic depths over a line."""
    count: int
    min: Optional[float]
    max: Optional[float]


def depth_stats(
    line_id: Optional[str],
    stops: Optional[Sequence[LineStop]],
    anchors: Optional[Mapping[str, float]],
) -> DepthStats:
    """Count, min and max of ``depth_for_station`` over a line's stops."""
    values = [depth_for_station(s.station_id, line_id, anchors) for s in stops or []]
    if not values:
        return DepthStats(count=0, min=None, max=None)
    return DepthStats(count=len(values), min=min(values), max=max(values))
