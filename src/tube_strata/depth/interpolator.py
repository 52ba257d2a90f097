"""Depth interpolation along a line between anchored stations."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from tube_strata.network.route_sequence import LineStop
from tube_strata.utils.math_helpers import cumulative_distances, interpolate_linear


@dataclass(frozen=True)
class AnchorPoint:
    """A stop on the line with a measured depth."""
    index: int                    # Position in the stop sequence
    station_id: str
    depth: float                  # Metres below ground
    distance: float               # Cumulative distance along the line (meters)


@dataclass
class DepthInterpolator:
    """Piecewise-linear depth profile along one line.

    Distances are the running haversine sum between consecutive stops, so the
    profile follows travel order rather than geographic position. Outside the
    first/last anchor the nearest anchor depth is held flat.
    """
    stops: List[LineStop]
    distances: List[float]
    anchor_points: List[AnchorPoint]
    _index_by_id: Dict[str, int] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        if not self._index_by_id:
            for i, stop in enumerate(self.stops):
                self._index_by_id.setdefault(stop.station_id, i)

    @classmethod
    def build(
        cls, stops: Sequence[LineStop], anchors: Optional[Mapping[str, float]],
    ) -> DepthInterpolator:
        stops = list(stops)
        distances = cumulative_distances([(s.lat, s.lon) for s in stops])
        anchors = anchors or {}
        anchor_points = [
            AnchorPoint(
                index=i,
                station_id=stop.station_id,
                depth=float(anchors[stop.station_id]),
                distance=distances[i],
            )
            for i, stop in enumerate(stops)
            if stop.station_id in anchors
        ]
        return cls(stops=stops, distances=distances, anchor_points=anchor_points)

    @property
    def has_anchors(self) -> bool:
        return bool(self.anchor_points)

    def distance_of(self, station_id: str) -> Optional[float]:
        """Cumulative distance of a stop, or None if it is not on the line."""
        idx = self._index_by_id.get(station_id)
        return None if idx is None else self.distances[idx]

    def depth_at(self, station_id: str) -> Optional[float]:
        """Interpolated depth for a stop on this line.

        Returns None if the stop is not on the line or the line has no anchors.
        """
        idx = self._index_by_id.get(station_id)
        if idx is None:
            return None

        for ap in self.anchor_points:
            if ap.station_id == station_id:
                return ap.depth

        station_dist = self.distances[idx]
        before: Optional[AnchorPoint] = None
        after: Optional[AnchorPoint] = None
        for ap in self.anchor_points:
            if ap.distance <= station_dist:
                before = ap
            else:
                after = ap
                break

        if before is not None and after is not None:
            return interpolate_linear(
                station_dist, before.distance, before.depth, after.distance, after.depth,
            )
        if before is not None:
            return before.depth
        if after is not None:
            return after.depth
        return None

    __call__ = depth_at


def build_depth_interpolator(
    stops: Sequence[LineStop], anchors: Optional[Mapping[str, float]],
) -> DepthInterpolator:
    """Build the depth profile for a line from its stops and known anchors."""
    return DepthInterpolator.build(stops, anchors)
