"""Mathematical helpers for great-circle distances and interpolation."""
from __future__ import annotations

import math
import numbers
from typing import Any, List, Sequence, Tuple

from tube_strata import config


def haversine_distance(
    lat1: float, lon1: float, lat2: float, lon2: float,
    radius: float = config.EARTH_RADIUS_M,
) -> float:
    """Great-circle distance between two WGS84 points.

    Args:
        lat1, lon1: First point in decimal degrees.
        lat2, lon2: Second point in decimal degrees.
        radius: Sphere radius in meters.

    Returns:
        Distance in meters.
    """
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (math.sin(d_lat / 2) ** 2
         + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2))
         * math.sin(d_lon / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return radius * c


def cumulative_distances(coords: Sequence[Tuple[float, float]]) -> List[float]:
    """Running haversine distance along a sequence of (lat, lon) points.

    The first point is at 0.0. An empty sequence gives an empty list.
    """
    if not coords:
        return []
    total = 0.0
    result = [0.0]
    for (lat1, lon1), (lat2, lon2) in zip(coords, coords[1:]):
        total += haversine_distance(lat1, lon1, lat2, lon2)
        result.append(total)
    return result


def interpolate_linear(x: float, x1: float, y1: float, x2: float, y2: float) -> float:
    """Linear interpolation between two points.

    Falls back to y1 when the two x values coincide.
    """
    if x2 == x1:
        return y1
    t = (x - x1) / (x2 - x1)
    return y1 + t * (y2 - y1)


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp value to range [min_val, max_val]."""
    return max(min_val, min(max_val, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for non-negatives."""
    return int(math.floor(value + 0.5))


def is_finite_number(value: Any) -> bool:
    """True for real numbers that are not NaN or infinite (bools excluded)."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(value)
