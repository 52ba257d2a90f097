"""Line stop sequences from TfL route-sequence payloads."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from tube_strata import config
from tube_strata.sources import DataSource, SourceUnavailable
from tube_strata.utils.math_helpers import haversine_distance, is_finite_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LineStop:
    """A station on a line, in travel order."""
    station_id: str               # NaPTAN id, e.g. "940GZZLUVIC"
    name: str
    lat: float                    # WGS84 decimal degrees
    lon: float


def _parse_stop(raw: Any) -> Optional[LineStop]:
    if not isinstance(raw, dict):
        return None
    station_id = str(raw.get("id") or "").strip()
    lat = raw.get("lat")
    lon = raw.get("lon")
    if not station_id or not is_finite_number(lat) or not is_finite_number(lon):
        return None
    return LineStop(
        station_id=station_id,
        name=str(raw.get("name") or station_id),
        lat=float(lat),
        lon=float(lon),
    )


def select_richest_sequence(payload: Any) -> List[LineStop]:
    """Pick the branch variant with the most stop points.

    Ties go to the first variant listed. Stop points without an id or with a
    missing/non-finite coordinate are dropped.
    """
    if not isinstance(payload, dict):
        return []

    sequences = payload.get("stopPointSequences")
    if sequences is not None and not isinstance(sequences, list):
        logger.warning(
            f"Ignoring stopPointSequences: {type(sequences).__name__}, not a list")
        sequences = None

    best: Optional[list] = None
    for seq in sequences or []:
        stops = seq.get("stopPoint") if isinstance(seq, dict) else None
        if not isinstance(stops, list):
            continue
        if best is None or len(stops) > len(best):
            best = stops

    result = []
    for raw in best or []:
        stop = _parse_stop(raw)
        if stop is None:
            logger.debug(f"Dropping stop point without id/coordinates: {raw!r}")
            continue
        result.append(stop)
    return result


async def load_route_sequence(
    source: DataSource, line_id: str,
) -> Optional[List[LineStop]]:
    """Load a cached route sequence for a line.

    Returns None if the line id is empty or the resource is unavailable.
    """
    lid = (line_id or "").strip().lower()
    if not lid:
        return None
    path = config.ROUTE_SEQUENCE_PATH.format(line=lid)
    try:
        payload = await source.get_json(path)
    except SourceUnavailable as e:
        logger.warning(f"Route sequence unavailable for {lid}: {e}")
        return None

    stops = select_richest_sequence(payload)
    logger.info(f"Loaded {len(stops)} stops for {lid}")
    return stops


def segment_distances(stops: List[LineStop]) -> List[Tuple[LineStop, LineStop, float]]:
    """Straight-line distance for each adjacent pair of stops."""
    return [
        (a, b, haversine_distance(a.lat, a.lon, b.lat, b.lon))
        for a, b in zip(stops, stops[1:])
    ]
