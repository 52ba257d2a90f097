"""Shaft registry and elevation propagation.

Shafts are created once per line from ``<line>/shafts.json``::

    {"shafts": [{"id": "VIC", "x": 120.5, "z": -340.0,
                 "platformY": -27.0, "groundY": 0.0}, ...]}

Ground heights usually arrive later than the shafts (terrain loads slowly)
and platform heights may be refined once depth anchors load. Both are applied
in place: only the affected marker and link endpoint move.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional

from tube_strata import config
from tube_strata.shafts.shaft import ShaftRecord
from tube_strata.sources import DataSource, SourceUnavailable
from tube_strata.terrain.model import TerrainModel
from tube_strata.utils.math_helpers import is_finite_number

logger = logging.getLogger(__name__)


def _override(values: Optional[Mapping[str, Any]], shaft_id: Optional[str], default):
    if values and shaft_id and is_finite_number(values.get(shaft_id)):
        return values[shaft_id]
    return default


class ShaftRegistry:
    """Shafts of one line, addressable by id."""

    def __init__(self, records: Optional[List[ShaftRecord]] = None):
        self.records: List[ShaftRecord] = []
        self._by_id: Dict[str, ShaftRecord] = {}
        for record in records or []:
            self.add(record)

    def add(self, record: ShaftRecord) -> None:
        self.records.append(record)
        if record.id:
            self._by_id[record.id] = record

    @classmethod
    def from_dataset(
        cls,
        data: Any,
        platform_y_by_id: Optional[Mapping[str, float]] = None,
        ground_y_by_id: Optional[Mapping[str, float]] = None,
    ) -> ShaftRegistry:
        """Build records from a shafts dataset.

        Finite values in the override mappings take precedence over the
        dataset's own platformY/groundY.
        """
        registry = cls()
        rows = data.get("shafts") if isinstance(data, dict) else None
        if rows is not None and not isinstance(rows, list):
            logger.warning(f"Ignoring shafts dataset: 'shafts' is {type(rows).__name__}, not a list")
            rows = None
        for row in rows or []:
            if not isinstance(row, dict):
                continue
            shaft_id = str(row["id"]) if row.get("id") else None
            platform_y = _override(platform_y_by_id, shaft_id, row.get("platformY"))
            ground_y = _override(ground_y_by_id, shaft_id, row.get("groundY"))
            values = (row.get("x"), row.get("z"), platform_y, ground_y)
            if not all(is_finite_number(v) for v in values):
                logger.warning(f"Skipping shaft {shaft_id or '<unnamed>'}: non-numeric position")
                continue
            x, z, platform_y, ground_y = (float(v) for v in values)
            registry.add(ShaftRecord(shaft_id, x, z, platform_y, ground_y))
        return registry

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[ShaftRecord]:
        return iter(self.records)

    def __contains__(self, shaft_id) -> bool:
        return shaft_id in self._by_id

    def get(self, shaft_id: str) -> Optional[ShaftRecord]:
        return self._by_id.get(shaft_id)

    @property
    def ids(self) -> List[str]:
        return list(self._by_id)

    def update_ground_y(self, shaft_id: str, y) -> bool:
        """Move one shaft's ground end; unknown ids and bad values are ignored."""
        record = self._by_id.get(shaft_id)
        return record is not None and record.update_ground_y(y)

    def update_platform_y(self, shaft_id: str, y) -> bool:
        """Move one shaft's platform end; unknown ids and bad values are ignored."""
        record = self._by_id.get(shaft_id)
        return record is not None and record.update_platform_y(y)

    def update_ground_y_by_id(self, values: Optional[Mapping[str, Any]]) -> int:
        """Apply ground heights by id. Returns the number of shafts moved."""
        return sum(self.update_ground_y(sid, y) for sid, y in (values or {}).items())

    def update_platform_y_by_id(self, values: Optional[Mapping[str, Any]]) -> int:
        """Apply platform heights by id. Returns the number of shafts moved."""
        return sum(self.update_platform_y(sid, y) for sid, y in (values or {}).items())

    def seat_on_terrain(self, model: Optional[TerrainModel]) -> int:
        """Drop every addressable shaft's ground end onto the terrain surface."""
        if model is None:
            return 0
        ground = {r.id: model.ground_y_at(r.x, r.z) for r in self.records if r.id}
        return self.update_ground_y_by_id(ground)

    def apply_depths(
        self, depth_by_id: Optional[Mapping[str, Any]], surface_y: float = config.SURFACE_Y,
    ) -> int:
        """Set platform heights to ``surface_y - depth`` for each known depth."""
        platform = {
            sid: surface_y - depth
            for sid, depth in (depth_by_id or {}).items()
            if is_finite_number(depth)
        }
        return self.update_platform_y_by_id(platform)

    def dispose(self) -> None:
        """Drop all records; the registry is empty afterwards."""
        self.records.clear()
        self._by_id.clear()


async def load_line_shafts(source: DataSource, line_id: Optional[str]) -> Optional[dict]:
    """Fetch a line's shafts dataset, or None if there is none."""
    lid = str(line_id or "").strip().lower()
    if not lid:
        return None
    path = f"{lid}/{config.SHAFTS_FILE_NAME}"
    try:
        data = await source.get_json(path)
    except SourceUnavailable as e:
        logger.info(f"No shafts for {lid}: {e}")
        return None
    if not isinstance(data, dict):
        logger.warning(f"Ignoring shafts dataset for {lid}: not an object")
        return None
    return data
