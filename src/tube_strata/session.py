"""Per-session elevation state shared by every line in the scene.

Anchors and terrain load once and are read-only afterwards. Lines can be
loaded before either finishes; ``LineElevation.refresh`` re-applies depths
and ground heights in place once they arrive.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from tube_strata.depth.anchors import load_station_depth_anchors
from tube_strata.depth.resolver import DepthResolver, Resolution
from tube_strata.network.route_sequence import LineStop, load_route_sequence
from tube_strata.shafts.registry import ShaftRegistry, load_line_shafts
from tube_strata.sources import DataSource
from tube_strata.terrain.loader import load_terrain_model
from tube_strata.terrain.model import TerrainModel

logger = logging.getLogger(__name__)


@dataclass
class LineElevation:
    """Resolved depths and shafts for one line."""
    line_id: str
    stops: List[LineStop]
    resolver: DepthResolver
    shafts: ShaftRegistry
    resolutions: Dict[str, Resolution] = field(default_factory=dict)

    @property
    def depths(self) -> Dict[str, float]:
        return {sid: r.depth for sid, r in self.resolutions.items()}

    def resolve(self) -> None:
        self.resolutions = {
            stop.station_id: self.resolver.resolve_with_source(stop.station_id)
            for stop in self.stops
        }

    def refresh(self, session: ElevationSession) -> None:
        """Re-resolve depths and re-seat shafts from the session's current data."""
        self.resolver = DepthResolver.for_line(self.line_id, session.anchors, self.stops)
        self.resolve()
        moved_platform = self.shafts.apply_depths(
            {sid: d for sid, d in self.depths.items() if sid in self.shafts}
        )
        moved_ground = self.shafts.seat_on_terrain(session.terrain)
        logger.debug(
            f"{self.line_id}: {moved_platform} platforms and {moved_ground} ground ends updated"
        )

    def dispose(self) -> None:
        self.shafts.dispose()


class ElevationSession:
    """Owns the anchor table and terrain model for one scene."""

    def __init__(self, source: DataSource):
        self.source = source
        self.anchors: Dict[str, float] = {}
        self.terrain: Optional[TerrainModel] = None
        self.lines: Dict[str, LineElevation] = {}
        self._loading: Optional[asyncio.Future] = None

    @property
    def loaded(self) -> bool:
        return self._loading is not None and self._loading.done()

    async def _load(self) -> None:
        anchors, terrain = await asyncio.gather(
            load_station_depth_anchors(self.source),
            load_terrain_model(self.source),
        )
        self.anchors = anchors
        self.terrain = terrain

    async def load(self) -> None:
        """Load anchors and terrain; later calls wait on the first load."""
        if self._loading is None:
            self._loading = asyncio.ensure_future(self._load())
        await self._loading

    async def load_line(self, line_id: str, wait: bool = True) -> LineElevation:
        """Load a line's stops and shafts and resolve their elevations.

        With ``wait=False`` the line is built from whatever session data is
        already present; call ``refresh`` after ``load`` completes.
        """
        lid = (line_id or "").strip().lower()
        if wait:
            await self.load()

        stops, shafts_data = await asyncio.gather(
            load_route_sequence(self.source, lid),
            load_line_shafts(self.source, lid),
        )
        line = LineElevation(
            line_id=lid,
            stops=stops or [],
            resolver=DepthResolver.for_line(lid, self.anchors, stops),
            shafts=ShaftRegistry.from_dataset(shafts_data),
        )
        line.refresh(self)
        previous = self.lines.pop(lid, None)
        if previous is not None:
            previous.dispose()
        self.lines[lid] = line
        logger.info(f"Line {lid}: {len(line.stops)} stops, {len(line.shafts)} shafts")
        return line

    def unload_line(self, line_id: str) -> None:
        line = self.lines.pop((line_id or "").strip().lower(), None)
        if line is not None:
            line.dispose()
