"""Tests for per-session elevation loading and late-arriving data."""
import asyncio
import json

import pytest

from tube_strata.session import ElevationSession
from tube_strata.shafts.shaft import GROUND_VERTEX, PLATFORM_VERTEX
from tube_strata.sources import LocalDataSource

WRR = "940GZZLUWRR"
GPK = "940GZZLUGPK"
VIC = "940GZZLUVIC"
BXN = "940GZZLUBXN"


class TestElevationSession:
    def test_load(self, source):
        session = ElevationSession(source)
        asyncio.run(session.load())
        assert session.loaded
        assert session.anchors == {BXN: 20.0, WRR: 30.0}
        assert session.terrain is not None

    def test_load_line(self, source):
        session = ElevationSession(source)
        line = asyncio.run(session.load_line("victoria"))

        assert len(line.stops) == 8
        assert line.resolutions[WRR].strategy == "exact"
        assert line.resolutions[BXN].depth == 20.0
        vic = line.resolutions[VIC]
        assert vic.strategy == "interpolate"
        assert 20.0 < vic.depth < 30.0

        # Shafts named after stations get their platform from the resolved depth
        assert line.shafts.get(WRR).platform_y == -30.0
        assert line.shafts.get(GPK).platform_y == pytest.approx(-line.depths[GPK])
        # Other shafts keep the dataset value
        assert line.shafts.get("VENT-1").platform_y == -20.0

        for shaft in line.shafts:
            if shaft.id:
                assert shaft.ground_y == pytest.approx(session.terrain.ground_y_at(shaft.x, shaft.z))

    def test_line_without_data(self, tmp_path):
        session = ElevationSession(LocalDataSource(tmp_path))
        line = asyncio.run(session.load_line("northern"))
        assert line.stops == []
        assert len(line.shafts) == 0
        assert session.anchors == {}
        assert session.terrain is None

    def test_late_arriving_data_updates_in_place(self, source):
        async def scenario():
            session = ElevationSession(source)
            line = await session.load_line("victoria", wait=False)
            shaft = line.shafts.get(WRR)
            before = {
                "link": shaft.link,
                "platform_y": shaft.platform_y,
                "ground_y": shaft.ground_y,
                "strategy": line.resolutions[WRR].strategy,
            }
            await session.load()
            line.refresh(session)
            return session, line, shaft, before

        session, line, shaft, before = asyncio.run(scenario())

        # Provisional values came from the line heuristic and the dataset
        assert before["strategy"] == "line"
        assert before["platform_y"] == -33.0
        assert before["ground_y"] == 0.0

        assert line.shafts.get(WRR) is shaft
        assert shaft.link is before["link"]
        assert shaft.platform_y == -30.0
        assert shaft.link.vertex(PLATFORM_VERTEX)[1] == -30.0
        expected_ground = session.terrain.ground_y_at(shaft.x, shaft.z)
        assert shaft.ground_y == pytest.approx(expected_ground)
        assert shaft.link.vertex(GROUND_VERTEX)[1] == pytest.approx(expected_ground)

    def test_concurrent_loads_share_one_load(self, source):
        calls = []

        class CountingSource(LocalDataSource):
            def _read(self, path):
                calls.append(path)
                return super()._read(path)

        async def scenario():
            session = ElevationSession(CountingSource(source.root))
            await asyncio.gather(session.load(), session.load())
            await session.load()

        asyncio.run(scenario())
        assert calls.count("station_depths.csv") == 1

    def test_unload_line(self, source):
        async def scenario():
            session = ElevationSession(source)
            line = await session.load_line("victoria")
            session.unload_line("victoria")
            return session, line

        session, line = asyncio.run(scenario())
        assert "victoria" not in session.lines
        assert len(line.shafts) == 0

    def test_non_list_shafts_dataset(self, data_root):
        (data_root / "victoria" / "shafts.json").write_text(json.dumps({"shafts": 7}))
        session = ElevationSession(LocalDataSource(data_root))
        line = asyncio.run(session.load_line("victoria"))
        assert len(line.shafts) == 0
        assert len(line.stops) == 8
        assert line.resolutions[WRR].strategy == "exact"

    def test_non_list_route_sequences(self, data_root):
        (data_root / "tfl" / "route-sequence" / "victoria.json").write_text(
            json.dumps({"stopPointSequences": {"stopPoint": []}}))
        session = ElevationSession(LocalDataSource(data_root))
        line = asyncio.run(session.load_line("victoria"))
        assert line.stops == []
        assert len(line.shafts) == 4

    def test_unload_line_normalises_id(self, source):
        async def scenario():
            session = ElevationSession(source)
            line = await session.load_line("victoria")
            session.unload_line("  Victoria ")
            return session, line

        session, line = asyncio.run(scenario())
        assert session.lines == {}
        assert len(line.shafts) == 0

    def test_reload_disposes_previous_line(self, source):
        async def scenario():
            session = ElevationSession(source)
            first = await session.load_line("victoria")
            second = await session.load_line("VICTORIA")
            return session, first, second

        session, first, second = asyncio.run(scenario())
        assert first is not second
        assert session.lines == {"victoria": second}
        assert len(first.shafts) == 0
        assert len(second.shafts) == 4
