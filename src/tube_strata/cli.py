"""Command-line interface: print a line's elevation profile."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from tube_strata import __version__, config
from tube_strata.depth.resolver import depth_stats
from tube_strata.network.route_sequence import segment_distances
from tube_strata.session import ElevationSession
from tube_strata.sources import open_source


def parse_args(args=None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="tube-strata",
        description="Resolve station depths, terrain heights and shaft elevations for a line",
    )
    parser.add_argument("data",
                        help="Data directory or http(s) base URL (station_depths.csv, terrain/, tfl/, <line>/)")
    parser.add_argument("-l", "--line", required=True,
                        help="Line id, e.g. victoria")
    parser.add_argument("--distances", action="store_true",
                        help="Also print straight-line distances between adjacent stops")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Log progress (-v info, -vv debug)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser.parse_args(args)


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def run(opts: argparse.Namespace) -> int:
    session = ElevationSession(open_source(opts.data))
    line = await session.load_line(opts.line)

    print(f"tube-strata v{__version__}")
    print(f"  Source:     {opts.data}")
    print(f"  Line:       {line.line_id}")
    kind = config.LINE_KIND.get(line.line_id)
    print(f"  Kind:       {kind.value if kind else 'unknown'}")
    print(f"  Anchors:    {len(session.anchors)}")
    if session.terrain is not None:
        t = session.terrain
        print(f"  Terrain:    {t.heightmap} ({t.cols}x{t.rows}, "
              f"{t.width_m / 1000:.1f}x{t.height_m / 1000:.1f}km)")
    else:
        print("  Terrain:    none")
    print()

    if not line.stops:
        print(f"Error: no route sequence for line {line.line_id!r}", file=sys.stderr)
        return 1

    # ── Station depths ────────────────────────────────────────────
    print(f"Station depths ({len(line.stops)} stops):")
    for stop in line.stops:
        r = line.resolutions[stop.station_id]
        print(f"  {stop.name:<36} {r.depth:7.2f}m  [{r.strategy}]")

    stats = depth_stats(line.line_id, line.stops, session.anchors)
    print(f"  Heuristic range: {stats.min:.1f}m - {stats.max:.1f}m over {stats.count} stops")
    print()

    # ── Shafts ────────────────────────────────────────────────────
    if len(line.shafts):
        print(f"Shafts ({len(line.shafts)}):")
        for shaft in line.shafts:
            print(f"  {shaft.id or '<unnamed>':<16} x={shaft.x:9.1f} z={shaft.z:9.1f}  "
                  f"ground={shaft.ground_y:7.2f}  platform={shaft.platform_y:7.2f}  "
                  f"depth={shaft.depth:6.2f}")
        print()

    # ── Optional distance report ──────────────────────────────────
    if opts.distances:
        segments = segment_distances(line.stops)
        total = sum(m for _, _, m in segments)
        print(f"Segments: {len(segments)}, total (straight-line) {total / 1000:.2f}km")
        for a, b, metres in segments:
            print(f"  {a.name} -> {b.name}: {metres:.0f}m ({metres / 1000:.2f}km)")

    return 0


def main(args=None) -> None:
    """Main entry point."""
    opts = parse_args(args)
    _configure_logging(opts.verbose)
    sys.exit(asyncio.run(run(opts)))
