"""Curated per-station depth anchors.

The table is a small hand-maintained CSV::

    # comments and blank lines are ignored
    naptan_id,name,depth_m,source_url,notes
    940GZZLUVIC,Victoria,27.5,https://...,

Only columns 0 (station id) and 2 (depth in metres) are read. Values are split
on bare commas; there is no quoting, so the name column must not contain one.
"""
from __future__ import annotations

import logging
import math
import re
from typing import Dict

from tube_strata import config
from tube_strata.sources import DataSource, SourceUnavailable

logger = logging.getLogger(__name__)

# Plain decimal with optional exponent; rejects "1_000", "0x10", "inf", "nan"
_DECIMAL_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def parse_anchor_table(text: str) -> Dict[str, float]:
    """Parse the depth table into ``{station_id: depth_m}``.

    Malformed rows (empty id, missing or non-numeric depth) are skipped.
    """
    lines = [line.strip() for line in text.splitlines()]
    lines = [line for line in lines if line and not line.startswith("#")]
    if not lines:
        return {}

    anchors: Dict[str, float] = {}
    for line in lines[1:]:  # first remaining line is the header
        cols = line.split(",")
        station_id = cols[0].strip()
        depth_str = cols[2].strip() if len(cols) > 2 else ""
        if _DECIMAL_RE.fullmatch(depth_str):
            depth = float(depth_str)
        else:
            depth = math.nan
        if not station_id or not math.isfinite(depth):
            logger.debug(f"Skipping anchor row: {line!r}")
            continue
        anchors[station_id] = depth
    return anchors


async def load_station_depth_anchors(
    source: DataSource, path: str = config.ANCHOR_TABLE_PATH,
) -> Dict[str, float]:
    """Load the anchor table; any failure yields an empty mapping."""
    try:
        text = await source.get_text(path)
    except SourceUnavailable as e:
        logger.warning(f"Station depth anchors unavailable: {e}")
        return {}

    anchors = parse_anchor_table(text)
    logger.info(f"Loaded {len(anchors)} station depth anchors from {path}")
    return anchors
