"""Elevation model constants and default scene settings.

References:
- TfL line identifiers (api.tfl.gov.uk/Line/Mode/tube)
- London full-coverage DTM, 10m resolution, EPSG:27700 (British National Grid)

All vertical and planar dimensions are in metres. Scene Y is up; scene X/Z are
local metres from the network origin.
"""
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType


class LineKind(Enum):
    """Construction type of an underground line."""
    SUB_SURFACE = "sub-surface"    # Cut-and-cover, just below street level
    DEEP_LEVEL = "deep-level"      # Bored tube tunnels


# ── Depth heuristics ─────────────────────────────────────────────────
# Construction type per line id.
LINE_KIND = MappingProxyType({
    "circle": LineKind.SUB_SURFACE,
    "district": LineKind.SUB_SURFACE,
    "metropolitan": LineKind.SUB_SURFACE,
    "hammersmith-city": LineKind.SUB_SURFACE,
    "bakerloo": LineKind.DEEP_LEVEL,
    "central": LineKind.DEEP_LEVEL,
    "jubilee": LineKind.DEEP_LEVEL,
    "northern": LineKind.DEEP_LEVEL,
    "piccadilly": LineKind.DEEP_LEVEL,
    "victoria": LineKind.DEEP_LEVEL,
    "waterloo-city": LineKind.DEEP_LEVEL,
})

# Metres below ground per line id, used when a station has no measured depth.
LINE_DEPTH_M = MappingProxyType({
    # sub-surface
    "circle": 8.0,
    "district": 10.0,
    "metropolitan": 10.0,
    "hammersmith-city": 9.0,

    # deep-level
    "bakerloo": 25.0,
    "central": 28.0,
    "jubilee": 32.0,
    "northern": 30.0,
    "piccadilly": 30.0,
    "victoria": 33.0,
    "waterloo-city": 35.0,
})

DEFAULT_DEPTH_M = 18.0          # Generic underground when the line is unknown

# ── Geodesy ──────────────────────────────────────────────────────────
EARTH_RADIUS_M = 6371000.0      # Mean radius for haversine distances


# ── Terrain ──────────────────────────────────────────────────────────
@dataclass(frozen=True)
class TerrainConfig:
    """Scene placement of the terrain heightmap plane."""
    size: float                 # Plane edge length in scene metres
    base_y: float               # Plane centre elevation
    displacement_scale: float   # Scene metres per unit of normalized height
    displacement_bias: float    # Added after scaling


# london_full_height_u16.png: 14183x11499 px, 468733-610563 E, 122779-237769 N
TERRAIN = TerrainConfig(
    size=28000.0,
    base_y=-6.0,
    displacement_scale=60.0,
    displacement_bias=-30.0,
)

# ── Resource paths (relative to the data source root) ───────────────
ANCHOR_TABLE_PATH = "station_depths.csv"
TERRAIN_META_PATH = "terrain/london_full_height.json"
TERRAIN_FALLBACK_META_PATH = "terrain/victoria_dtm_u16.json"
SHAFTS_FILE_NAME = "shafts.json"
ROUTE_SEQUENCE_PATH = "tfl/route-sequence/{line}.json"

# ── Shaft markers ────────────────────────────────────────────────────
SHAFT_MARKER_SIZE = 18.0        # Cube edge in scene metres
SURFACE_Y = 0.0                 # Scene ground datum for depth -> platform Y

# ── HTTP ─────────────────────────────────────────────────────────────
HTTP_TIMEOUT_S = 30.0
