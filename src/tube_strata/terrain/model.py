"""Terrain heightmap model and height sampling.

The heightmap is drawn as a square plane of ``scene_size`` metres centred on
the scene origin and displaced by the renderer as::

    y = base_y + h * displacement_scale + displacement_bias

where ``h`` is the normalized texel value. The functions here reproduce that
law on the CPU so markers placed by hand sit on the rendered surface.

The grid is stored in image row order (row 0 is the top/north edge) and is
flipped when mapped to scene Z. No geodetic alignment between the BNG raster
and the scene's tangent plane is attempted; the plane is just laid under the
network.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from tube_strata import config
from tube_strata.utils.math_helpers import clamp, round_half_up


@dataclass(frozen=True, eq=False)
class TerrainModel:
    """A loaded heightmap and its scene placement."""
    bounds: Tuple[float, float, float, float]  # (xmin, ymin, xmax, ymax) BNG metres
    height_grid: np.ndarray       # (rows, cols) uint8 or uint16, row 0 = top
    scene_size: float = config.TERRAIN.size
    displacement_scale: float = config.TERRAIN.displacement_scale
    displacement_bias: float = config.TERRAIN.displacement_bias
    base_y: float = config.TERRAIN.base_y
    heightmap: str = ""           # Raster file name from the metadata

    def __post_init__(self):
        grid = np.asarray(self.height_grid)
        if grid.ndim != 2 or grid.size == 0:
            raise ValueError(f"height grid must be a non-empty 2D array, got shape {grid.shape}")
        if grid.dtype.kind not in "ui":
            raise ValueError(f"height grid must hold integer samples, got {grid.dtype}")
        grid = grid.view()
        grid.flags.writeable = False
        object.__setattr__(self, "height_grid", grid)

    @property
    def rows(self) -> int:
        return int(self.height_grid.shape[0])

    @property
    def cols(self) -> int:
        return int(self.height_grid.shape[1])

    @property
    def width_m(self) -> float:
        return self.bounds[2] - self.bounds[0]

    @property
    def height_m(self) -> float:
        return self.bounds[3] - self.bounds[1]

    @property
    def sample_max(self) -> int:
        """Full-scale sample value for the grid's dtype (255 or 65535)."""
        dtype = self.height_grid.dtype
        if dtype == np.uint8:
            return 255
        if dtype == np.uint16:
            return 65535
        return int(np.iinfo(dtype).max)

    def ground_y_at(self, x: float, z: float) -> float:
        """Scene Y of the rendered terrain surface above planar (x, z)."""
        u, v = planar_to_normalized_uv(x, z, self.scene_size)
        return world_height_offset(sample_normalized_height(u, v, self), self)


def world_height_offset(normalized_height: Optional[float], model: TerrainModel) -> float:
    """Scene Y for a normalized height sample.

    Values outside [0, 1] extrapolate linearly; a missing or non-finite sample
    counts as 0.
    """
    h = normalized_height
    if h is None or not math.isfinite(h):
        h = 0.0
    return model.base_y + (h * model.displacement_scale + model.displacement_bias)


def planar_to_normalized_uv(x: float, z: float, scene_size: float) -> Tuple[float, float]:
    """Map scene (x, z) to texture (u, v) on the origin-centred terrain plane."""
    if scene_size <= 0:
        raise ValueError(f"scene_size must be positive, got {scene_size}")
    u = (x + scene_size / 2) / scene_size
    v = (z + scene_size / 2) / scene_size
    return (u, v)


def sample_normalized_height(u: float, v: float, model: TerrainModel) -> float:
    """Nearest-texel height in [0, 1] at texture coordinates (u, v).

    u and v are clamped to [0, 1]. v is flipped because image rows run
    top-down while v runs south to north.
    """
    uu = clamp(u, 0.0, 1.0)
    vv = clamp(v, 0.0, 1.0)
    col = round_half_up(uu * (model.cols - 1))
    row = round_half_up((1.0 - vv) * (model.rows - 1))
    return float(model.height_grid[row, col]) / model.sample_max
