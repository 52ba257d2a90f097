"""Load the terrain heightmap from its JSON metadata and raster image.

Metadata files look like::

    {"heightmap": "london_full_height_u16.png",
     "bounds_m": [468733, 122779, 610563, 237769]}

The raster name is resolved relative to the metadata file's directory.
"""
from __future__ import annotations

import io
import logging
import posixpath
from typing import Any, Optional, Sequence, Tuple

import numpy as np
from PIL import Image, UnidentifiedImageError

from tube_strata import config
from tube_strata.sources import DataSource, SourceUnavailable
from tube_strata.terrain.model import TerrainModel
from tube_strata.utils.math_helpers import is_finite_number

logger = logging.getLogger(__name__)

DEFAULT_META_PATHS = (config.TERRAIN_META_PATH, config.TERRAIN_FALLBACK_META_PATH)


class TerrainDecodeError(ValueError):
    """Terrain metadata or raster could not be interpreted."""


def parse_terrain_meta(meta: Any) -> Tuple[str, Tuple[float, float, float, float]]:
    """Extract ``(heightmap_name, bounds)`` from a metadata document."""
    if not isinstance(meta, dict):
        raise TerrainDecodeError("terrain metadata is not an object")
    name = meta.get("heightmap") or meta.get("heightmapFileName")
    if not isinstance(name, str) or not name.strip():
        raise TerrainDecodeError("terrain metadata has no heightmap file name")
    bounds = meta.get("bounds_m")
    if (not isinstance(bounds, (list, tuple)) or len(bounds) != 4
            or not all(is_finite_number(b) for b in bounds)):
        raise TerrainDecodeError(f"terrain metadata has invalid bounds_m: {bounds!r}")
    return name.strip(), tuple(float(b) for b in bounds)


def decode_height_grid(data: bytes) -> np.ndarray:
    """Decode a raster into a 2D unsigned grid of height samples.

    Grayscale 8/16-bit images are kept at their native depth; for colour
    images the red channel is used.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            if img.mode in ("1", "P"):
                img = img.convert("RGB" if img.mode == "P" else "L")
            mode = img.mode
            arr = np.asarray(img)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise TerrainDecodeError(f"cannot decode heightmap image ({e})") from e

    if arr.ndim == 3:
        arr = arr[:, :, 0]

    if mode.startswith("I;16"):
        arr = arr.astype(np.uint16)
    elif mode == "I":
        # 16-bit PNGs open as 32-bit integer mode in some Pillow versions
        if arr.size and (arr.min() < 0 or arr.max() > 65535):
            raise TerrainDecodeError("heightmap samples exceed 16-bit range")
        arr = arr.astype(np.uint16)
    elif arr.dtype != np.uint8:
        raise TerrainDecodeError(f"unsupported heightmap mode {mode!r}")

    if arr.ndim != 2 or arr.size == 0:
        raise TerrainDecodeError(f"unexpected heightmap shape {arr.shape}")
    return arr


async def _load_from(source: DataSource, meta_path: str, **scene) -> TerrainModel:
    meta = await source.get_json(meta_path)
    name, bounds = parse_terrain_meta(meta)
    raster_path = posixpath.join(posixpath.dirname(meta_path), name)
    grid = decode_height_grid(await source.get_bytes(raster_path))
    return TerrainModel(bounds=bounds, height_grid=grid, heightmap=name, **scene)


async def load_terrain_model(
    source: DataSource,
    meta_paths: Sequence[str] = DEFAULT_META_PATHS,
    scene_size: float = config.TERRAIN.size,
    displacement_scale: float = config.TERRAIN.displacement_scale,
    displacement_bias: float = config.TERRAIN.displacement_bias,
    base_y: float = config.TERRAIN.base_y,
) -> Optional[TerrainModel]:
    """Load the first available terrain, full coverage before the fallback.

    Returns None if no candidate can be fetched and decoded.
    """
    scene = dict(
        scene_size=scene_size,
        displacement_scale=displacement_scale,
        displacement_bias=displacement_bias,
        base_y=base_y,
    )
    for meta_path in meta_paths:
        try:
            model = await _load_from(source, meta_path, **scene)
        except SourceUnavailable as e:
            logger.info(f"Terrain source unavailable: {e}")
            continue
        except TerrainDecodeError as e:
            logger.warning(f"Terrain {meta_path} could not be decoded: {e}")
            continue
        logger.info(
            f"Loaded terrain {model.heightmap} ({model.cols}x{model.rows}, "
            f"{model.height_grid.dtype}) from {meta_path}"
        )
        return model

    logger.warning("No terrain heightmap available")
    return None
