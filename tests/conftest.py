"""Shared fixtures: a copy of the sample data tree with a generated heightmap."""
import shutil
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from tube_strata.sources import LocalDataSource

DATA_DIR = Path(__file__).parent / "data"

# 9x9 16-bit ramp: sample value = (row * 9 + col) * 500
TERRAIN_GRID = (np.arange(81, dtype=np.uint16) * 500).reshape(9, 9)


def write_png(path: Path, grid: np.ndarray) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(grid).save(path, format="PNG")
    return path


@pytest.fixture
def data_root(tmp_path):
    """Sample data with the fallback (Victoria) terrain only."""
    root = tmp_path / "data"
    shutil.copytree(DATA_DIR, root)
    write_png(root / "terrain" / "victoria_dtm_u16.png", TERRAIN_GRID)
    return root


@pytest.fixture
def source(data_root):
    return LocalDataSource(data_root)
