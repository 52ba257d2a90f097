"""Shaft record: the vertical link from a platform up to ground level."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np

from tube_strata import config
from tube_strata.utils.math_helpers import is_finite_number

# Vertex order of the link polyline
GROUND_VERTEX = 0
PLATFORM_VERTEX = 1


@dataclass
class Marker:
    """A cube marker centred on a position."""
    x: float
    y: float
    z: float
    size: float = config.SHAFT_MARKER_SIZE

    @property
    def position(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass(eq=False)
class LinkGeometry:
    """Two-point line geometry, laid out like a renderer position buffer."""
    positions: np.ndarray         # (2, 3) float, rows = vertices
    version: int = 0              # Bumped on every in-place edit
    bounding_center: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    bounding_radius: float = 0.0

    @classmethod
    def from_points(cls, ground, platform) -> LinkGeometry:
        link = cls(positions=np.array([ground, platform], dtype=float))
        link.compute_bounding_sphere()
        return link

    def vertex(self, i: int) -> Tuple[float, float, float]:
        x, y, z = self.positions[i]
        return (float(x), float(y), float(z))

    def set_y(self, i: int, y: float) -> None:
        self.positions[i, 1] = y
        self.version += 1
        self.compute_bounding_sphere()

    def compute_bounding_sphere(self) -> None:
        center = self.positions.mean(axis=0)
        self.bounding_center = tuple(float(c) for c in center)
        self.bounding_radius = float(np.linalg.norm(self.positions - center, axis=1).max())


@dataclass
class ShaftRecord:
    """A shaft and its derived scene artifacts.

    ``platform_y`` and ``ground_y`` are the only mutable inputs; the markers
    and link endpoints are kept in sync by the ``update_*`` methods.
    """
    id: Optional[str]
    x: float
    z: float
    platform_y: float
    ground_y: float
    platform: Marker = field(init=False)
    ground: Marker = field(init=False)
    link: LinkGeometry = field(init=False)

    def __post_init__(self):
        self.platform = Marker(self.x, self.platform_y, self.z)
        self.ground = Marker(self.x, self.ground_y, self.z)
        self.link = LinkGeometry.from_points(
            (self.x, self.ground_y, self.z),
            (self.x, self.platform_y, self.z),
        )

    @property
    def depth(self) -> float:
        """Vertical distance from ground down to the platform."""
        return self.ground_y - self.platform_y

    def update_ground_y(self, y) -> bool:
        """Move the ground end. Non-finite values are ignored."""
        if not is_finite_number(y):
            return False
        self.ground_y = float(y)
        self.ground.y = self.ground_y
        self.link.set_y(GROUND_VERTEX, self.ground_y)
        return True

    def update_platform_y(self, y) -> bool:
        """Move the platform end. Non-finite values are ignored."""
        if not is_finite_number(y):
            return False
        self.platform_y = float(y)
        self.platform.y = self.platform_y
        self.link.set_y(PLATFORM_VERTEX, self.platform_y)
        return True
