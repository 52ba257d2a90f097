"""Elevation model for layered 3D transit network scenes."""

__version__ = "0.1.0"
