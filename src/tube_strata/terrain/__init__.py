"""Terrain heightmap loading and sampling."""
