"""Shafts linking platforms to ground level."""
