"""Station depths: measured anchors, interpolation and fallbacks."""
