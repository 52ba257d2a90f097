"""Line stop sequences."""
