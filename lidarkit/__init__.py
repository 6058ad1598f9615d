"""LiDAR driver parameters, messages, frame assembly, point-cloud conversion, UDP framing and an NTRIP relay."""

__version__ = "0.1.0"