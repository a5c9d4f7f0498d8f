"""
FocusTrack I/O Package

Configuration, detection-log replay input and HDF5 session recording.
"""

from .config import ConfigError, SessionConfig, load_config, parse_config, save_config
from .detections import load_detection_log, parse_detection_log
from .recorder import TrackRecorder, read_track_positions

__all__ = [
    "ConfigError",
    "SessionConfig",
    "load_config",
    "parse_config",
    "save_config",
    "load_detection_log",
    "parse_detection_log",
    "TrackRecorder",
    "read_track_positions",
]
