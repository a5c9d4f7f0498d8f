"""
FocusTrack Source Package

Classroom subject tracking from per-frame detections:
- Constant-velocity Kalman smoothing per subject
- Gated greedy / Hungarian data association
- Track lifecycle with occlusion coasting
- Class-wide attention statistics
"""

from focustrack.analytics import AttentionLevel, AttentionSummary, summarize
from focustrack.tracking import (
    BoundingBox,
    Detection,
    LinearKalmanFilter,
    Track,
    TrackerConfig,
    TrackManager,
    TrackStatus,
)

__version__ = "1.0.0"
__author__ = "FocusTrack Contributors"

__all__ = [
    # Tracking
    "LinearKalmanFilter",
    "TrackManager",
    "TrackerConfig",
    "Track",
    "TrackStatus",
    "Detection",
    "BoundingBox",
    # Analytics
    "AttentionLevel",
    "AttentionSummary",
    "summarize",
]
