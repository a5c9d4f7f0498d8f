"""
Tracking Module

Multi-subject tracking engine.

Components:
    - LinearKalmanFilter: Constant Velocity Kalman Filter, one per track
    - TrackManager: Per-frame predict/associate/update/age cycle
    - TrackSet: Active tracks keyed by ID
    - Track: Individual subject track container
    - TrackStatus: Track lifecycle states
    - GreedyNearestNeighbor / HungarianMatcher: Association policies
    - Detection / BoundingBox: Inbound detector contract

Example:
    >>> from focustrack.tracking import Detection, TrackManager
    >>> manager = TrackManager()
    >>> tracks = manager.update([Detection(120, 80), Detection(400, 220)])
"""

from .association import (
    AssociationPolicy,
    AssociationResult,
    GreedyNearestNeighbor,
    HungarianMatcher,
    make_policy,
)
from .detection import UNKNOWN, BoundingBox, Detection, DetectionFormatError
from .kalman import KalmanState, LinearKalmanFilter
from .tracker import Track, TrackerConfig, TrackManager, TrackSet, TrackStatus

__all__ = [
    "LinearKalmanFilter",
    "KalmanState",
    "TrackManager",
    "TrackerConfig",
    "TrackSet",
    "Track",
    "TrackStatus",
    "AssociationPolicy",
    "AssociationResult",
    "GreedyNearestNeighbor",
    "HungarianMatcher",
    "make_policy",
    "Detection",
    "BoundingBox",
    "DetectionFormatError",
    "UNKNOWN",
]
