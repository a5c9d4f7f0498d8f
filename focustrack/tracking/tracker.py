"""
Track Manager for Multi-Subject Tracking

Manages one track per observed subject using per-track Kalman Filters and
gated data association. Handles track initiation, maintenance, and deletion.

Track Lifecycle:
    ACTIVE (matched this frame) <-> COASTING (predicting only) -> DELETED

A track is deleted once it has gone unmatched for more than
``max_missed_frames`` consecutive frames (about one second at 30 FPS).
Deleted subjects are never re-identified; a returning subject gets a new ID.

Reference:
    - Blackman, S. "Multiple-Target Tracking with Radar Applications", 1986
    - Bar-Shalom, Y. "Multitarget-Multisensor Tracking", 1990
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from focustrack.analytics.attention import DEFAULT_FOCUSED_LABELS, is_focused

from .association import GATE_DISTANCE, AssociationPolicy, make_policy
from .detection import UNKNOWN, BoundingBox, Detection
from .kalman import INITIAL_UNCERTAINTY, MEASUREMENT_NOISE, PROCESS_NOISE, LinearKalmanFilter

logger = logging.getLogger(__name__)

MAX_MISSED_FRAMES = 30


class TrackStatus(Enum):
    """Track lifecycle states."""

    ACTIVE = "active"  # Matched in the latest frame
    COASTING = "coasting"  # No measurements, predicting only
    DELETED = "deleted"  # Removed from the track set


@dataclass
class TrackerConfig:
    """
    Track manager tuning.

    Attributes:
        gate_distance: Association gate (pixels); matches need distance < gate
        max_missed_frames: Delete a track once its misses exceed this
        initial_uncertainty: Initial covariance scale for new filters
        process_noise: Kalman Q scale
        measurement_noise: Kalman R scale
        unknown_name: Identity sentinel that never overwrites a known name
        focused_labels: Behavioral states counted as attentive
        association: Association policy name ("greedy" or "hungarian")
    """

    gate_distance: float = GATE_DISTANCE
    max_missed_frames: int = MAX_MISSED_FRAMES
    initial_uncertainty: float = INITIAL_UNCERTAINTY
    process_noise: float = PROCESS_NOISE
    measurement_noise: float = MEASUREMENT_NOISE
    unknown_name: str = UNKNOWN
    focused_labels: Tuple[str, ...] = DEFAULT_FOCUSED_LABELS
    association: str = "greedy"

    def __post_init__(self) -> None:
        self.focused_labels = tuple(self.focused_labels)
        if self.gate_distance <= 0:
            raise ValueError(f"gate_distance must be positive, got {self.gate_distance}")
        if self.max_missed_frames < 0:
            raise ValueError(f"max_missed_frames must be >= 0, got {self.max_missed_frames}")
        for key in ("initial_uncertainty", "process_noise", "measurement_noise"):
            if getattr(self, key) <= 0:
                raise ValueError(f"{key} must be positive, got {getattr(self, key)}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gate_distance": self.gate_distance,
            "max_missed_frames": self.max_missed_frames,
            "initial_uncertainty": self.initial_uncertainty,
            "process_noise": self.process_noise,
            "measurement_noise": self.measurement_noise,
            "unknown_name": self.unknown_name,
            "focused_labels": list(self.focused_labels),
            "association": self.association,
        }


@dataclass
class Track:
    """
    Single subject track.

    Attributes:
        id: Unique track identifier, never reused
        kf: Kalman filter owned by this track
        label: Last-known behavioral state
        name: Last-known identity (sticky against the unknown sentinel)
        box: Last-known bounding box
        missed_frames: Consecutive frames without an association
        hits: Number of successful associations, including the first
        status: Track lifecycle status
    """

    id: int
    kf: LinearKalmanFilter
    label: str = UNKNOWN
    name: str = UNKNOWN
    box: Optional[BoundingBox] = None
    missed_frames: int = 0
    hits: int = 1
    status: TrackStatus = TrackStatus.ACTIVE
    focused_labels: Tuple[str, ...] = field(default=DEFAULT_FOCUSED_LABELS, repr=False)

    @property
    def position(self) -> Tuple[float, float]:
        """Get current smoothed position (x, y)."""
        return self.kf.position

    @property
    def velocity(self) -> Tuple[float, float]:
        """Get current velocity (vx, vy) in pixels/frame."""
        return self.kf.velocity

    @property
    def is_focused(self) -> bool:
        return is_focused(self.label, self.focused_labels)

    def apply(self, detection: Detection, unknown_name: str = UNKNOWN) -> None:
        """
        Correct the filter with a matched detection and refresh attributes.

        Label and box are always replaced. The name is replaced only by a
        real identity, so a stale or failed recognition keeps the last one.
        """
        self.kf.update(detection.position)

        self.label = detection.label
        self.box = detection.box
        if detection.name and detection.name != unknown_name:
            self.name = detection.name

        self.hits += 1
        self.missed_frames = 0
        self.status = TrackStatus.ACTIVE

    def to_dict(self) -> Dict[str, Any]:
        x, y = self.position
        vx, vy = self.velocity
        return {
            "id": self.id,
            "position": {"x": x, "y": y},
            "velocity": {"vx": vx, "vy": vy},
            "box": self.box.to_dict() if self.box is not None else None,
            "label": self.label,
            "name": self.name,
            "missed_frames": self.missed_frames,
            "status": self.status.value,
            "is_focused": self.is_focused,
        }


class TrackSet:
    """
    Active tracks keyed by ID, in creation order, plus the next-ID counter.

    Iteration order is ascending ID, which makes association tie-breaks
    deterministic.
    """

    def __init__(self) -> None:
        self._tracks: Dict[int, Track] = {}
        self._next_id = 1

    @property
    def next_id(self) -> int:
        return self._next_id

    def spawn(self, kf: LinearKalmanFilter, **attributes: Any) -> Track:
        """Create a track with a fresh ID around an already seeded filter."""
        track = Track(id=self._next_id, kf=kf, **attributes)
        self._tracks[track.id] = track
        self._next_id += 1
        return track

    def remove(self, track_id: int) -> Track:
        """Drop a track and release its filter immediately."""
        track = self._tracks.pop(track_id)
        track.kf.release()
        track.status = TrackStatus.DELETED
        return track

    def clear(self) -> None:
        """Remove every track and restart IDs from 1."""
        for track_id in list(self._tracks):
            self.remove(track_id)
        self._next_id = 1

    def get(self, track_id: int) -> Optional[Track]:
        return self._tracks.get(track_id)

    def ids(self) -> List[int]:
        return list(self._tracks)

    def __iter__(self) -> Iterator[Track]:
        return iter(list(self._tracks.values()))

    def __len__(self) -> int:
        return len(self._tracks)

    def __contains__(self, track_id: object) -> bool:
        return track_id in self._tracks


class TrackManager:
    """
    Multi-subject track manager with gated association.

    Features:
        - Automatic track initiation from unassigned detections
        - Pluggable association (greedy nearest-neighbor by default)
        - Track coasting (prediction-only when no measurement)
        - Track deletion after max missed frames
        - Sticky identity/label/box attributes

    Example:
        >>> manager = TrackManager()
        >>> detections = [Detection(100, 120, name="Alice"), Detection(400, 300)]
        >>> tracks = manager.update(detections)
        >>> for track in tracks:
        ...     print(f"Track {track.id}: {track.position}")
    """

    def __init__(
        self,
        config: Optional[TrackerConfig] = None,
        policy: Optional[AssociationPolicy] = None,
    ) -> None:
        """
        Initialize Track Manager.

        Args:
            config: Tracker tuning, defaults to TrackerConfig()
            policy: Association policy; built from ``config.association``
                    when omitted. A supplied policy must gate at
                    ``config.gate_distance``.

        Raises:
            ValueError: If the policy gate disagrees with the config gate
        """
        self.config = config or TrackerConfig()
        if policy is None:
            policy = make_policy(self.config.association, self.config.gate_distance)
        elif policy.gate_distance != self.config.gate_distance:
            raise ValueError(
                f"Policy gate {policy.gate_distance} does not match "
                f"config gate_distance {self.config.gate_distance}"
            )
        self.policy = policy

        self.tracks = TrackSet()
        self.frame_count = 0

    @property
    def total_created(self) -> int:
        """Number of tracks created since the last reset."""
        return self.tracks.next_id - 1

    def update(self, detections: Sequence[Detection]) -> List[Track]:
        """
        Process one frame of detections and update tracks.

        Steps:
            1. Predict all existing tracks
            2. Associate detections to predicted positions
            3. Update associated tracks with measurements and attributes
            4. Initiate new tracks from unassigned detections
            5. Age unassigned tracks, delete those missed too long

        An empty batch is a normal frame in which every track goes unmatched.

        Args:
            detections: Ordered detection batch for one frame

        Returns:
            List of active tracks
        """
        detections = tuple(detections)
        self.frame_count += 1

        # 1. Predict all tracks
        existing = list(self.tracks)
        for track in existing:
            track.kf.predict()

        # 2. Data association
        result = self.policy.associate(
            [d.position for d in detections], [t.position for t in existing]
        )

        # 3. Update associated tracks
        for det_idx, trk_idx in result.matches:
            existing[trk_idx].apply(detections[det_idx], self.config.unknown_name)

        # 4. Initiate new tracks from unassigned detections
        for det_idx in result.unmatched_detections:
            self._create_track(detections[det_idx])

        # 5. Age unassigned tracks
        for trk_idx in result.unmatched_tracks:
            track = existing[trk_idx]
            track.missed_frames += 1
            track.status = TrackStatus.COASTING

            if track.missed_frames > self.config.max_missed_frames:
                self.tracks.remove(track.id)
                logger.debug(
                    "Deleted track %d after %d missed frames", track.id, track.missed_frames
                )

        logger.debug(
            "Frame %d: %d detections, %d matched, %d active tracks",
            self.frame_count,
            len(detections),
            len(result.matches),
            len(self.tracks),
        )

        return list(self.tracks)

    def _create_track(self, detection: Detection) -> Track:
        """Create a new track from an unassigned detection."""
        cfg = self.config
        kf = LinearKalmanFilter(
            detection.position,
            initial_uncertainty=cfg.initial_uncertainty,
            process_noise=cfg.process_noise,
            measurement_noise=cfg.measurement_noise,
        )

        name = detection.name if detection.name else cfg.unknown_name
        track = self.tracks.spawn(
            kf,
            label=detection.label,
            name=name,
            box=detection.box,
            focused_labels=cfg.focused_labels,
        )
        logger.debug("Created track %d at (%.1f, %.1f)", track.id, detection.x, detection.y)
        return track

    def get_active_tracks(self) -> List[Track]:
        """Get tracks matched in the latest frame."""
        return [t for t in self.tracks if t.status == TrackStatus.ACTIVE]

    def get_track_by_id(self, track_id: int) -> Optional[Track]:
        """Get track by ID."""
        return self.tracks.get(track_id)

    def reset(self) -> None:
        """Clear all tracks and restart IDs; the only way the session resets."""
        self.tracks.clear()
        self.frame_count = 0
