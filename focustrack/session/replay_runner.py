"""
Replay Runner

Drives a TrackManager over a recorded sequence of detection batches without
a camera or display, collecting per-frame attention statistics.

Usage:
    runner = ReplayRunner(load_config('session.yaml'))
    result = runner.run(load_detection_log('detections.json'))
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from focustrack.analytics.attention import AttentionSummary, summarize
from focustrack.io.config import SessionConfig
from focustrack.io.recorder import TrackRecorder
from focustrack.tracking.detection import Detection
from focustrack.tracking.tracker import TrackManager

logger = logging.getLogger(__name__)


@dataclass
class ReplayResult:
    """
    Results from a replay run.

    Attributes:
        n_frames: Frames processed
        n_detections: Detections consumed over all frames
        tracks_created: Track IDs handed out
        final_tracks: Exported tracks after the last frame
        final_summary: Attention summary after the last frame
        mean_track_count: Average active tracks per frame
        max_track_count: Peak active tracks
        focused_history: Focused percentage per frame
        runtime_s: Wall-clock execution time
        recording_path: HDF5 file, if a recorder was attached
    """

    n_frames: int = 0
    n_detections: int = 0
    tracks_created: int = 0
    final_tracks: List[Dict[str, Any]] = field(default_factory=list)
    final_summary: Optional[AttentionSummary] = None
    mean_track_count: float = 0.0
    max_track_count: int = 0
    focused_history: List[int] = field(default_factory=list)
    runtime_s: float = 0.0
    recording_path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON export."""
        return {
            "n_frames": self.n_frames,
            "n_detections": self.n_detections,
            "tracks_created": self.tracks_created,
            "active_tracks": len(self.final_tracks),
            "mean_track_count": self.mean_track_count,
            "max_track_count": self.max_track_count,
            "attention": self.final_summary.to_dict() if self.final_summary else None,
            "runtime_s": self.runtime_s,
            "recording_path": self.recording_path,
        }


class ReplayRunner:
    """Runs one tracking session over pre-recorded detection batches."""

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        recorder: Optional[TrackRecorder] = None,
    ):
        """
        Initialize replay runner.

        Args:
            config: Session configuration (tracker tuning + sensitivity)
            recorder: Optional HDF5 recorder for per-frame output
        """
        self.config = config or SessionConfig()
        self.recorder = recorder
        self.manager = TrackManager(self.config.tracker)

    def run(self, frames: Sequence[Sequence[Detection]]) -> ReplayResult:
        """
        Process every frame in order.

        Returns:
            ReplayResult with session statistics
        """
        start_time = time.perf_counter()

        self.manager.reset()
        if self.recorder is not None:
            self.recorder.start_recording(self.config.tracker.to_dict())

        track_counts: List[int] = []
        focused_history: List[int] = []
        n_detections = 0
        summary = summarize([], self.config.sensitivity, self.config.tracker.focused_labels)

        for frame_idx, batch in enumerate(frames):
            tracks = self.manager.update(batch)
            n_detections += len(batch)

            summary = summarize(tracks, self.config.sensitivity, self.config.tracker.focused_labels)
            track_counts.append(len(tracks))
            focused_history.append(summary.focused_pct)

            if self.recorder is not None:
                self.recorder.record_frame(frame_idx, tracks, summary)

        recording_path = self.recorder.stop_recording() if self.recorder is not None else None

        counts = np.array(track_counts) if track_counts else np.array([0])
        result = ReplayResult(
            n_frames=len(track_counts),
            n_detections=n_detections,
            tracks_created=self.manager.total_created,
            final_tracks=[t.to_dict() for t in self.manager.tracks],
            final_summary=summary,
            mean_track_count=float(np.mean(counts)),
            max_track_count=int(np.max(counts)),
            focused_history=focused_history,
            runtime_s=time.perf_counter() - start_time,
            recording_path=recording_path,
        )

        logger.info(
            "Replayed %d frames: %d tracks created, %d active",
            result.n_frames,
            result.tracks_created,
            len(result.final_tracks),
        )
        return result
