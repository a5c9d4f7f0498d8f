"""
HDF5 Session Recorder

Saves per-frame track output to HDF5 files for post-analysis.

File Structure:
    /config
        attrs: tracker configuration (scalars as-is, others JSON)
    /frames
        index (N)            frame number
        track_count (N)      active tracks after the frame
        focused_pct (N)      attention share, percent
    /tracks/{track_id}
        positions (Mx3 array: frame, x, y)
        velocities (Mx3 array: frame, vx, vy)
        attrs['metadata'] - JSON with last label, name, box

Usage:
    recorder = TrackRecorder('output')
    recorder.start_recording(config.to_dict())
    recorder.record_frame(frame, manager.update(batch), summary)
    path = recorder.stop_recording()
"""

import json
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import h5py
import numpy as np

from focustrack.analytics.attention import AttentionSummary

logger = logging.getLogger(__name__)


@dataclass
class RecordingSession:
    """
    Session data accumulator for HDF5 recording.

    Attributes:
        config: Tracker configuration dictionary
        tracks: Dict of track_id -> positions, velocities, metadata
        frames: Frame indices in recording order
        track_counts: Active track count per frame
        focused_pct: Attention share per frame
    """

    config: Dict[str, Any] = field(default_factory=dict)
    tracks: Dict[int, Dict[str, Any]] = field(default_factory=dict)
    frames: List[int] = field(default_factory=list)
    track_counts: List[int] = field(default_factory=list)
    focused_pct: List[float] = field(default_factory=list)

    def clear(self):
        """Clear all recorded data."""
        self.config = {}
        self.tracks = {}
        self.frames = []
        self.track_counts = []
        self.focused_pct = []


class TrackRecorder:
    """
    HDF5 recorder for tracking sessions.

    Frames may be recorded from a different thread than the one that saves;
    all session access goes through one lock.
    """

    def __init__(self, output_dir: str = "output"):
        """
        Initialize recorder.

        Args:
            output_dir: Directory for HDF5 output files
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        self.session = RecordingSession()
        self.is_recording = False
        self._lock = threading.Lock()

    def start_recording(self, config: Optional[Dict[str, Any]] = None):
        """
        Start a new recording session.

        Args:
            config: Tracker configuration dictionary
        """
        with self._lock:
            self.session.clear()
            self.session.config = dict(config or {})
            self.is_recording = True

    def stop_recording(self, filename: Optional[str] = None) -> Optional[str]:
        """
        Stop recording and save to HDF5.

        Args:
            filename: Output file name, timestamped by default

        Returns:
            Path to saved file, or None if no frames were recorded
        """
        with self._lock:
            self.is_recording = False

            if not self.session.frames:
                return None

            return self._save_to_hdf5(filename)

    def record_frame(
        self,
        frame: int,
        tracks: Iterable[Any],
        summary: Optional[AttentionSummary] = None,
    ):
        """
        Record the track set after one processed frame.

        Args:
            frame: Frame index
            tracks: Active tracks (Track instances)
            summary: Attention summary for the frame (optional)
        """
        if not self.is_recording:
            return

        with self._lock:
            tracks = list(tracks)
            self.session.frames.append(frame)
            self.session.track_counts.append(len(tracks))
            self.session.focused_pct.append(
                float(summary.focused_pct) if summary is not None else np.nan
            )

            for track in tracks:
                record = self.session.tracks.setdefault(
                    track.id, {"positions": [], "velocities": [], "metadata": {}}
                )
                x, y = track.position
                vx, vy = track.velocity
                record["positions"].append([frame, x, y])
                record["velocities"].append([frame, vx, vy])
                record["metadata"] = {
                    "label": track.label,
                    "name": track.name,
                    "box": track.box.to_dict() if track.box is not None else None,
                    "last_frame": frame,
                }

    def _save_to_hdf5(self, filename: Optional[str] = None) -> str:
        """
        Save session data to HDF5 file.

        Returns:
            Path to saved file
        """
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = self.output_dir / (filename or f"tracks_{timestamp}.h5")

        with h5py.File(filepath, "w") as f:
            config_group = f.create_group("config")
            for key, value in self.session.config.items():
                if isinstance(value, (int, float, str, bool)):
                    config_group.attrs[key] = value
                else:
                    config_group.attrs[key] = json.dumps(value)

            frames_group = f.create_group("frames")
            frames_group.create_dataset("index", data=np.array(self.session.frames, dtype=np.int64))
            frames_group.create_dataset(
                "track_count", data=np.array(self.session.track_counts, dtype=np.int64)
            )
            frames_group.create_dataset(
                "focused_pct", data=np.array(self.session.focused_pct, dtype=np.float64)
            )

            tracks_group = f.create_group("tracks")
            for track_id, record in self.session.tracks.items():
                track_group = tracks_group.create_group(str(track_id))
                track_group.create_dataset(
                    "positions", data=np.array(record["positions"], dtype=np.float64)
                )
                track_group.create_dataset(
                    "velocities", data=np.array(record["velocities"], dtype=np.float64)
                )
                track_group.attrs["metadata"] = json.dumps(record["metadata"])

            f.attrs["version"] = "1.0"
            f.attrs["created"] = timestamp
            f.attrs["software"] = "FocusTrack"

        logger.info("Saved %d frames to %s", len(self.session.frames), filepath)
        return str(filepath)

    def get_recording_stats(self) -> Dict[str, Any]:
        """
        Get current recording statistics.

        Returns:
            Dict with recording stats
        """
        with self._lock:
            return {
                "is_recording": self.is_recording,
                "num_frames": len(self.session.frames),
                "num_tracks": len(self.session.tracks),
            }


def read_track_positions(filepath: str) -> Dict[int, np.ndarray]:
    """
    Read recorded positions back from a session file.

    Returns:
        Dict of track_id -> (M, 3) array of (frame, x, y)
    """
    with h5py.File(filepath, "r") as f:
        return {
            int(track_id): np.array(group["positions"])
            for track_id, group in f["tracks"].items()
        }
