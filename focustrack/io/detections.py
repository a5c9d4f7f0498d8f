"""
Detection Log Loader

Reads recorded detector output for offline replay.

Accepted layouts (JSON or YAML):
    [[{x, y, box, label, name}, ...], ...]         # list of frames
    [{"frame": 0, "detections": [...]}, ...]       # list of frame records
    {"frames": [...]}                               # either of the above, wrapped

Every record goes through Detection.from_dict, so malformed positions are
rejected here instead of reaching the tracker.
"""

import json
import os
from pathlib import Path
from typing import Any, List

import yaml

from focustrack.tracking.detection import Detection, DetectionFormatError


def _parse_frame(frame: Any, index: int) -> List[Detection]:
    if isinstance(frame, dict):
        frame = frame.get("detections", [])
    if not isinstance(frame, list):
        raise DetectionFormatError(f"frame {index}: expected a list of detections")

    detections = []
    for det_idx, record in enumerate(frame):
        try:
            detections.append(Detection.from_dict(record))
        except DetectionFormatError as e:
            raise DetectionFormatError(f"frame {index}, detection {det_idx}: {e}") from e
    return detections


def parse_detection_log(data: Any) -> List[List[Detection]]:
    """
    Convert parsed JSON/YAML data into ordered detection batches.

    Raises:
        DetectionFormatError: If the layout or any record is malformed
    """
    if isinstance(data, dict):
        data = data.get("frames")
    if not isinstance(data, list):
        raise DetectionFormatError("detection log must be a list of frames")

    return [_parse_frame(frame, i) for i, frame in enumerate(data)]


def load_detection_log(filepath: str) -> List[List[Detection]]:
    """
    Load a detection log from a JSON or YAML file.

    Raises:
        FileNotFoundError: If file doesn't exist
        DetectionFormatError: If the content is malformed
    """
    if not os.path.exists(filepath):
        raise FileNotFoundError(f"Detection log not found: {filepath}")

    with open(filepath, "r", encoding="utf-8") as f:
        if Path(filepath).suffix.lower() == ".json":
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise DetectionFormatError(f"Cannot parse {filepath}: {e}") from e
        else:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise DetectionFormatError(f"Cannot parse {filepath}: {e}") from e

    return parse_detection_log(data)
