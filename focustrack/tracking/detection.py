"""
Detection Contracts

Per-frame measurements handed to the tracker by the external detector.
A detection carries no cross-frame identity; the tracker treats every batch
as a fresh, ordered measurement set.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

UNKNOWN = "Unknown"


class DetectionFormatError(ValueError):
    """Raised when a raw detection record is missing or has malformed fields."""


def _require_number(data: Mapping[str, Any], key: str, where: str) -> float:
    if key not in data or data[key] is None:
        raise DetectionFormatError(f"{where}: missing required field '{key}'")
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DetectionFormatError(f"{where}: field '{key}' must be numeric, got {value!r}")
    value = float(value)
    if not math.isfinite(value):
        raise DetectionFormatError(f"{where}: field '{key}' must be finite, got {value!r}")
    return value


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box (top-left corner + size), passed through for display."""

    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BoundingBox":
        """
        Build a box from a mapping.

        Accepts either ``x``/``y`` or the face detector's ``xMin``/``yMin``
        for the top-left corner.
        """
        corner = {
            "x": data.get("x", data.get("xMin")),
            "y": data.get("y", data.get("yMin")),
        }
        return cls(
            x=_require_number(corner, "x", "box"),
            y=_require_number(corner, "y", "box"),
            width=_require_number(data, "width", "box"),
            height=_require_number(data, "height", "box"),
        )

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class Detection:
    """
    One detected subject in one frame.

    Attributes:
        x, y: Subject center, same coordinate space as track positions
        box: Bounding box for downstream display (optional)
        label: Behavioral-state category, opaque to the tracker
        name: Identity label; ``UNKNOWN`` means unidentified
    """

    x: float
    y: float
    box: Optional[BoundingBox] = None
    label: str = UNKNOWN
    name: str = UNKNOWN

    def __post_init__(self) -> None:
        for key in ("x", "y"):
            value = getattr(self, key)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise DetectionFormatError(f"detection: '{key}' must be numeric, got {value!r}")
            if not math.isfinite(value):
                raise DetectionFormatError(f"detection: '{key}' must be finite, got {value!r}")

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Detection":
        """
        Validate a raw detector record.

        ``x`` and ``y`` are mandatory; a missing position is rejected rather
        than defaulted. ``state`` is accepted as an alias of ``label``.

        Raises:
            DetectionFormatError: If the record is malformed
        """
        if not isinstance(data, Mapping):
            raise DetectionFormatError(f"detection must be a mapping, got {type(data).__name__}")

        box_data = data.get("box")
        if box_data is not None and not isinstance(box_data, Mapping):
            raise DetectionFormatError("detection: 'box' must be a mapping")

        label = data.get("label", data.get("state"))
        name = data.get("name")

        return cls(
            x=_require_number(data, "x", "detection"),
            y=_require_number(data, "y", "detection"),
            box=BoundingBox.from_dict(box_data) if box_data is not None else None,
            label=str(label) if label is not None else UNKNOWN,
            name=str(name) if name is not None else UNKNOWN,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "box": self.box.to_dict() if self.box is not None else None,
            "label": self.label,
            "name": self.name,
        }
