"""
Attention Statistics

Aggregates the behavioral-state labels of the current tracks into a
classroom-level attention summary.

The focused share is compared against a threshold derived from a
sensitivity setting (0-100): threshold = 100 - sensitivity. A share at or
above the threshold is FOCUSED, at or above half of it is WARNING, anything
lower is DANGER.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Sequence

import numpy as np

# Labels counted as attentive/engaged
DEFAULT_FOCUSED_LABELS = ("Focused", "Writing")

# All behavioral states emitted by the state classifier
STATE_LABELS = ("Focused", "Writing", "Looking Away", "Sleeping")

DEFAULT_SENSITIVITY = 50


class AttentionLevel(Enum):
    """Class-wide attention band."""

    FOCUSED = "focused"
    WARNING = "warning"
    DANGER = "danger"


@dataclass
class AttentionSummary:
    """Container for per-frame attention statistics."""

    total: int  # Active tracks
    focused: int  # Tracks in a focused state
    focused_pct: int  # Rounded percentage, 0 when there are no tracks
    threshold: float  # 100 - sensitivity
    level: AttentionLevel

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "focused": self.focused,
            "focused_pct": self.focused_pct,
            "threshold": self.threshold,
            "level": self.level.value,
        }


def is_focused(label: str, focused_labels: Sequence[str] = DEFAULT_FOCUSED_LABELS) -> bool:
    """True if a behavioral-state label counts as attentive."""
    return label in focused_labels


def focused_percentage(focused: int, total: int) -> int:
    """Percentage rounded half-up, 0 for an empty class."""
    if total <= 0:
        return 0
    return int(np.floor(100.0 * focused / total + 0.5))


def classify_level(focused_pct: float, sensitivity: float = DEFAULT_SENSITIVITY) -> AttentionLevel:
    """
    Map a focused percentage to an attention band.

    Args:
        focused_pct: Focused share in percent
        sensitivity: Strictness 0-100; higher demands more focus

    Raises:
        ValueError: If sensitivity is outside 0-100
    """
    if not 0 <= sensitivity <= 100:
        raise ValueError(f"sensitivity must be within 0-100, got {sensitivity}")

    threshold = 100 - sensitivity
    if focused_pct >= threshold:
        return AttentionLevel.FOCUSED
    if focused_pct >= threshold / 2:
        return AttentionLevel.WARNING
    return AttentionLevel.DANGER


def summarize(
    tracks: Iterable[Any],
    sensitivity: float = DEFAULT_SENSITIVITY,
    focused_labels: Sequence[str] = DEFAULT_FOCUSED_LABELS,
) -> AttentionSummary:
    """
    Summarize attention over a set of tracks.

    Args:
        tracks: Objects exposing a ``label`` attribute (e.g. Track)
        sensitivity: Strictness 0-100
        focused_labels: Labels counted as attentive

    Returns:
        AttentionSummary for the given tracks
    """
    labels = [t.label for t in tracks]
    total = len(labels)
    focused = sum(1 for label in labels if is_focused(label, focused_labels))
    pct = focused_percentage(focused, total)

    return AttentionSummary(
        total=total,
        focused=focused,
        focused_pct=pct,
        threshold=100 - sensitivity,
        level=classify_level(pct, sensitivity),
    )
