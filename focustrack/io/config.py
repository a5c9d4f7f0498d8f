"""
Configuration Loader

YAML-based configuration for a tracking session.

File layout:
    tracker:
      gate_distance: 200.0
      max_missed_frames: 30
      initial_uncertainty: 100.0
      process_noise: 0.01
      measurement_noise: 0.1
      unknown_name: Unknown
      focused_labels: [Focused, Writing]
      association: greedy        # or: hungarian
    session:
      sensitivity: 50

Every key is optional; missing keys fall back to the TrackerConfig defaults.

Usage:
    config = load_config('configs/classroom.yaml')
    manager = TrackManager(config.tracker)
"""

import numbers
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping

import yaml

from focustrack.analytics.attention import DEFAULT_SENSITIVITY
from focustrack.tracking.association import POLICIES
from focustrack.tracking.tracker import TrackerConfig


class ConfigError(ValueError):
    """Raised when a configuration file holds invalid values."""


@dataclass
class SessionConfig:
    """Complete session configuration."""

    tracker: TrackerConfig = field(default_factory=TrackerConfig)
    sensitivity: int = DEFAULT_SENSITIVITY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tracker": self.tracker.to_dict(),
            "session": {"sensitivity": self.sensitivity},
        }


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    section = data.get(key) or {}
    if not isinstance(section, Mapping):
        raise ConfigError(f"'{key}' section must be a mapping")
    return section


def _number(section: Mapping[str, Any], key: str, default: float) -> float:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ConfigError(f"'{key}' must be a number, got {value!r}")
    return float(value)


def _integer(section: Mapping[str, Any], key: str, default: int) -> int:
    value = section.get(key, default)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ConfigError(f"'{key}' must be a whole number, got {value!r}")
    return int(value)


def parse_config(data: Mapping[str, Any]) -> SessionConfig:
    """
    Build a SessionConfig from already parsed YAML data.

    Raises:
        ConfigError: If a value is missing its expected type or range
    """
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ConfigError("configuration root must be a mapping")

    tracker = _section(data, "tracker")
    session = _section(data, "session")
    defaults = TrackerConfig()

    association = str(tracker.get("association", defaults.association))
    if association not in POLICIES:
        raise ConfigError(
            f"Unknown association policy '{association}' (expected one of {sorted(POLICIES)})"
        )

    focused_labels = tracker.get("focused_labels", defaults.focused_labels)
    if isinstance(focused_labels, str) or not isinstance(focused_labels, (list, tuple)):
        raise ConfigError("'focused_labels' must be a list of labels")

    try:
        tracker_config = TrackerConfig(
            gate_distance=_number(tracker, "gate_distance", defaults.gate_distance),
            max_missed_frames=_integer(tracker, "max_missed_frames", defaults.max_missed_frames),
            initial_uncertainty=_number(
                tracker, "initial_uncertainty", defaults.initial_uncertainty
            ),
            process_noise=_number(tracker, "process_noise", defaults.process_noise),
            measurement_noise=_number(tracker, "measurement_noise", defaults.measurement_noise),
            unknown_name=str(tracker.get("unknown_name", defaults.unknown_name)),
            focused_labels=tuple(str(label) for label in focused_labels),
            association=association,
        )
        sensitivity = _integer(session, "sensitivity", DEFAULT_SENSITIVITY)
    except ConfigError:
        raise
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    if not 0 <= sensitivity <= 100:
        raise ConfigError(f"sensitivity must be within 0-100, got {sensitivity}")

    return SessionConfig(tracker=tracker_config, sensitivity=sensitivity)


def load_config(filepath: str) -> SessionConfig:
    """
    Load session configuration from a YAML file.

    Raises:
        FileNotFoundError: If file doesn't exist
        ConfigError: If the YAML is malformed or holds invalid values
    """
    if not os.path.exists(filepath):
        raise FileNotFoundError(f"Config file not found: {filepath}")

    with open(filepath, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Cannot parse {filepath}: {e}") from e

    return parse_config(data)


def save_config(config: SessionConfig, filepath: str) -> None:
    """Write a SessionConfig to YAML in the layout load_config reads."""
    data = {
        "meta": {"exported": datetime.now().strftime("%Y-%m-%d %H:%M")},
        **config.to_dict(),
    }
    with open(filepath, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
