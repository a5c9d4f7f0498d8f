"""
Session Module

Offline tracking sessions over recorded or synthetic detections.
"""

from .replay_runner import ReplayResult, ReplayRunner
from .synthetic import SceneConfig, generate_frames

__all__ = ["ReplayRunner", "ReplayResult", "SceneConfig", "generate_frames"]
