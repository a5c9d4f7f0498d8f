"""
Synthetic Classroom Generator

Produces detector-like batches for offline testing of the tracker: subjects
drift at constant velocity, positions carry Gaussian jitter, detections drop
out at random, and identity recognition succeeds only on some frames.

Usage:
    scene = SceneConfig(n_subjects=5, n_frames=300, seed=7)
    frames = generate_frames(scene)
"""

from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np

from focustrack.analytics.attention import STATE_LABELS
from focustrack.tracking.detection import UNKNOWN, BoundingBox, Detection


@dataclass
class SceneConfig:
    """
    Synthetic scene definition.

    Attributes:
        n_subjects: Subjects in the scene
        n_frames: Frames to generate
        frame_size: (width, height) in pixels
        max_speed: Maximum subject speed (pixels/frame)
        position_noise: Detector jitter standard deviation (pixels)
        dropout_prob: Chance a subject goes undetected in a frame
        recognition_prob: Chance the identity is recognized in a frame
        box_size: (width, height) of the face box
        seed: Random seed for reproducibility
    """

    n_subjects: int = 4
    n_frames: int = 120
    frame_size: Tuple[int, int] = (640, 480)
    max_speed: float = 1.5
    position_noise: float = 2.0
    dropout_prob: float = 0.05
    recognition_prob: float = 0.3
    box_size: Tuple[float, float] = (60.0, 60.0)
    seed: int = 0
    names: List[str] = field(
        default_factory=lambda: ["Alice", "Bob", "Carol", "Dave", "Erin", "Frank"]
    )

    def __post_init__(self) -> None:
        if self.n_subjects < 0 or self.n_frames < 0:
            raise ValueError(
                f"n_subjects and n_frames must be >= 0, got {self.n_subjects}, {self.n_frames}"
            )


def generate_frames(scene: SceneConfig) -> List[List[Detection]]:
    """
    Generate noisy detection batches for a scene.

    Subjects are placed on a grid so their spacing stays well above the
    default association gate's noise scale.

    Returns:
        One detection list per frame, subjects in random order
    """
    rng = np.random.default_rng(scene.seed)
    width, height = scene.frame_size
    n = scene.n_subjects

    cols = int(np.ceil(np.sqrt(n)))
    rows = int(np.ceil(n / cols)) if n else 0
    positions = np.array(
        [
            [(i % cols + 0.5) * width / cols, (i // cols + 0.5) * height / max(rows, 1)]
            for i in range(n)
        ],
        dtype=np.float64,
    ).reshape(-1, 2)
    velocities = rng.uniform(-scene.max_speed, scene.max_speed, size=(n, 2))
    states = rng.choice(len(STATE_LABELS), size=n)

    box_w, box_h = scene.box_size
    frames = []
    for _ in range(scene.n_frames):
        positions = positions + velocities

        # Occasional state change
        change = rng.random(n) < 0.02
        states = np.where(change, rng.choice(len(STATE_LABELS), size=n), states)

        batch = []
        for i in rng.permutation(n):
            if rng.random() < scene.dropout_prob:
                continue
            x, y = positions[i] + rng.normal(0.0, scene.position_noise, size=2)
            recognized = rng.random() < scene.recognition_prob
            batch.append(
                Detection(
                    x=float(x),
                    y=float(y),
                    box=BoundingBox(x - box_w / 2, y - box_h / 2, box_w, box_h),
                    label=STATE_LABELS[states[i]],
                    name=scene.names[i % len(scene.names)] if recognized else UNKNOWN,
                )
            )
        frames.append(batch)

    return frames
