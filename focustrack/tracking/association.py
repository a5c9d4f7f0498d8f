"""
Data Association Policies

Matches a frame's detections to the predicted positions of existing tracks.
Both policies share the same Euclidean distance matrix and gating rule, so
the predict/update/age cycle in TrackManager is independent of the choice.

Policies:
    - GreedyNearestNeighbor: detection-major greedy matching (default)
    - HungarianMatcher: global minimum-cost assignment (Munkres)

Reference:
    - Blackman, S. "Multiple-Target Tracking with Radar Applications", 1986
    - Kuhn, H.W. "The Hungarian Method for the Assignment Problem", 1955
"""

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np
from scipy.optimize import linear_sum_assignment

GATE_DISTANCE = 200.0


@dataclass
class AssociationResult:
    """
    Outcome of one association pass.

    Attributes:
        matches: (detection_index, track_index) pairs in detection order
        unmatched_detections: Detection indices with no track, ascending
        unmatched_tracks: Track indices with no detection, ascending
    """

    matches: List[Tuple[int, int]] = field(default_factory=list)
    unmatched_detections: List[int] = field(default_factory=list)
    unmatched_tracks: List[int] = field(default_factory=list)


def distance_matrix(
    detections: Sequence[Tuple[float, float]], tracks: Sequence[Tuple[float, float]]
) -> np.ndarray:
    """
    Euclidean distances between detections (rows) and track positions (columns).

    Returns:
        Array of shape (n_detections, n_tracks)
    """
    dets = np.asarray(detections, dtype=np.float64).reshape(-1, 2)
    trks = np.asarray(tracks, dtype=np.float64).reshape(-1, 2)
    diff = dets[:, np.newaxis, :] - trks[np.newaxis, :, :]
    return np.hypot(diff[..., 0], diff[..., 1])


class AssociationPolicy:
    """Base class: gate a distance matrix and pick detection/track pairs."""

    name = "base"

    def __init__(self, gate_distance: float = GATE_DISTANCE) -> None:
        if gate_distance <= 0:
            raise ValueError(f"gate_distance must be positive, got {gate_distance}")
        self.gate_distance = gate_distance

    def associate(
        self,
        detections: Sequence[Tuple[float, float]],
        tracks: Sequence[Tuple[float, float]],
    ) -> AssociationResult:
        """
        Associate detection positions with predicted track positions.

        Args:
            detections: Detection positions in detector order
            tracks: Predicted track positions in track-set order

        Returns:
            AssociationResult with index pairs
        """
        n_dets, n_tracks = len(detections), len(tracks)
        if n_dets == 0 or n_tracks == 0:
            return AssociationResult(
                unmatched_detections=list(range(n_dets)),
                unmatched_tracks=list(range(n_tracks)),
            )

        matches = self._match(distance_matrix(detections, tracks))

        matched_dets = {d for d, _ in matches}
        matched_tracks = {t for _, t in matches}
        return AssociationResult(
            matches=sorted(matches),
            unmatched_detections=[d for d in range(n_dets) if d not in matched_dets],
            unmatched_tracks=[t for t in range(n_tracks) if t not in matched_tracks],
        )

    def _match(self, dist: np.ndarray) -> List[Tuple[int, int]]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(gate_distance={self.gate_distance})"


class GreedyNearestNeighbor(AssociationPolicy):
    """
    Greedy nearest-neighbor association, detection-major.

    Each detection, in detector order, claims the closest still-unassigned
    track whose distance is strictly below the gate. Equidistant tracks
    resolve to the lowest track index. Order-dependent by construction: an
    early detection may take a track a later detection fits better.
    """

    name = "greedy"

    def _match(self, dist: np.ndarray) -> List[Tuple[int, int]]:
        available = np.ones(dist.shape[1], dtype=bool)
        matches = []

        for det_idx in range(dist.shape[0]):
            if not available.any():
                break
            candidates = np.where(available, dist[det_idx], np.inf)
            best = int(np.argmin(candidates))  # first minimum wins ties
            if candidates[best] < self.gate_distance:
                matches.append((det_idx, best))
                available[best] = False

        return matches


class HungarianMatcher(AssociationPolicy):
    """
    Global minimum-cost assignment over the gated distance matrix.

    Pairs at or beyond the gate are priced out and dropped from the result,
    so gating behaves exactly as in the greedy policy.
    """

    name = "hungarian"

    def _match(self, dist: np.ndarray) -> List[Tuple[int, int]]:
        gated = dist >= self.gate_distance
        # Large finite cost keeps the problem feasible when rows are fully gated
        cost = np.where(gated, self.gate_distance * 1e6, dist)
        rows, cols = linear_sum_assignment(cost)
        return [(int(r), int(c)) for r, c in zip(rows, cols) if not gated[r, c]]


POLICIES = {
    GreedyNearestNeighbor.name: GreedyNearestNeighbor,
    HungarianMatcher.name: HungarianMatcher,
}


def make_policy(name: str, gate_distance: float = GATE_DISTANCE) -> AssociationPolicy:
    """
    Create an association policy by name.

    Raises:
        ValueError: If the name is not a known policy
    """
    try:
        policy_cls = POLICIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown association policy '{name}' (expected one of {sorted(POLICIES)})"
        ) from None
    return policy_cls(gate_distance=gate_distance)
