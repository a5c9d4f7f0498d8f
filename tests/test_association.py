"""
FocusTrack Data Association Test Suite

Test ID | Description                    | Expectation
--------|--------------------------------|-----------------------------------
1       | Distance matrix                | Euclidean, (n_det, n_track)
2       | Greedy gating                  | strict "<" gate
3       | Greedy tie-break               | lowest track index
4       | Hungarian optimum              | minimal total distance
5       | Policy factory                 | names resolve, unknown rejected
"""

import os
import sys

import numpy as np
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from focustrack.tracking.association import (
    GreedyNearestNeighbor,
    HungarianMatcher,
    distance_matrix,
    make_policy,
)

# =============================================================================
# TEST 1: Distance matrix
# =============================================================================


class TestDistanceMatrix:
    def test_shape_and_values(self):
        dist = distance_matrix([(0.0, 0.0), (3.0, 4.0)], [(0.0, 0.0), (6.0, 8.0), (3.0, 0.0)])

        assert dist.shape == (2, 3)
        np.testing.assert_allclose(dist[0], [0.0, 10.0, 3.0])
        np.testing.assert_allclose(dist[1], [5.0, 5.0, 4.0])

    def test_empty_inputs(self):
        assert distance_matrix([], [(1.0, 1.0)]).shape == (0, 1)
        assert distance_matrix([(1.0, 1.0)], []).shape == (1, 0)


# =============================================================================
# TEST 2/3: Greedy nearest neighbor
# =============================================================================


class TestGreedy:
    def test_no_tracks_all_detections_unmatched(self):
        result = GreedyNearestNeighbor().associate([(0.0, 0.0), (5.0, 5.0)], [])

        assert result.matches == []
        assert result.unmatched_detections == [0, 1]
        assert result.unmatched_tracks == []

    def test_no_detections_all_tracks_unmatched(self):
        result = GreedyNearestNeighbor().associate([], [(0.0, 0.0), (5.0, 5.0)])

        assert result.unmatched_tracks == [0, 1]

    def test_gate_is_strict(self):
        policy = GreedyNearestNeighbor(gate_distance=10.0)

        assert policy.associate([(9.999, 0.0)], [(0.0, 0.0)]).matches == [(0, 0)]
        assert policy.associate([(10.0, 0.0)], [(0.0, 0.0)]).matches == []

    def test_detection_order_wins(self):
        """The first detection takes its nearest track even if a later one fits better"""
        result = GreedyNearestNeighbor().associate([(50.0, 0.0), (1.0, 0.0)], [(0.0, 0.0)])

        assert result.matches == [(0, 0)]
        assert result.unmatched_detections == [1]

    def test_tie_goes_to_first_track(self):
        result = GreedyNearestNeighbor().associate([(5.0, 0.0)], [(0.0, 0.0), (10.0, 0.0)])

        assert result.matches == [(0, 0)]
        assert result.unmatched_tracks == [1]

    def test_each_track_claimed_once(self):
        result = GreedyNearestNeighbor().associate(
            [(0.0, 0.0), (1.0, 0.0), (2.0, 0.0)], [(0.0, 0.0), (100.0, 0.0)]
        )

        assert result.matches == [(0, 0), (1, 1)]
        assert result.unmatched_detections == [2]


# =============================================================================
# TEST 4: Hungarian
# =============================================================================


class TestHungarian:
    def test_global_optimum(self):
        result = HungarianMatcher().associate([(50.0, 0.0), (1.0, 0.0)], [(0.0, 0.0)])

        assert result.matches == [(1, 0)]
        assert result.unmatched_detections == [0]

    def test_gated_pairs_dropped(self):
        result = HungarianMatcher(gate_distance=10.0).associate(
            [(0.0, 0.0), (500.0, 0.0)], [(1.0, 0.0), (100.0, 0.0)]
        )

        assert result.matches == [(0, 0)]
        assert result.unmatched_detections == [1]
        assert result.unmatched_tracks == [1]

    def test_total_cost_not_worse_than_greedy(self):
        rng = np.random.default_rng(3)
        dets = rng.uniform(0, 300, size=(6, 2))
        trks = dets[rng.permutation(6)] + rng.normal(0, 20, size=(6, 2))
        dist = distance_matrix(dets, trks)

        def total(result):
            return sum(dist[d, t] for d, t in result.matches)

        greedy = GreedyNearestNeighbor(gate_distance=1e6).associate(dets, trks)
        hungarian = HungarianMatcher(gate_distance=1e6).associate(dets, trks)

        assert len(hungarian.matches) == len(greedy.matches) == 6
        assert total(hungarian) <= total(greedy) + 1e-9


# =============================================================================
# TEST 5: Factory
# =============================================================================


class TestFactory:
    @pytest.mark.parametrize(
        "name, cls", [("greedy", GreedyNearestNeighbor), ("hungarian", HungarianMatcher)]
    )
    def test_known_names(self, name, cls):
        policy = make_policy(name, gate_distance=150.0)

        assert isinstance(policy, cls)
        assert policy.gate_distance == 150.0

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown association policy"):
            make_policy("nearest")

    def test_non_positive_gate(self):
        with pytest.raises(ValueError):
            GreedyNearestNeighbor(gate_distance=0.0)
