"""
FocusTrack Replay Session Test Suite

End-to-end runs of the tracker over synthetic and recorded detections.

Test ID | Description                    | Expectation
--------|--------------------------------|-----------------------------------
1       | Synthetic scene generation     | reproducible, dropouts honoured
2       | Replay over a clean scene      | one track per subject
3       | Identity persistence           | names recovered despite "Unknown"
4       | CLI                            | exit codes, machine-readable output
"""

import json
import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import track_replay
from focustrack.io.config import SessionConfig
from focustrack.io.recorder import TrackRecorder, read_track_positions
from focustrack.session.replay_runner import ReplayRunner
from focustrack.session.synthetic import SceneConfig, generate_frames
from focustrack.tracking.tracker import TrackerConfig

# =============================================================================
# TEST 1: Synthetic scenes
# =============================================================================


class TestSyntheticScene:
    def test_reproducible(self):
        scene = SceneConfig(n_subjects=3, n_frames=20, seed=5)
        a = [[d.to_dict() for d in f] for f in generate_frames(scene)]
        b = [[d.to_dict() for d in f] for f in generate_frames(scene)]

        assert a == b

    def test_no_dropout_full_batches(self):
        frames = generate_frames(SceneConfig(n_subjects=3, n_frames=10, dropout_prob=0.0))

        assert [len(f) for f in frames] == [3] * 10

    def test_full_dropout_empty_batches(self):
        frames = generate_frames(SceneConfig(n_subjects=3, n_frames=10, dropout_prob=1.0))

        assert all(f == [] for f in frames)

    @pytest.mark.parametrize("kwargs", [{"n_subjects": -1}, {"n_frames": -2}])
    def test_negative_counts_rejected(self, kwargs):
        with pytest.raises(ValueError):
            SceneConfig(**kwargs)


# =============================================================================
# TEST 2/3: Replay runner
# =============================================================================


SLOW_SCENE = SceneConfig(
    n_subjects=4, n_frames=100, max_speed=0.5, dropout_prob=0.2, recognition_prob=0.3, seed=21
)


class TestReplayRunner:
    @pytest.mark.parametrize("association", ["greedy", "hungarian"])
    def test_one_track_per_subject(self, association):
        config = SessionConfig(tracker=TrackerConfig(association=association))
        result = ReplayRunner(config).run(generate_frames(SLOW_SCENE))

        assert result.n_frames == 100
        assert result.tracks_created == 4
        assert len(result.final_tracks) == 4
        assert result.max_track_count == 4

    def test_names_recovered(self):
        result = ReplayRunner().run(generate_frames(SLOW_SCENE))

        names = {t["name"] for t in result.final_tracks}
        assert names == {"Alice", "Bob", "Carol", "Dave"}

    def test_focused_history_matches_summary(self):
        result = ReplayRunner().run(generate_frames(SLOW_SCENE))

        assert len(result.focused_history) == 100
        assert result.focused_history[-1] == result.final_summary.focused_pct

    def test_empty_log(self):
        result = ReplayRunner().run([])

        assert result.n_frames == 0
        assert result.tracks_created == 0
        assert result.final_summary.total == 0

    def test_rerun_resets_session(self):
        runner = ReplayRunner()
        frames = generate_frames(SLOW_SCENE)
        first = runner.run(frames)
        second = runner.run(frames)

        assert first.final_tracks == second.final_tracks

    def test_recording(self, tmp_path):
        recorder = TrackRecorder(str(tmp_path))
        result = ReplayRunner(recorder=recorder).run(
            generate_frames(SceneConfig(n_subjects=2, n_frames=30, dropout_prob=0.0))
        )

        assert result.recording_path is not None
        positions = read_track_positions(result.recording_path)
        assert sorted(positions) == [1, 2]
        assert positions[1].shape == (30, 3)


# =============================================================================
# TEST 4: CLI
# =============================================================================


class TestCli:
    def test_quiet_synthetic(self, capsys):
        code = track_replay.main(["--synthetic", "40", "--subjects", "3", "--quiet"])

        created, active, pct = capsys.readouterr().out.split()
        assert code == 0
        assert int(created) >= 3
        assert int(active) >= 3
        assert 0 <= int(pct) <= 100

    def test_detection_file(self, tmp_path, capsys):
        path = tmp_path / "frames.json"
        path.write_text(json.dumps([[{"x": 10, "y": 10, "label": "Focused"}]] * 5))

        code = track_replay.main(["--detections", str(path), "--quiet"])

        assert code == 0
        assert capsys.readouterr().out.split() == ["1", "1", "100"]

    def test_verbose_report(self, tmp_path, capsys):
        path = tmp_path / "frames.json"
        path.write_text(json.dumps([[{"x": 10, "y": 10, "name": "Erin"}]]))

        code = track_replay.main(["--detections", str(path), "--association", "hungarian"])

        out = capsys.readouterr().out
        assert code == 0
        assert "Association: hungarian" in out
        assert "Erin" in out

    def test_missing_detection_file(self, tmp_path):
        assert track_replay.main(["--detections", str(tmp_path / "nope.json")]) == 1

    def test_missing_config_file(self, tmp_path):
        code = track_replay.main(
            ["--synthetic", "5", "--config", str(tmp_path / "nope.yaml"), "--quiet"]
        )

        assert code == 1

    def test_invalid_override(self):
        assert track_replay.main(["--synthetic", "5", "--gate", "-1", "--quiet"]) == 2

    @pytest.mark.parametrize(
        "argv",
        [
            ["--synthetic", "5", "--subjects", "-1"],
            ["--synthetic", "-3"],
            ["--synthetic", "five"],
        ],
    )
    def test_negative_counts_rejected(self, argv, capsys):
        with pytest.raises(SystemExit) as exc:
            track_replay.main(argv + ["--quiet"])

        assert exc.value.code == 2
        assert "error" in capsys.readouterr().err

    def test_zero_subjects(self, capsys):
        code = track_replay.main(["--synthetic", "5", "--subjects", "0", "--quiet"])

        assert code == 0
        assert capsys.readouterr().out.split() == ["0", "0", "0"]
