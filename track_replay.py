#!/usr/bin/env python3
"""
Track Replay CLI

Replay recorded detector output through the tracker without a camera or UI.

Usage:
    python track_replay.py --detections frames.json              # Default config
    python track_replay.py --detections frames.yaml --gate 150   # Custom gate
    python track_replay.py --synthetic 300 --subjects 6           # Generated scene
    python track_replay.py --detections frames.json --config session.yaml

Examples:
    # Compare association policies
    python track_replay.py --synthetic 600 --association hungarian

    # Save per-frame tracks to HDF5
    python track_replay.py --detections frames.json --record output
"""

import argparse
import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from focustrack.io.config import ConfigError, SessionConfig, load_config
from focustrack.io.detections import load_detection_log
from focustrack.io.recorder import TrackRecorder
from focustrack.session.replay_runner import ReplayRunner
from focustrack.session.synthetic import SceneConfig, generate_frames
from focustrack.tracking.detection import DetectionFormatError
from focustrack.tracking.tracker import TrackerConfig


def non_negative_int(text: str) -> int:
    """argparse type for counts that may be zero but not negative."""
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {text!r}") from None
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {value}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Replay detections through the tracker")

    # Input
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--detections", type=str, help="JSON/YAML detection log")
    source.add_argument(
        "--synthetic",
        type=non_negative_int,
        metavar="FRAMES",
        help="Generate a synthetic scene of N frames",
    )
    parser.add_argument(
        "--subjects",
        type=non_negative_int,
        default=4,
        help="Subjects in the synthetic scene (default: 4)",
    )
    parser.add_argument("--seed", type=int, default=0, help="Synthetic scene seed (default: 0)")

    # Config file
    parser.add_argument("--config", type=str, default=None, help="YAML configuration file")

    # Tracker overrides
    parser.add_argument("--gate", type=float, default=None, help="Association gate in pixels")
    parser.add_argument(
        "--max-missed", type=int, default=None, help="Frames a track may coast before deletion"
    )
    parser.add_argument(
        "--association", choices=["greedy", "hungarian"], default=None, help="Association policy"
    )
    parser.add_argument(
        "--sensitivity", type=int, default=None, help="Attention strictness 0-100"
    )

    # Options
    parser.add_argument("--record", type=str, default=None, help="Directory for HDF5 output")
    parser.add_argument("--quiet", action="store_true", help="Suppress output")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")

    return parser


def apply_overrides(config: SessionConfig, args: argparse.Namespace) -> SessionConfig:
    """Apply command-line overrides on top of a loaded configuration."""
    tracker = config.tracker.to_dict()
    if args.gate is not None:
        tracker["gate_distance"] = args.gate
    if args.max_missed is not None:
        tracker["max_missed_frames"] = args.max_missed
    if args.association is not None:
        tracker["association"] = args.association
    tracker["focused_labels"] = tuple(tracker["focused_labels"])

    sensitivity = config.sensitivity if args.sensitivity is None else args.sensitivity
    if not 0 <= sensitivity <= 100:
        raise ConfigError(f"sensitivity must be within 0-100, got {sensitivity}")

    return SessionConfig(tracker=TrackerConfig(**tracker), sensitivity=sensitivity)


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Load config
    try:
        config = load_config(args.config) if args.config else SessionConfig()
        config = apply_overrides(config, args)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        return 1
    except (ConfigError, ValueError) as e:
        print(f"Error: Invalid configuration: {e}")
        return 2

    # Load detections
    if args.detections:
        try:
            frames = load_detection_log(args.detections)
        except FileNotFoundError as e:
            print(f"Error: {e}")
            return 1
        except DetectionFormatError as e:
            print(f"Error: Invalid detection log: {e}")
            return 2
        source = args.detections
    else:
        frames = generate_frames(
            SceneConfig(n_subjects=args.subjects, n_frames=args.synthetic, seed=args.seed)
        )
        source = f"synthetic ({args.subjects} subjects, seed {args.seed})"

    if not args.quiet:
        tracker = config.tracker
        print("=" * 60)
        print("FocusTrack Replay")
        print("=" * 60)
        print(f"Source: {source}")
        print(f"Frames: {len(frames)}")
        print(f"Association: {tracker.association}")
        print(f"Gate: {tracker.gate_distance:.1f} px")
        print(f"Max missed frames: {tracker.max_missed_frames}")
        print(f"Sensitivity: {config.sensitivity}%")
        print("=" * 60)

    recorder = TrackRecorder(args.record) if args.record else None
    runner = ReplayRunner(config, recorder=recorder)
    result = runner.run(frames)
    summary = result.final_summary

    if not args.quiet:
        print("\n--- RESULTS ---")
        print(f"Frames processed: {result.n_frames:,}")
        print(f"Detections: {result.n_detections:,}")
        print(f"Tracks created: {result.tracks_created}")
        print(f"Active tracks: {len(result.final_tracks)}")
        print(f"Mean/Max tracks per frame: {result.mean_track_count:.1f} / {result.max_track_count}")
        print(f"Focused: {summary.focused}/{summary.total} ({summary.focused_pct}%) - {summary.level.value}")
        for track in result.final_tracks:
            pos = track["position"]
            print(
                f"  ID {track['id']:>3}  {track['name']:<10} {track['label']:<13} "
                f"({pos['x']:7.1f}, {pos['y']:7.1f})  missed={track['missed_frames']}"
            )
        if result.recording_path:
            print(f"Recording: {result.recording_path}")
        print(f"Runtime: {result.runtime_s * 1000:.1f} ms")
        print("=" * 60)
    else:
        # Machine-readable output
        print(f"{result.tracks_created} {len(result.final_tracks)} {summary.focused_pct}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
