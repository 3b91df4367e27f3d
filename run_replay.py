#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Measurement Log Replay Entry Point (run_replay.py)

Replays an IMU / CONTACT / KINEMATIC log through an estimator using the
legged_replay package.

Configuration Model:
--------------------
    YAML config holds the dt window, initial state, noise parameters and the
    estimator factory. CLI provides only paths and runtime flags.

Usage:
    python run_replay.py --log data/imu_kinematic_measurements.txt

    # With config, debug trace and strict error handling:
    python run_replay.py --config configs/config_default.yaml \\
        --log data/imu_kinematic_measurements.txt \\
        --output out/ --save_debug_data --strict

Author: Replay project
"""

import argparse
import sys
import os

# Add workspace to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Legged-robot measurement log replay",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_replay.py --log data/imu_kinematic_measurements.txt
  python run_replay.py --config configs/config_default.yaml \\
      --log data/imu_kinematic_measurements.txt --output out/ --save_debug_data
        """
    )

    parser.add_argument("--log", type=str, required=True,
                        help="Path to measurement log (IMU/CONTACT/KINEMATIC lines)")
    parser.add_argument("--config", type=str, default=None,
                        help="Path to YAML config file (defaults used if omitted)")
    parser.add_argument("--output", type=str, default=None,
                        help="Output directory for debug data")
    parser.add_argument("--max_records", type=int, default=None,
                        help="Stop after this many log lines")

    parser.add_argument("--verbose", action="store_true",
                        help="Print one progress line per record")
    parser.add_argument("--save_debug_data", action="store_true",
                        help="Save dispatch_trace.csv in --output")
    parser.add_argument("--strict", action="store_true",
                        help="Raise on the first malformed record instead of stopping")

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point - load YAML config and replay the log."""
    args = parse_args(argv)

    print("=" * 70)
    print("Legged-Robot Measurement Log Replay")
    print("=" * 70)

    from legged_replay import __version__
    from legged_replay.config import load_config
    from legged_replay.parser import RecordFormatError
    from legged_replay.replay import ReplayRunner

    print(f"Using legged_replay package version: {__version__}")

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"❌ Error loading config: {e}")
        return 1

    # CLI flags override YAML
    if args.verbose:
        config['VERBOSE'] = True
    if args.save_debug_data:
        config['SAVE_DEBUG_DATA'] = True
    if config['SAVE_DEBUG_DATA'] and not args.output:
        print("[CONFIG] WARNING: save_debug_data requires --output, trace disabled")

    runner = ReplayRunner(config, log_path=args.log, output_dir=args.output,
                          max_records=args.max_records, strict=args.strict)
    try:
        summary = runner.run()
    except FileNotFoundError as e:
        print(f"❌ {e}")
        return 1
    except RecordFormatError as e:
        print(f"❌ Malformed record: {e}")
        return 1

    if not summary.ok:
        return 1

    print("✅ Replay completed successfully")
    return 0


if __name__ == "__main__":
    sys.exit(main())
