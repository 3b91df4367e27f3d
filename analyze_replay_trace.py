#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Analyze a dispatch_trace.csv written by run_replay.py --save_debug_data
"""

import argparse
import sys

from legged_replay.output_utils import summarize_trace


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Summarize a replay dispatch trace")
    parser.add_argument("trace", type=str, help="Path to dispatch_trace.csv")
    args = parser.parse_args(argv)

    try:
        analysis = summarize_trace(args.trace)
    except FileNotFoundError as e:
        print(f"❌ {e}")
        return 1

    print("=" * 70)
    print(f"Dispatch trace: {args.trace}")
    print("=" * 70)
    print(f"  Rows: {analysis['rows']}")
    for action, count in sorted(analysis["actions"].items()):
        print(f"    {action}: {count}")
    print(f"  Propagated time: {analysis['propagated_time']:.6f} s "
          f"over a {analysis['t_span']:.6f} s span")
    print(f"  dt mean/max: {analysis['dt_mean']:.6f} / {analysis['dt_max']:.6f} s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
