#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Replay Output Utilities Module

Console reporting and the optional dispatch trace CSV.

Author: Replay project
"""

import os
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
from filterpy.common import pretty_str

from .math_utils import rot_to_euler_deg


TRACE_HEADER = "t,kind,action,dt,n_items\n"

_PROGRESS_LINES = {
    "PROPAGATE": "[IMU] Received IMU data, propagating state",
    "SKIP_DT": "[IMU] Received IMU data, dt outside window, skipping propagation",
    "SET_CONTACTS": "[CONTACT] Received CONTACT data, setting filter's contact state",
    "CORRECT": "[KINEMATIC] Received KINEMATIC observation, correcting state",
}


# =============================================================================
# Console Reporting
# =============================================================================

def log_record_progress(outcome):
    """One progress line per dispatched record (IGNORE prints nothing)."""
    msg = _PROGRESS_LINES.get(outcome.action)
    if msg is None:
        return
    if outcome.action in ("PROPAGATE", "SKIP_DT"):
        msg += f" (t={outcome.t:.6f}, dt={outcome.dt:.6f})"
    else:
        msg += f" (t={outcome.t:.6f}, n={outcome.n_items})"
    print(msg)


def format_state(state: Any) -> str:
    """
    Multi-line dump of an estimator state.

    Objects exposing R/v/p/bg/ba get a field-by-field dump; anything else is
    shown through its own str().
    """
    fields = [name for name in ("R", "v", "p", "bg", "ba") if hasattr(state, name)]
    if not fields:
        return str(state)
    lines = [f"{type(state).__name__} object"]
    for name in fields:
        lines.append(pretty_str(name, np.asarray(getattr(state, name))))
    if "R" in fields:
        rpy = rot_to_euler_deg(np.asarray(state.R, dtype=float))
        lines.append(f"rpy_deg = [{rpy[0]:.3f} {rpy[1]:.3f} {rpy[2]:.3f}]")
    return "\n".join(lines)


def format_noise_params(noise: Any) -> str:
    if hasattr(noise, "as_dict"):
        return "\n".join(pretty_str(k, v) for k, v in noise.as_dict().items())
    return str(noise)


def print_replay_summary(summary):
    """Print record counts and the stop reason."""
    print("=" * 70)
    print("[REPLAY] Summary")
    print("=" * 70)
    print(f"  Lines read: {summary.lines_read}")
    print(f"  IMU records: {summary.imu_records} "
          f"(propagated={summary.propagations}, skipped={summary.propagations_skipped})")
    print(f"  CONTACT records: {summary.contact_records}")
    print(f"  KINEMATIC records: {summary.kinematic_records} "
          f"({summary.kinematic_entries} entries)")
    print(f"  Unrecognized records: {summary.unrecognized_records} "
          f"(blank lines={summary.blank_lines})")
    print(f"  Last timestamp: {summary.last_t:.6f}")
    if summary.error is not None:
        print(f"  ❌ Stopped on structural error: {summary.error}")
    elif summary.truncated:
        print(f"  Stopped at record limit")


# =============================================================================
# Dispatch Trace CSV
# =============================================================================

def init_trace_csv(output_dir: str) -> str:
    """Create output_dir/dispatch_trace.csv with its header; return the path."""
    os.makedirs(output_dir, exist_ok=True)
    trace_csv = os.path.join(output_dir, "dispatch_trace.csv")
    with open(trace_csv, "w", newline="") as f:
        f.write(TRACE_HEADER)
    return trace_csv


def log_dispatch(trace_csv: Optional[str], outcome):
    """Append one outcome row. IGNORE outcomes are not traced."""
    if trace_csv is None or outcome.action == "IGNORE":
        return
    row = outcome.as_trace_dict()
    with open(trace_csv, "a", newline="") as f:
        f.write(f"{row['t']:.6f},{row['kind']},{row['action']},"
                f"{row['dt']:.6f},{row['n_items']}\n")


def summarize_trace(trace_csv: str) -> Dict[str, Any]:
    """
    Load a dispatch trace and summarize it.

    Returns:
        dict with rows, per-action counts, propagated dt statistics and the
        covered time span
    """
    if not os.path.exists(trace_csv):
        raise FileNotFoundError(f"Dispatch trace not found: {trace_csv}")

    df = pd.read_csv(trace_csv)
    prop = df[df["action"] == "PROPAGATE"]
    analysis = {
        "rows": len(df),
        "actions": {str(k): int(v) for k, v in df["action"].value_counts().items()},
        "propagated_time": float(prop["dt"].sum()),
        "dt_mean": float(prop["dt"].mean()) if len(prop) else float("nan"),
        "dt_max": float(prop["dt"].max()) if len(prop) else float("nan"),
        "t_span": float(df["t"].max() - df["t"].min()) if len(df) else 0.0,
    }
    return analysis
