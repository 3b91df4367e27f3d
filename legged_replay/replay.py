"""
Measurement Log Replay Runner

This module provides the ReplayRunner class that feeds a recorded
IMU / CONTACT / KINEMATIC log through an estimator in file order:

- Configuration (dt window, initial state, noise, estimator factory)
- Line-by-line parsing and structural validation
- Timestep gating of IMU propagation
- Dispatch of contacts and kinematic corrections
- Progress reporting, optional dispatch trace, final state dump

Usage:
    from legged_replay.config import load_config
    from legged_replay.replay import ReplayRunner

    config = load_config("configs/config_default.yaml")
    runner = ReplayRunner(config, log_path="data/imu_kinematic_measurements.txt")
    summary = runner.run()

A structural error stops the replay at the offending line. The runner
records it in the summary instead of exiting, unless strict=True.

Author: Replay project
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

from .config import DT_MIN, DT_MAX
from .dispatcher import dispatch
from .estimator import Estimator, create_estimator
from .output_utils import (
    format_noise_params, format_state, init_trace_csv, log_dispatch,
    log_record_progress, print_replay_summary,
)
from .parser import RecordFormatError, parse_line
from .records import RecordKind, ReplayCursor


@dataclass
class ReplaySummary:
    """Counters and stop reason for one replay."""
    lines_read: int = 0
    imu_records: int = 0
    contact_records: int = 0
    kinematic_records: int = 0
    kinematic_entries: int = 0
    unrecognized_records: int = 0
    blank_lines: int = 0
    propagations: int = 0
    propagations_skipped: int = 0
    last_t: float = 0.0

    truncated: bool = False
    error: Optional[str] = None
    error_line: Optional[int] = None

    cursor: ReplayCursor = field(default_factory=ReplayCursor)

    @property
    def ok(self) -> bool:
        return self.error is None


def replay_lines(lines: Iterable[str], estimator: Estimator,
                 dt_min: float = DT_MIN, dt_max: float = DT_MAX,
                 verbose: bool = False, trace_csv: Optional[str] = None,
                 max_records: Optional[int] = None,
                 strict: bool = False) -> ReplaySummary:
    """
    Replay an iterable of log lines against `estimator`.

    Args:
        lines: Log lines in file order
        estimator: Object implementing the estimator contract
        dt_min, dt_max: Open propagation window [s]
        verbose: Print one progress line per dispatched record
        trace_csv: Dispatch trace path (None disables tracing)
        max_records: Stop after this many lines (None = no limit)
        strict: Re-raise RecordFormatError instead of stopping quietly

    Returns:
        ReplaySummary; summary.error is set if replay stopped on bad input
    """
    summary = ReplaySummary()
    cursor = summary.cursor

    for line_no, line in enumerate(lines, start=1):
        if max_records is not None and summary.lines_read >= max_records:
            summary.truncated = True
            break
        summary.lines_read += 1

        try:
            record = parse_line(line, line_no)
        except RecordFormatError as e:
            summary.error = str(e)
            summary.error_line = e.line_no
            print(f"[REPLAY] ❌ Structural error, stopping replay: {e}")
            if strict:
                raise
            break

        cursor, outcome = dispatch(record, cursor, estimator, dt_min, dt_max)

        if record.kind == RecordKind.IMU:
            summary.imu_records += 1
            if outcome.action == "PROPAGATE":
                summary.propagations += 1
            else:
                summary.propagations_skipped += 1
        elif record.kind == RecordKind.CONTACT:
            summary.contact_records += 1
        elif record.kind == RecordKind.KINEMATIC:
            summary.kinematic_records += 1
            summary.kinematic_entries += outcome.n_items
        elif record.measurement.tag:
            summary.unrecognized_records += 1
        else:
            summary.blank_lines += 1

        if verbose:
            log_record_progress(outcome)
        log_dispatch(trace_csv, outcome)

    summary.cursor = cursor
    summary.last_t = cursor.t_prev
    return summary


class ReplayRunner:
    """
    Replays one measurement log file against a configured estimator.

    The estimator is built from config (INITIAL_STATE, NOISE_PARAMS,
    ESTIMATOR_FACTORY) unless one is passed in.
    """

    def __init__(self, config: Dict[str, Any], log_path: str,
                 estimator: Optional[Estimator] = None,
                 output_dir: Optional[str] = None,
                 max_records: Optional[int] = None,
                 strict: bool = False):
        self.config = config
        self.log_path = log_path
        self.output_dir = output_dir
        self.max_records = max_records
        self.strict = strict
        self.estimator = estimator if estimator is not None else create_estimator(config)
        self.summary: Optional[ReplaySummary] = None

    def run(self) -> ReplaySummary:
        """
        Run the replay to end of file, record limit, or first bad record.

        Raises:
            FileNotFoundError: log file missing (nothing is processed)
            RecordFormatError: only when strict=True
        """
        if not os.path.exists(self.log_path):
            raise FileNotFoundError(f"Measurement log not found: {self.log_path}")

        print("Noise parameters are initialized to:")
        print(format_noise_params(self.estimator.get_noise_params()))
        print("Robot's state is initialized to:")
        print(format_state(self.estimator.get_state()))

        trace_csv = None
        if self.config.get('SAVE_DEBUG_DATA') and self.output_dir:
            trace_csv = init_trace_csv(self.output_dir)
            print(f"[REPLAY] Dispatch trace: {trace_csv}")

        print(f"[REPLAY] Replaying {self.log_path} "
              f"(dt window: ({self.config['DT_MIN']:g}, {self.config['DT_MAX']:g}))")
        with open(self.log_path, 'r') as f:
            self.summary = replay_lines(
                f, self.estimator,
                dt_min=self.config['DT_MIN'],
                dt_max=self.config['DT_MAX'],
                verbose=self.config.get('VERBOSE', False),
                trace_csv=trace_csv,
                max_records=self.max_records,
                strict=self.strict,
            )

        print_replay_summary(self.summary)
        print("Final state:")
        print(format_state(self.estimator.get_state()))
        return self.summary
