"""Timestep gate and replay cursor sequencing."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

import numpy as np

from .records import ParsedRecord, RecordKind, ReplayCursor


def gate_interval(cursor: ReplayCursor, t: float,
                  dt_min: float, dt_max: float) -> Optional[float]:
    """
    Interval since the previous record if it lies in the open window.

    Returns:
        dt when dt_min < dt < dt_max, else None (propagation skipped)
    """
    dt = t - cursor.t_prev
    if dt > dt_min and dt < dt_max:
        return dt
    return None


def advance_cursor(cursor: ReplayCursor, record: ParsedRecord) -> ReplayCursor:
    """
    Cursor after processing `record`.

    Every record with a timestamp moves t_prev forward, whatever its kind.
    Only IMU records replace the stored sample, so a propagation following a
    CONTACT or KINEMATIC record still uses the last IMU sample.
    """
    t = record.t
    if t is None:
        return cursor
    if record.kind == RecordKind.IMU:
        return ReplayCursor(t=t, t_prev=t, imu_prev=np.array(record.measurement.sample, dtype=float))
    return replace(cursor, t=t, t_prev=t)
