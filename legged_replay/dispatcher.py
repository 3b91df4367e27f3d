"""Routing of decoded records to estimator operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .estimator import Estimator
from .records import ParsedRecord, RecordKind, ReplayCursor
from .sequencer import advance_cursor, gate_interval


@dataclass(frozen=True)
class DispatchOutcome:
    """What the dispatcher did with one record."""

    kind: RecordKind
    action: str  # PROPAGATE|SKIP_DT|SET_CONTACTS|CORRECT|IGNORE
    t: Optional[float] = None
    dt: Optional[float] = None
    n_items: int = 0

    @property
    def called_estimator(self) -> bool:
        return self.action in ("PROPAGATE", "SET_CONTACTS", "CORRECT")

    def as_trace_dict(self) -> dict:
        return {
            "t": float("nan") if self.t is None else float(self.t),
            "kind": self.kind.name,
            "action": self.action,
            "dt": float("nan") if self.dt is None else float(self.dt),
            "n_items": int(self.n_items),
        }


def dispatch(record: ParsedRecord, cursor: ReplayCursor, estimator: Estimator,
             dt_min: float, dt_max: float) -> Tuple[ReplayCursor, DispatchOutcome]:
    """
    Apply one record to the estimator and advance the cursor.

    IMU records propagate with the *previous* IMU sample over the interval
    ending at this record, and only inside (dt_min, dt_max). Contacts and
    kinematic batches are applied unconditionally, one call per record.

    Returns:
        (next cursor, outcome)
    """
    m = record.measurement
    kind = record.kind

    if kind == RecordKind.IMU:
        dt = gate_interval(cursor, m.t, dt_min, dt_max)
        if dt is not None:
            estimator.propagate(cursor.imu_prev, dt)
            outcome = DispatchOutcome(kind, "PROPAGATE", t=m.t, dt=dt, n_items=1)
        else:
            outcome = DispatchOutcome(kind, "SKIP_DT", t=m.t, dt=m.t - cursor.t_prev)
    elif kind == RecordKind.CONTACT:
        estimator.set_contacts(m.contacts)
        outcome = DispatchOutcome(kind, "SET_CONTACTS", t=m.t, n_items=len(m.contacts))
    elif kind == RecordKind.KINEMATIC:
        estimator.correct_kinematics([entry.as_tuple() for entry in m.entries])
        outcome = DispatchOutcome(kind, "CORRECT", t=m.t, n_items=len(m.entries))
    else:
        outcome = DispatchOutcome(kind, "IGNORE", t=m.t)

    return advance_cursor(cursor, record), outcome
