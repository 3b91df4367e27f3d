#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Replay Record Types

Typed measurement values decoded from one log line, plus the replay cursor
carried between lines.

Author: Replay project
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional, Tuple, Union

import numpy as np


# =============================================================================
# Record Kinds
# =============================================================================

class RecordKind(IntEnum):
    """Closed set of record kinds. UNRECOGNIZED records are never dispatched."""
    IMU = 1
    CONTACT = 2
    KINEMATIC = 3
    UNRECOGNIZED = 0


# Log tag -> kind (case-sensitive, exact match)
RECORD_TAGS = {
    "IMU": RecordKind.IMU,
    "CONTACT": RecordKind.CONTACT,
    "KINEMATIC": RecordKind.KINEMATIC,
}

IMU_FIELDS = 6
CONTACT_PAIR_FIELDS = 2
# id(1) + quaternion(4) + position(3) + covariance(36)
KINEMATIC_BLOCK_FIELDS = 44


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class ImuMeasurement:
    """Single IMU measurement."""
    t: float  # timestamp (seconds)
    ang: np.ndarray  # angular velocity [wx,wy,wz], sensor frame
    lin: np.ndarray  # linear acceleration [ax,ay,az], sensor frame

    @property
    def sample(self) -> np.ndarray:
        """6-vector [wx, wy, wz, ax, ay, az] as passed to propagate()."""
        return np.concatenate([self.ang, self.lin])


@dataclass
class ContactMeasurement:
    """Contact indicators in log order; duplicate ids are kept."""
    t: float
    contacts: List[Tuple[int, bool]] = field(default_factory=list)


@dataclass
class KinematicEntry:
    """One tracked body: relative pose and its 6x6 covariance."""
    id: int
    pose: np.ndarray  # 4x4 homogeneous transform
    cov: np.ndarray  # 6x6, row-major from the log

    def as_tuple(self) -> Tuple[int, np.ndarray, np.ndarray]:
        return (self.id, self.pose, self.cov)


@dataclass
class KinematicMeasurement:
    """Batch of kinematic entries from a single record."""
    t: float
    entries: List[KinematicEntry] = field(default_factory=list)


@dataclass
class UnrecognizedRecord:
    """Record whose tag matched no known kind. t is None if not parseable."""
    tag: str
    t: Optional[float] = None


Measurement = Union[ImuMeasurement, ContactMeasurement,
                    KinematicMeasurement, UnrecognizedRecord]


@dataclass
class ParsedRecord:
    """Classified and decoded log line."""
    kind: RecordKind
    measurement: Measurement
    line_no: int = 0

    @property
    def t(self) -> Optional[float]:
        return self.measurement.t


# =============================================================================
# Replay Cursor
# =============================================================================

@dataclass
class ReplayCursor:
    """
    Timestep bookkeeping carried strictly sequentially across records.

    Starts at t = t_prev = 0 with a zero IMU sample, so the very first IMU
    record is gated against t_prev = 0.
    """
    t: float = 0.0
    t_prev: float = 0.0
    imu_prev: np.ndarray = field(default_factory=lambda: np.zeros(6, dtype=float))
