#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Estimator Contract Module

The replay drives an estimator it does not own the math of. Anything with
these methods can be replayed against:

    propagate(imu_sample, dt)      6-vector [w; a], interval in seconds
    set_contacts(contacts)         list of (id, bool)
    correct_kinematics(batch)      list of (id, 4x4 pose, 6x6 cov)
    get_state()                    reporting only
    get_noise_params()             reporting only

RecordingEstimator implements the contract without any filtering. It is the
default when no factory is configured, which turns a replay into a dry run
that still exercises the full dispatch path.

Author: Replay project
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

import numpy as np


ContactList = List[Tuple[int, bool]]
KinematicBatch = List[Tuple[int, np.ndarray, np.ndarray]]


class Estimator(Protocol):
    def propagate(self, imu_sample: np.ndarray, dt: float) -> None: ...

    def set_contacts(self, contacts: ContactList) -> None: ...

    def correct_kinematics(self, batch: KinematicBatch) -> None: ...

    def get_state(self) -> Any: ...

    def get_noise_params(self) -> Any: ...


# =============================================================================
# Initial Conditions
# =============================================================================

@dataclass
class RobotState:
    """Initial robot state handed to the estimator factory."""
    R: np.ndarray = field(default_factory=lambda: np.eye(3))  # body-to-world rotation
    v: np.ndarray = field(default_factory=lambda: np.zeros(3))  # velocity [m/s]
    p: np.ndarray = field(default_factory=lambda: np.zeros(3))  # position [m]
    bg: np.ndarray = field(default_factory=lambda: np.zeros(3))  # gyro bias [rad/s]
    ba: np.ndarray = field(default_factory=lambda: np.zeros(3))  # accel bias [m/s²]

    @classmethod
    def from_config(cls, init: Dict[str, np.ndarray]) -> 'RobotState':
        return cls(
            R=np.array(init['R0'], dtype=float),
            v=np.array(init['v0'], dtype=float),
            p=np.array(init['p0'], dtype=float),
            bg=np.array(init['bg0'], dtype=float),
            ba=np.array(init['ba0'], dtype=float),
        )


@dataclass
class NoiseParams:
    """Noise standard deviations."""
    gyro: float = 0.01
    accel: float = 0.1
    gyro_bias: float = 0.00001
    accel_bias: float = 0.0001
    contact: float = 0.01

    @classmethod
    def from_config(cls, noise: Dict[str, float]) -> 'NoiseParams':
        return cls(**{k: float(v) for k, v in noise.items()})

    def as_dict(self) -> Dict[str, float]:
        return {
            'gyro': self.gyro,
            'accel': self.accel,
            'gyro_bias': self.gyro_bias,
            'accel_bias': self.accel_bias,
            'contact': self.contact,
        }


# =============================================================================
# Recording Estimator
# =============================================================================

class RecordingEstimator:
    """
    Contract-complete estimator that performs no estimation.

    Every call is appended to `calls` as (operation, payload). Contacts are
    merged into `contacts` with the last value for an id winning.
    """

    def __init__(self, state: Optional[RobotState] = None,
                 noise_params: Optional[NoiseParams] = None):
        self.state = state if state is not None else RobotState()
        self.noise_params = noise_params if noise_params is not None else NoiseParams()
        self.calls: List[Tuple[str, Any]] = []
        self.contacts: Dict[int, bool] = {}
        self.last_kinematics: KinematicBatch = []
        self.propagated_time = 0.0

    def propagate(self, imu_sample: np.ndarray, dt: float) -> None:
        self.calls.append(("propagate", (np.array(imu_sample, dtype=float), float(dt))))
        self.propagated_time += dt

    def set_contacts(self, contacts: ContactList) -> None:
        self.calls.append(("set_contacts", list(contacts)))
        for contact_id, indicator in contacts:
            self.contacts[contact_id] = indicator

    def correct_kinematics(self, batch: KinematicBatch) -> None:
        self.calls.append(("correct_kinematics", list(batch)))
        self.last_kinematics = list(batch)

    def get_state(self) -> RobotState:
        return self.state

    def get_noise_params(self) -> NoiseParams:
        return self.noise_params

    def calls_of(self, operation: str) -> List[Any]:
        return [payload for name, payload in self.calls if name == operation]


# =============================================================================
# Factory Loading
# =============================================================================

def load_estimator_factory(path: str) -> Callable[[RobotState, NoiseParams], Estimator]:
    """
    Resolve a "package.module:attr" path to an estimator factory.

    Raises:
        ValueError: malformed path
        ImportError / AttributeError: module or attribute missing
    """
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Estimator factory must look like 'module:attr', got {path!r}")
    module = importlib.import_module(module_name)
    factory = getattr(module, attr)
    if not callable(factory):
        raise TypeError(f"Estimator factory {path!r} is not callable")
    return factory


def create_estimator(config: Dict[str, Any]) -> Estimator:
    """Build the configured estimator from INITIAL_STATE / NOISE_PARAMS."""
    state = RobotState.from_config(config['INITIAL_STATE'])
    noise = NoiseParams.from_config(config['NOISE_PARAMS'])
    factory_path = config.get('ESTIMATOR_FACTORY')
    if not factory_path:
        return RecordingEstimator(state, noise)
    factory = load_estimator_factory(factory_path)
    print(f"[CONFIG] Estimator factory: {factory_path}")
    return factory(state, noise)
