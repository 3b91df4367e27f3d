#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Replay Configuration Module
===========================

Handles YAML configuration loading and defines global defaults for the
measurement log replay.

Configuration Structure:
------------------------
The YAML config file contains:
- timestep: validity window for IMU propagation intervals (dt_min, dt_max)
- initial_state: rotation, velocity, position, gyro/accel biases
- noise: gyroscope, accelerometer, bias random walk and contact noise
- estimator: optional "module:attr" factory for the estimator under test
- output: verbosity and debug trace flags

Frame Conventions:
------------------
- Rotation is the 3x3 body-to-world matrix of the IMU frame
- Quaternion: [w, x, y, z] Hamilton convention

Author: Replay project
"""

import os
import yaml
import numpy as np
from typing import Dict, Any, Optional

# ========================================
# Debug verbosity control
# ========================================
VERBOSE_RECORDS = False  # Per-record progress lines


def _as_matrix(value, shape, label: str) -> np.ndarray:
    arr = np.array(value, dtype=np.float64)
    if arr.shape != shape:
        raise ValueError(f"{label} must have shape {shape}, got {arr.shape}")
    return arr


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load YAML configuration file and convert to flat global-variable format.

    Any missing section falls back to the module defaults, so an empty file
    (or no file at all) yields the default replay setup.

    Args:
        config_path: Path to YAML configuration file, or None for defaults

    Returns:
        Dictionary with configuration parameters including:
        - DT_MIN, DT_MAX: open propagation window [s]
        - INITIAL_STATE: dict with R0, v0, p0, bg0, ba0
        - NOISE_PARAMS: dict of noise standard deviations
        - ESTIMATOR_FACTORY: "module:attr" string or None
        - VERBOSE, SAVE_DEBUG_DATA: output flags

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is malformed
        ValueError: If the timestep window is empty or shapes are wrong

    Example:
        >>> config = load_config("configs/config_default.yaml")
        >>> print(f"dt window: ({config['DT_MIN']}, {config['DT_MAX']})")
    """
    config = {}
    if config_path is not None:
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Config file not found: {config_path}")
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}

    result = {}

    # ========================================
    # Timestep Window
    # ========================================
    # Propagation is admitted only for DT_MIN < dt < DT_MAX
    ts = config.get('timestep') or {}
    result['DT_MIN'] = float(ts.get('dt_min', DT_MIN))
    result['DT_MAX'] = float(ts.get('dt_max', DT_MAX))
    if result['DT_MIN'] >= result['DT_MAX']:
        raise ValueError(
            f"timestep.dt_min ({result['DT_MIN']}) must be below "
            f"timestep.dt_max ({result['DT_MAX']})")

    # ========================================
    # Initial State
    # ========================================
    init = config.get('initial_state') or {}
    result['INITIAL_STATE'] = {
        'R0': _as_matrix(init.get('rotation', INITIAL_STATE['R0']), (3, 3), 'initial_state.rotation'),
        'v0': _as_matrix(init.get('velocity', INITIAL_STATE['v0']), (3,), 'initial_state.velocity'),
        'p0': _as_matrix(init.get('position', INITIAL_STATE['p0']), (3,), 'initial_state.position'),
        'bg0': _as_matrix(init.get('gyro_bias', INITIAL_STATE['bg0']), (3,), 'initial_state.gyro_bias'),
        'ba0': _as_matrix(init.get('accel_bias', INITIAL_STATE['ba0']), (3,), 'initial_state.accel_bias'),
    }

    # ========================================
    # Noise Parameters
    # ========================================
    noise = config.get('noise') or {}
    result['NOISE_PARAMS'] = {
        key: float(noise.get(key, default))
        for key, default in NOISE_PARAMS.items()
    }

    # Estimator under test (None = built-in recording estimator)
    est = config.get('estimator') or {}
    result['ESTIMATOR_FACTORY'] = est.get('factory', ESTIMATOR_FACTORY)

    out = config.get('output') or {}
    result['VERBOSE'] = bool(out.get('verbose', VERBOSE_RECORDS))
    result['SAVE_DEBUG_DATA'] = bool(out.get('save_debug_data', False))

    return result


# =============================================================================
# Default Configuration Variables (overridden by load_config)
# =============================================================================

# Propagation window [s]
DT_MIN = 1e-6
DT_MAX = 1.0

# IMU frame is rotated 90 deg about the x-axis
INITIAL_STATE = {
    'R0': np.array([
        [1.0,  0.0,  0.0],
        [0.0, -1.0,  0.0],
        [0.0,  0.0, -1.0],
    ], dtype=np.float64),
    'v0': np.zeros(3, dtype=np.float64),
    'p0': np.zeros(3, dtype=np.float64),
    'bg0': np.zeros(3, dtype=np.float64),
    'ba0': np.zeros(3, dtype=np.float64),
}

NOISE_PARAMS = {
    'gyro': 0.01,
    'accel': 0.1,
    'gyro_bias': 0.00001,
    'accel_bias': 0.0001,
    'contact': 0.01,
}

ESTIMATOR_FACTORY = None
