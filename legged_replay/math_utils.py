#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Replay Math Utilities Module
============================

Quaternion and homogeneous-transform helpers used when decoding kinematic
measurements.

Quaternion Convention:
----------------------
All quaternions use Hamilton convention with [w, x, y, z] ordering:
- w is the scalar (real) part
- [x, y, z] is the vector (imaginary) part

scipy's Rotation expects scalar-last [x, y, z, w]; conversions happen here
and nowhere else.

Author: Replay project
"""

import numpy as np
from scipy.spatial.transform import Rotation as R_scipy


def quat_normalize(q: np.ndarray) -> np.ndarray:
    """
    Normalize quaternion to unit length.

    Args:
        q: Quaternion [w, x, y, z]

    Returns:
        Normalized quaternion with ||q|| = 1 (identity only for an exactly zero quaternion)
    """
    q = np.asarray(q, dtype=np.float64)
    norm = np.linalg.norm(q)
    if norm == 0.0:
        return np.array([1.0, 0.0, 0.0, 0.0])
    return q / norm


def quat_to_rot(q: np.ndarray) -> np.ndarray:
    """Convert quaternion [w,x,y,z] to 3x3 rotation matrix."""
    w, x, y, z = quat_normalize(q)
    return R_scipy.from_quat([x, y, z, w]).as_matrix()


def make_transform(R: np.ndarray, p: np.ndarray) -> np.ndarray:
    """
    Compose a 4x4 homogeneous transform.

    Args:
        R: 3x3 rotation (top-left block)
        p: translation [x, y, z] (top-right column)

    Returns:
        H with bottom row [0, 0, 0, 1]
    """
    H = np.eye(4, dtype=np.float64)
    H[0:3, 0:3] = R
    H[0:3, 3] = p
    return H


def rot_to_euler_deg(R: np.ndarray) -> np.ndarray:
    """Roll, pitch, yaw [deg] of a rotation matrix (xyz extrinsic)."""
    return R_scipy.from_matrix(R).as_euler('xyz', degrees=True)
