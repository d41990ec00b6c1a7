"""Vector and quaternion helpers for the crawler frames.

Quaternions are (w, x, y, z). The world is Z-up and a body's forward axis is
its local +X.
"""

from __future__ import annotations

import math

import numpy as np

IDENTITY_QUAT = np.array([1.0, 0.0, 0.0, 0.0], dtype=np.float32)
WORLD_UP = np.array([0.0, 0.0, 1.0], dtype=np.float32)
WORLD_DOWN = np.array([0.0, 0.0, -1.0], dtype=np.float32)
LOCAL_FORWARD = np.array([1.0, 0.0, 0.0], dtype=np.float32)


def as_vec3(vec) -> np.ndarray:
    return np.asarray(vec, dtype=np.float32).reshape(3)


def normalize_quat(quat_wxyz: np.ndarray) -> np.ndarray:
    quat = np.asarray(quat_wxyz, dtype=np.float32).reshape(4)
    n = float(np.linalg.norm(quat))
    if n <= 1e-8:
        return IDENTITY_QUAT.copy()
    return (quat / n).astype(np.float32)


def quat_conjugate(quat_wxyz: np.ndarray) -> np.ndarray:
    w, x, y, z = [float(v) for v in quat_wxyz]
    return np.array([w, -x, -y, -z], dtype=np.float32)


def quat_mul(quat_a: np.ndarray, quat_b: np.ndarray) -> np.ndarray:
    """Quaternion multiply (wxyz)."""
    w1, x1, y1, z1 = [float(v) for v in quat_a]
    w2, x2, y2, z2 = [float(v) for v in quat_b]
    w = w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2
    x = w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2
    y = w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2
    z = w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2
    return np.array([w, x, y, z], dtype=np.float32)


def axis_angle_to_quat(axis: np.ndarray, angle: float) -> np.ndarray:
    """Convert axis-angle (axis, angle in radians) to quaternion (wxyz)."""
    axis = as_vec3(axis)
    axis_norm = axis / (np.linalg.norm(axis) + 1e-12)
    half = float(angle) / 2.0
    w = math.cos(half)
    s = math.sin(half)
    xyz = axis_norm * s
    return np.array([w, xyz[0], xyz[1], xyz[2]], dtype=np.float32)


def yaw_to_quat(yaw: float) -> np.ndarray:
    """Rotation of `yaw` radians about world up."""
    return axis_angle_to_quat(WORLD_UP, yaw)


def rotate_vec_by_quat(quat_wxyz: np.ndarray, vec: np.ndarray) -> np.ndarray:
    w, x, y, z = [float(v) for v in quat_wxyz]
    vx, vy, vz = [float(v) for v in vec]

    tx = 2.0 * (y * vz - z * vy)
    ty = 2.0 * (z * vx - x * vz)
    tz = 2.0 * (x * vy - y * vx)

    vpx = vx + w * tx + (y * tz - z * ty)
    vpy = vy + w * ty + (z * tx - x * tz)
    vpz = vz + w * tz + (x * ty - y * tx)
    return np.array([vpx, vpy, vpz], dtype=np.float32)


def inverse_rotate_vec_by_quat(quat_wxyz: np.ndarray, vec: np.ndarray) -> np.ndarray:
    return rotate_vec_by_quat(quat_conjugate(normalize_quat(quat_wxyz)), vec)


def forward_from_quat(quat_wxyz: np.ndarray) -> np.ndarray:
    return rotate_vec_by_quat(normalize_quat(quat_wxyz), LOCAL_FORWARD)


def yaw_from_quat(quat_wxyz: np.ndarray) -> float:
    w, x, y, z = [float(v) for v in quat_wxyz]
    siny_cosp = 2.0 * (w * z + x * y)
    cosy_cosp = 1.0 - 2.0 * (y * y + z * z)
    return math.atan2(siny_cosp, cosy_cosp)


def look_rotation(direction: np.ndarray) -> np.ndarray:
    """Yaw-only rotation whose forward points along the horizontal part of `direction`.

    A direction with no horizontal component gives the identity rotation.
    """
    dx, dy, _ = [float(v) for v in direction]
    if math.hypot(dx, dy) <= 1e-8:
        return IDENTITY_QUAT.copy()
    return yaw_to_quat(math.atan2(dy, dx))


def from_to_rotation(from_dir: np.ndarray, to_dir: np.ndarray) -> np.ndarray:
    """Shortest-arc rotation taking direction `from_dir` onto `to_dir` (wxyz)."""
    a = as_vec3(from_dir)
    b = as_vec3(to_dir)
    na = float(np.linalg.norm(a))
    nb = float(np.linalg.norm(b))
    if na <= 1e-8 or nb <= 1e-8:
        return IDENTITY_QUAT.copy()
    a = a / na
    b = b / nb

    d = float(np.clip(np.dot(a, b), -1.0, 1.0))
    if d >= 1.0 - 1e-6:
        return IDENTITY_QUAT.copy()
    if d <= -1.0 + 1e-6:
        # Antiparallel: any axis orthogonal to `a` works.
        axis = np.cross(a, LOCAL_FORWARD)
        if float(np.linalg.norm(axis)) <= 1e-6:
            axis = np.cross(a, np.array([0.0, 1.0, 0.0], dtype=np.float32))
        return axis_angle_to_quat(axis, math.pi)

    axis = np.cross(a, b)
    quat = np.array([1.0 + d, axis[0], axis[1], axis[2]], dtype=np.float32)
    return normalize_quat(quat)
