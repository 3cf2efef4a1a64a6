from __future__ import annotations

from typing import Sequence

import numpy as np

from .types import Vec3

# Below this, an axis matrix is treated as singular.
DET_EPSILON = 1e-12


def identity() -> np.ndarray:
    return np.eye(3, dtype=np.float64)


def rot_x(deg: float) -> np.ndarray:
    r = np.eye(3, dtype=np.float64)
    a = np.deg2rad(float(deg))
    c, s = np.cos(a), np.sin(a)
    r[1, 1] = c
    r[1, 2] = -s
    r[2, 1] = s
    r[2, 2] = c
    return r


def rot_y(deg: float) -> np.ndarray:
    r = np.eye(3, dtype=np.float64)
    a = np.deg2rad(float(deg))
    c, s = np.cos(a), np.sin(a)
    r[0, 0] = c
    r[0, 2] = s
    r[2, 0] = -s
    r[2, 2] = c
    return r


def rot_z(deg: float) -> np.ndarray:
    r = np.eye(3, dtype=np.float64)
    a = np.deg2rad(float(deg))
    c, s = np.cos(a), np.sin(a)
    r[0, 0] = c
    r[0, 1] = -s
    r[1, 0] = s
    r[1, 1] = c
    return r


_ROTATIONS = {"x": rot_x, "y": rot_y, "z": rot_z}


def rotation_about(axis: str, deg: float) -> np.ndarray:
    """Elementary rotation about 'x', 'y' or 'z' (case-insensitive)."""
    try:
        fn = _ROTATIONS[axis.lower()]
    except KeyError:
        raise ValueError(f"Unknown rotation axis: {axis!r}") from None
    return fn(deg)


def compose_axis_rotation(order: str, angles: Vec3) -> np.ndarray:
    """Bind-pose axis matrix C = R(order[0]) @ R(order[1]) @ ...

    Each letter picks the angle stored for that axis, so ``order`` only
    controls composition order.
    """
    by_axis = {"x": angles[0], "y": angles[1], "z": angles[2]}
    m = identity()
    for letter in order.lower():
        m = m @ rotation_about(letter, by_axis[letter])
    return m


def dof_axis(dof: str) -> str:
    """Axis letter of a rotational dof name ('rx' -> 'x'), '' for anything else."""
    # tx/ty/tz/l are translation or length channels, not rotations about x/y/z
    d = dof.lower()
    if len(d) == 2 and d[0] == "r" and d[1] in _ROTATIONS:
        return d[1]
    return ""


def compose_dof_rotation(dof: Sequence[str], values: Sequence[float]) -> np.ndarray:
    """Compose the per-frame motion matrix M in declared dof order.

    A dof without a value rotates by 0; non-rotational dofs (tx, l, ...) keep
    their channel slot but contribute identity.
    """
    m = identity()
    for i, name in enumerate(dof):
        axis = dof_axis(name)
        if not axis:
            continue
        angle = values[i] if i < len(values) else 0.0
        m = m @ rotation_about(axis, angle)
    return m


def determinant(m: np.ndarray) -> float:
    return float(
        m[0, 0] * (m[1, 1] * m[2, 2] - m[2, 1] * m[1, 2])
        - m[0, 1] * (m[1, 0] * m[2, 2] - m[1, 2] * m[2, 0])
        + m[0, 2] * (m[1, 0] * m[2, 1] - m[1, 1] * m[2, 0])
    )


def inverse3(m: np.ndarray) -> np.ndarray:
    """Closed-form adjugate / determinant inverse of a 3x3 matrix.

    Raises ZeroDivisionError when the matrix is singular or not finite.
    """
    det = determinant(m)
    if not np.isfinite(det) or abs(det) < DET_EPSILON:
        raise ZeroDivisionError(f"singular 3x3 matrix (det={det})")
    inv_det = 1.0 / det
    adj = np.array(
        [
            [
                m[1, 1] * m[2, 2] - m[2, 1] * m[1, 2],
                m[0, 2] * m[2, 1] - m[0, 1] * m[2, 2],
                m[0, 1] * m[1, 2] - m[0, 2] * m[1, 1],
            ],
            [
                m[1, 2] * m[2, 0] - m[1, 0] * m[2, 2],
                m[0, 0] * m[2, 2] - m[0, 2] * m[2, 0],
                m[1, 0] * m[0, 2] - m[0, 0] * m[1, 2],
            ],
            [
                m[1, 0] * m[2, 1] - m[2, 0] * m[1, 1],
                m[2, 0] * m[0, 1] - m[0, 0] * m[2, 1],
                m[0, 0] * m[1, 1] - m[1, 0] * m[0, 1],
            ],
        ],
        dtype=np.float64,
    )
    return adj * inv_det


def as_vec3(v: np.ndarray) -> Vec3:
    return (float(v[0]), float(v[1]), float(v[2]))
