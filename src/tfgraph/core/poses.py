from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np


Vec3 = tuple[float, float, float]
QuatXYZW = tuple[float, float, float, float]

ZERO_VEC3: Vec3 = (0.0, 0.0, 0.0)
IDENTITY_QUAT: QuatXYZW = (0.0, 0.0, 0.0, 1.0)


@dataclass(frozen=True)
class Pose:
    """Position + orientation (xyzw quaternion) expressed in some frame."""

    position: Vec3 = ZERO_VEC3
    orientation: QuatXYZW = IDENTITY_QUAT


IDENTITY_POSE = Pose()


def _component(value: Any, key: str, index: int, default: float) -> float:
    if value is None:
        return default
    if isinstance(value, Mapping):
        raw = value.get(key)
    elif isinstance(value, (np.ndarray, Sequence)) and not isinstance(value, str):
        raw = value[index] if index < len(value) else None
    else:
        raw = getattr(value, key, None)
    if raw is None:
        return default
    return float(raw)


def vec3_from_any(value: Any) -> np.ndarray:
    """Read a vector from `{x,y,z}`, a sequence, or an object with x/y/z.

    Missing components are 0.
    """
    return np.array(
        [
            _component(value, "x", 0, 0.0),
            _component(value, "y", 1, 0.0),
            _component(value, "z", 2, 0.0),
        ],
        dtype=np.float64,
    )


def quat_from_any(value: Any) -> np.ndarray:
    """Read an xyzw quaternion and normalize it.

    Missing x/y/z are 0 and a missing w is 1. A zero-norm input reads as identity.
    """
    q = np.array(
        [
            _component(value, "x", 0, 0.0),
            _component(value, "y", 1, 0.0),
            _component(value, "z", 2, 0.0),
            _component(value, "w", 3, 1.0),
        ],
        dtype=np.float64,
    )
    return normalize_quat(q)


def normalize_quat(q: np.ndarray | Sequence[float]) -> np.ndarray:
    out = np.asarray(q, dtype=np.float64).reshape(4)
    n = float(np.linalg.norm(out))
    if n < 1e-12 or not np.isfinite(n):
        return np.array(IDENTITY_QUAT, dtype=np.float64)
    return out / n


def quat_multiply(a: np.ndarray | Sequence[float], b: np.ndarray | Sequence[float]) -> np.ndarray:
    """Hamilton product `a ∘ b` of two xyzw quaternions (b is applied first)."""
    ax, ay, az, aw = np.asarray(a, dtype=np.float64).reshape(4).tolist()
    bx, by, bz, bw = np.asarray(b, dtype=np.float64).reshape(4).tolist()
    return np.array(
        [
            aw * bx + ax * bw + ay * bz - az * by,
            aw * by - ax * bz + ay * bw + az * bx,
            aw * bz + ax * by - ay * bx + az * bw,
            aw * bw - ax * bx - ay * by - az * bz,
        ],
        dtype=np.float64,
    )


def rotate_vector(q: np.ndarray | Sequence[float], v: np.ndarray | Sequence[float]) -> np.ndarray:
    """Rotate `v` by the unit quaternion `q` (xyzw)."""
    qv = np.asarray(q, dtype=np.float64).reshape(4)
    u = qv[:3]
    w = float(qv[3])
    vec = np.asarray(v, dtype=np.float64).reshape(3)
    t = 2.0 * np.cross(u, vec)
    return vec + w * t + np.cross(u, t)


def compose(
    parent_position: Any,
    parent_orientation: Any,
    local_position: Any,
    local_orientation: Any,
) -> tuple[np.ndarray, np.ndarray]:
    """Combine a parent world pose with a parent->child local transform.

    Returns the child's world `(position, orientation)`. The local rotation is
    applied in the parent's rotated frame.
    """
    p_pos = vec3_from_any(parent_position)
    p_rot = quat_from_any(parent_orientation)
    l_pos = vec3_from_any(local_position)
    l_rot = quat_from_any(local_orientation)

    child_pos = p_pos + rotate_vector(p_rot, l_pos)
    child_rot = normalize_quat(quat_multiply(p_rot, l_rot))
    return child_pos, child_rot


def to_vec3(v: np.ndarray) -> Vec3:
    return (float(v[0]), float(v[1]), float(v[2]))


def to_quat(q: np.ndarray) -> QuatXYZW:
    return (float(q[0]), float(q[1]), float(q[2]), float(q[3]))


def compose_poses(parent: Pose, local: Pose) -> Pose:
    pos, rot = compose(parent.position, parent.orientation, local.position, local.orientation)
    return Pose(position=to_vec3(pos), orientation=to_quat(rot))


def vec3_to_dict(v: Sequence[float]) -> dict[str, float]:
    return {"x": float(v[0]), "y": float(v[1]), "z": float(v[2])}


def quat_to_dict(q: Sequence[float]) -> dict[str, float]:
    return {"x": float(q[0]), "y": float(q[1]), "z": float(q[2]), "w": float(q[3])}


def pose_to_dict(pose: Pose) -> dict[str, dict[str, float]]:
    return {"position": vec3_to_dict(pose.position), "orientation": quat_to_dict(pose.orientation)}


def pose_from_any(value: Any) -> Pose:
    """Read a `Pose` or a `{position, orientation}` mapping."""
    if isinstance(value, Pose):
        return value
    if isinstance(value, Mapping):
        position = value.get("position")
        orientation = value.get("orientation")
    else:
        position = getattr(value, "position", None)
        orientation = getattr(value, "orientation", None)
    return Pose(position=to_vec3(vec3_from_any(position)), orientation=to_quat(quat_from_any(orientation)))
