from __future__ import annotations

import numpy as np

from tfgraph.core.poses import Pose, compose, compose_poses, quat_multiply, rotate_vector


def _yaw(angle: float) -> tuple[float, float, float, float]:
    return (0.0, 0.0, float(np.sin(0.5 * angle)), float(np.cos(0.5 * angle)))


def test_compose_identity_parent_returns_local() -> None:
    pos, rot = compose((0.0, 0.0, 0.0), (0.0, 0.0, 0.0, 1.0), (1.0, 2.0, 3.0), _yaw(0.3))
    assert np.allclose(pos, [1.0, 2.0, 3.0])
    assert np.allclose(rot, _yaw(0.3))


def test_compose_rotates_local_offset_into_parent_frame() -> None:
    # Parent yawed 90 degrees: local +X points along world +Y.
    pos, rot = compose((1.0, 0.0, 0.0), _yaw(0.5 * np.pi), (2.0, 0.0, 0.0), _yaw(0.5 * np.pi))
    assert np.allclose(pos, [1.0, 2.0, 0.0], atol=1e-12)
    assert np.allclose(rot, _yaw(np.pi), atol=1e-12)


def test_compose_defaults_missing_fields() -> None:
    pos, rot = compose({"x": 1.0}, {}, {"y": 2.0}, None)
    assert np.allclose(pos, [1.0, 2.0, 0.0])
    assert np.allclose(rot, [0.0, 0.0, 0.0, 1.0])


def test_compose_output_is_normalized() -> None:
    _, rot = compose((0.0, 0.0, 0.0), (0.0, 0.0, 0.3, 0.9), (0.0, 0.0, 0.0), (0.1, 0.2, 0.0, 0.7))
    assert np.isclose(np.linalg.norm(rot), 1.0, atol=1e-15)


def test_hamilton_product_applies_right_operand_first() -> None:
    qx = (float(np.sin(0.25 * np.pi)), 0.0, 0.0, float(np.cos(0.25 * np.pi)))  # 90 deg about X
    qz = _yaw(0.5 * np.pi)
    q = quat_multiply(qz, qx)
    # X first maps +Y to +Z, then Z leaves +Z unchanged.
    assert np.allclose(rotate_vector(q, [0.0, 1.0, 0.0]), [0.0, 0.0, 1.0], atol=1e-12)
    # +Z: X rotation maps it to -Y, Z rotation maps -Y to +X.
    assert np.allclose(rotate_vector(q, [0.0, 0.0, 1.0]), [1.0, 0.0, 0.0], atol=1e-12)


def test_compose_poses_wraps_tuples() -> None:
    out = compose_poses(Pose(position=(0.0, 0.0, 1.0)), Pose(position=(0.5, 0.0, 0.0)))
    assert out == Pose(position=(0.5, 0.0, 1.0), orientation=(0.0, 0.0, 0.0, 1.0))
