from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import numpy as np

from .poses import (
    IDENTITY_POSE,
    Pose,
    normalize_quat,
    pose_from_any,
    pose_to_dict,
    quat_from_any,
    quat_multiply,
    rotate_vector,
    to_quat,
    to_vec3,
    vec3_from_any,
    vec3_to_dict,
)
from .tree import TransformTree


# Empirical thresholds for "this transform is the identity". Tunable, not derived.
POSITION_EPS_SQ = 1e-12
ORIENTATION_W_EPS = 1e-6

POINT_LIST_FIELDS = ("points", "corners")


def world_transform_of(tree: TransformTree, frame_id: str | None) -> Pose | None:
    """World pose of `frame_id` relative to the tree root, or None if it was not reached."""
    if not frame_id or frame_id == tree.root:
        return IDENTITY_POSE
    node = tree.get(frame_id)
    if node is None:
        return None
    return node.world_pose


def is_identity(
    pose: Pose,
    *,
    position_eps_sq: float = POSITION_EPS_SQ,
    orientation_w_eps: float = ORIENTATION_W_EPS,
) -> bool:
    p = pose.position
    len_sq = p[0] * p[0] + p[1] * p[1] + p[2] * p[2]
    return len_sq < position_eps_sq and abs(1.0 - pose.orientation[3]) < orientation_w_eps


def _apply_to_point(frame: Pose, point: Any) -> np.ndarray:
    return vec3_from_any(frame.position) + rotate_vector(frame.orientation, vec3_from_any(point))


def _point_like(source: Any, v: np.ndarray) -> Any:
    if isinstance(source, Mapping):
        return vec3_to_dict(v)
    return to_vec3(v)


def _apply_to_pose(frame: Pose, pose: Any) -> Any:
    local = pose_from_any(pose)
    pos = _apply_to_point(frame, local.position)
    rot = normalize_quat(quat_multiply(quat_from_any(frame.orientation), local.orientation))
    out = Pose(position=to_vec3(pos), orientation=to_quat(rot))
    if isinstance(pose, Mapping):
        return pose_to_dict(out)
    return out


def transform_pose(
    tree: TransformTree,
    pose: Any,
    source_frame_id: str | None,
    *,
    position_eps_sq: float = POSITION_EPS_SQ,
    orientation_w_eps: float = ORIENTATION_W_EPS,
) -> Any:
    """Re-express `pose` (given in `source_frame_id`) in the tree's root frame.

    Unknown source frames and identity transforms return `pose` itself. Mappings come
    back as `{position, orientation}` dicts, everything else as a `Pose`.
    """
    if pose is None:
        return pose
    frame = world_transform_of(tree, source_frame_id)
    if frame is None:
        return pose
    if is_identity(frame, position_eps_sq=position_eps_sq, orientation_w_eps=orientation_w_eps):
        return pose
    return _apply_to_pose(frame, pose)


def transform_point(
    tree: TransformTree,
    point: Any,
    source_frame_id: str | None,
    *,
    position_eps_sq: float = POSITION_EPS_SQ,
    orientation_w_eps: float = ORIENTATION_W_EPS,
) -> Any:
    if point is None:
        return point
    frame = world_transform_of(tree, source_frame_id)
    if frame is None:
        return point
    if is_identity(frame, position_eps_sq=position_eps_sq, orientation_w_eps=orientation_w_eps):
        return point
    return _point_like(point, _apply_to_point(frame, point))


def transform_batch(
    tree: TransformTree,
    entities: Sequence[Mapping[str, Any]] | None,
    source_frame_id: str | None,
    *,
    position_eps_sq: float = POSITION_EPS_SQ,
    orientation_w_eps: float = ORIENTATION_W_EPS,
) -> Any:
    """Transform the `pose` and point lists (`points`, `corners`) of every entity.

    The source transform is resolved once for the whole batch. Other fields are
    copied through untouched. An unresolvable source returns `entities` as given.
    """
    if not entities:
        return entities
    frame = world_transform_of(tree, source_frame_id)
    if frame is None:
        return entities
    if is_identity(frame, position_eps_sq=position_eps_sq, orientation_w_eps=orientation_w_eps):
        return entities

    out: list[dict[str, Any]] = []
    for entity in entities:
        moved = dict(entity)
        if entity.get("pose") is not None:
            moved["pose"] = _apply_to_pose(frame, entity["pose"])
        for field in POINT_LIST_FIELDS:
            pts = entity.get(field)
            if pts:
                moved[field] = [_point_like(p, _apply_to_point(frame, p)) for p in pts]
        out.append(moved)
    return out
