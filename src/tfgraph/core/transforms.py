from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .poses import QuatXYZW, Vec3, quat_from_any, to_quat, to_vec3, vec3_from_any


EDGE_SEPARATOR = "->"


class MalformedTransformError(ValueError):
    """Raised when a transform message cannot be turned into a usable edge."""


@dataclass(frozen=True)
class Transform:
    """Latest known parent->child rigid transform.

    `translation`/`rotation` take coordinates from the child frame into the parent frame.
    The rotation is always stored normalized.

    Frame ids are kept exactly as received (no trimming or case folding).
    """

    parent_frame: str
    child_frame: str
    translation: Vec3
    rotation: QuatXYZW

    @property
    def edge_key(self) -> str:
        return edge_key(self.parent_frame, self.child_frame)


def edge_key(parent_frame: str, child_frame: str) -> str:
    """Store key for the edge, `"{parent}->{child}"`.

    The key is a plain join, so ids that themselves contain `->` can collide:
    `("a->b", "c")` and `("a", "b->c")` both map to `"a->b->c"` and overwrite each other.
    """
    return f"{parent_frame}{EDGE_SEPARATOR}{child_frame}"


def _frame_id(value: Any, *, field: str) -> str:
    if value is None:
        raise MalformedTransformError(f"Missing {field}")
    fid = str(value)
    if not fid:
        raise MalformedTransformError(f"Empty {field}")
    return fid


def _nested(msg: Mapping[str, Any], *path: str) -> Any:
    cur: Any = msg
    for key in path:
        if not isinstance(cur, Mapping):
            return None
        cur = cur.get(key)
    return cur


def parse_transform(msg: Transform | Mapping[str, Any]) -> Transform:
    """Build a `Transform` from an incoming message.

    Accepted shapes:
    - `{parentFrame, childFrame, translation: {x,y,z}, rotation: {x,y,z,w}}`
    - ROS TransformStamped: `{header: {frame_id}, child_frame_id, transform: {translation, rotation}}`

    Missing components inside `translation`/`rotation` default to 0 (w to 1), but a
    missing `translation` or `rotation` object makes the edge unusable.
    """

    if isinstance(msg, Transform):
        parent, child = msg.parent_frame, msg.child_frame
        translation: Any = msg.translation
        rotation: Any = msg.rotation
    elif isinstance(msg, Mapping):
        if "header" in msg or "child_frame_id" in msg:
            parent = _nested(msg, "header", "frame_id")
            child = msg.get("child_frame_id")
            translation = _nested(msg, "transform", "translation")
            rotation = _nested(msg, "transform", "rotation")
        else:
            parent = msg.get("parentFrame")
            child = msg.get("childFrame")
            translation = msg.get("translation")
            rotation = msg.get("rotation")
    else:
        raise MalformedTransformError(f"Unsupported transform message type: {type(msg).__name__}")

    parent_id = _frame_id(parent, field="parent frame")
    child_id = _frame_id(child, field="child frame")
    if translation is None:
        raise MalformedTransformError(f"Edge {edge_key(parent_id, child_id)} has no translation")
    if rotation is None:
        raise MalformedTransformError(f"Edge {edge_key(parent_id, child_id)} has no rotation")

    try:
        t = vec3_from_any(translation)
        q = quat_from_any(rotation)
    except (TypeError, ValueError) as ex:
        raise MalformedTransformError(f"Edge {edge_key(parent_id, child_id)} has non-numeric data") from ex

    return Transform(
        parent_frame=parent_id,
        child_frame=child_id,
        translation=to_vec3(t),
        rotation=to_quat(q),
    )


def transform_to_dict(t: Transform) -> dict[str, Any]:
    return {
        "parentFrame": t.parent_frame,
        "childFrame": t.child_frame,
        "translation": {"x": t.translation[0], "y": t.translation[1], "z": t.translation[2]},
        "rotation": {"x": t.rotation[0], "y": t.rotation[1], "z": t.rotation[2], "w": t.rotation[3]},
    }
