from __future__ import annotations

from typing import Any


def parse_bool(value: Any, *, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        raise ValueError(f"Missing {field}")
    s = str(value).strip().lower()
    if s in {"1", "true", "yes", "on"}:
        return True
    if s in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid {field}")


def parse_frame_id(value: Any, *, field: str) -> str | None:
    if value is None:
        return None
    fid = str(value)
    if not fid:
        raise ValueError(f"Invalid {field}")
    return fid


def parse_transform_request(body: dict[str, Any]) -> tuple[str, str | None, str, Any]:
    """Validate a `/api/tf/transform` body.

    Returns `(frame_id, root, kind, value)` where kind is one of pose/point/entities.
    """
    frame_id = parse_frame_id(body.get("frameId"), field="frameId")
    if frame_id is None:
        raise ValueError("Missing frameId")
    root = parse_frame_id(body.get("root"), field="root")

    kinds = [k for k in ("pose", "point", "entities") if k in body]
    if len(kinds) != 1:
        raise ValueError("Provide exactly one of pose, point or entities")
    kind = kinds[0]
    value = body[kind]
    if kind == "entities" and not (isinstance(value, list) and all(isinstance(e, dict) for e in value)):
        raise ValueError("entities must be a list of objects")
    if kind in {"pose", "point"} and not isinstance(value, dict):
        raise ValueError(f"{kind} must be an object")
    return frame_id, root, kind, value
