from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from .core.poses import QuatXYZW, Vec3
from .core.store import IngestResult
from .core.transforms import Transform, transform_to_dict
from .core.tree import FrameNode, TransformTree


def _vec3(d: Mapping[str, Any]) -> Vec3:
    return (float(d["x"]), float(d["y"]), float(d["z"]))


def _quat(d: Mapping[str, Any]) -> QuatXYZW:
    return (float(d["x"]), float(d["y"]), float(d["z"]), float(d["w"]))


def tree_from_dict(data: Mapping[str, Any]) -> TransformTree:
    """Rebuild a `TransformTree` from the `/api/tf/tree` response."""
    nodes: dict[str, FrameNode] = {}
    for item in data.get("frames") or []:
        node = FrameNode(
            frame_id=str(item["frameId"]),
            world_position=_vec3(item["worldPosition"]),
            world_orientation=_quat(item["worldOrientation"]),
            parent_frame_id=str(item["parentFrameId"]),
            parent_world_position=_vec3(item["parentWorldPosition"]),
        )
        nodes[node.frame_id] = node
    return TransformTree(str(data.get("root") or ""), nodes)


def _message(t: Transform | Mapping[str, Any]) -> Mapping[str, Any]:
    if isinstance(t, Transform):
        return transform_to_dict(t)
    return t


class TFGraphClient:
    """HTTP client for publishing transforms to (and querying) a running tfgraph server.

    Every call opens a short-lived `httpx.Client`; failures (status >= 400) raise
    `RuntimeError` with the server's response text.
    """

    def __init__(self, base_url: str = "http://127.0.0.1:8000") -> None:
        self.base_url = base_url.rstrip("/")

    def _request(self, method: str, path: str, *, timeout_s: float, **kwargs: Any) -> Any:
        import httpx

        with httpx.Client(base_url=self.base_url, timeout=timeout_s) as client:
            res = client.request(method, path, **kwargs)
            if res.status_code >= 400:
                raise RuntimeError(f"{method} {path} failed: {res.status_code} {res.text}")
            return res.json()

    def publish_transforms(
        self,
        transforms: Iterable[Transform | Mapping[str, Any]],
        *,
        timeout_s: float = 10.0,
    ) -> IngestResult:
        """Send a batch of transform messages (flat `parentFrame`/`childFrame` or ROS TransformStamped shape)."""
        body = {"transforms": [_message(t) for t in transforms]}
        data = self._request("POST", "/api/tf", json=body, timeout_s=timeout_s)
        return IngestResult(
            accepted=int(data.get("accepted", 0)),
            rejected=int(data.get("rejected", 0)),
            new_frames=bool(data.get("newFrames")),
        )

    def publish_transform(
        self,
        parent_frame: str,
        child_frame: str,
        translation: Vec3 = (0.0, 0.0, 0.0),
        rotation: QuatXYZW = (0.0, 0.0, 0.0, 1.0),
        *,
        timeout_s: float = 10.0,
    ) -> IngestResult:
        t = Transform(
            parent_frame=parent_frame,
            child_frame=child_frame,
            translation=translation,
            rotation=rotation,
        )
        return self.publish_transforms([t], timeout_s=timeout_s)

    def get_frames(self, *, timeout_s: float = 10.0) -> dict[str, Any]:
        return self._request("GET", "/api/tf/frames", timeout_s=timeout_s)

    def get_tree(self, root: str | None = None, *, timeout_s: float = 10.0) -> TransformTree:
        params = {"root": root} if root is not None else None
        data = self._request("GET", "/api/tf/tree", params=params, timeout_s=timeout_s)
        return tree_from_dict(data)

    def _convert(self, kind: str, value: Any, frame_id: str, root: str | None, timeout_s: float) -> Any:
        body: dict[str, Any] = {"frameId": frame_id, kind: value}
        if root is not None:
            body["root"] = root
        data = self._request("POST", "/api/tf/transform", json=body, timeout_s=timeout_s)
        return data.get(kind)

    def transform_pose(
        self, pose: Mapping[str, Any], frame_id: str, *, root: str | None = None, timeout_s: float = 10.0
    ) -> dict[str, Any]:
        return self._convert("pose", dict(pose), frame_id, root, timeout_s)

    def transform_point(
        self, point: Mapping[str, Any], frame_id: str, *, root: str | None = None, timeout_s: float = 10.0
    ) -> dict[str, Any]:
        return self._convert("point", dict(point), frame_id, root, timeout_s)

    def transform_batch(
        self,
        entities: Iterable[Mapping[str, Any]],
        frame_id: str,
        *,
        root: str | None = None,
        timeout_s: float = 10.0,
    ) -> list[dict[str, Any]]:
        return self._convert("entities", [dict(e) for e in entities], frame_id, root, timeout_s)

    def get_viewer_settings(self, *, timeout_s: float = 10.0) -> dict[str, Any]:
        return self._request("GET", "/api/viewer/settings", timeout_s=timeout_s)

    def set_fixed_frame(self, frame_id: str, *, timeout_s: float = 10.0) -> None:
        self._request("PATCH", "/api/viewer/settings", json={"fixedFrame": frame_id}, timeout_s=timeout_s)
