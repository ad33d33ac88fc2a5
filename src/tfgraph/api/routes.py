from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import numpy as np
from fastapi import FastAPI, HTTPException
from starlette.responses import Response

from ..core.frames import transform_batch, transform_point, transform_pose
from ..core.scene import scene_segments, segment_to_dict, segments_to_vertex_arrays
from ..core.store import TransformStore
from ..core.tree import TransformTree, build_tree, tree_to_dict
from ..core.viewer_settings import ViewerSettingsStore
from .parsing import parse_frame_id, parse_transform_request


logger = logging.getLogger(__name__)


def mount_tf_api(app: FastAPI, store: TransformStore, settings: ViewerSettingsStore) -> None:
    """Mount transform ingest / tree / conversion endpoints."""

    def _resolve_root(root: str | None) -> str:
        if root is not None:
            return root
        chosen = settings.resolve_fixed_frame(store.parent_frame_ids())
        if chosen is None:
            raise HTTPException(status_code=404, detail="No frames known yet")
        return chosen

    def _tree_for(root: Any) -> TransformTree:
        try:
            root_v = parse_frame_id(root, field="root")
        except ValueError as ex:
            raise HTTPException(status_code=400, detail=str(ex))
        return build_tree(_resolve_root(root_v), store.snapshot())

    @app.post("/api/tf")
    def ingest_transforms(body: dict) -> dict[str, Any]:
        transforms = body.get("transforms")
        if not isinstance(transforms, list):
            raise HTTPException(status_code=400, detail="transforms must be a list")
        result = store.ingest_many(transforms)
        if result.new_frames:
            logger.info("New frames seen; %d frames known", len(store.frame_ids()))
        return {
            "accepted": result.accepted,
            "rejected": result.rejected,
            "newFrames": result.new_frames,
            "revision": store.revision(),
        }

    @app.get("/api/tf/frames")
    def list_frames() -> dict[str, Any]:
        parents = store.parent_frame_ids()
        return {
            "frames": store.frame_ids(),
            "parentFrames": parents,
            "fixedFrame": settings.resolve_fixed_frame(parents),
        }

    @app.get("/api/tf/tree")
    def get_tree(root: str | None = None) -> dict[str, Any]:
        return tree_to_dict(_tree_for(root))

    @app.get("/api/tf/scene")
    def get_scene(root: str | None = None) -> dict[str, Any]:
        tree = _tree_for(root)
        s = settings.get()
        segments = scene_segments(tree, axis_scale=s.axis_scale, show_links=s.show_links)
        return {
            "root": tree.root,
            "axisScale": float(s.axis_scale),
            "showLinks": bool(s.show_links),
            "segments": [segment_to_dict(seg) for seg in segments],
            "payloads": {
                "lines": {
                    "url": f"/api/tf/scene/lines?root={quote(tree.root, safe='')}",
                    "contentType": "application/octet-stream",
                }
            },
        }

    @app.get("/api/tf/scene/lines")
    def get_scene_lines(root: str | None = None) -> Response:
        # Interleaved per vertex: XYZ (3*float32) + RGBA (4*float32), little-endian.
        tree = _tree_for(root)
        s = settings.get()
        vertices, colors = segments_to_vertex_arrays(
            scene_segments(tree, axis_scale=s.axis_scale, show_links=s.show_links)
        )
        payload = np.ascontiguousarray(np.hstack([vertices, colors]), dtype="<f4").tobytes(order="C")
        return Response(content=payload, media_type="application/octet-stream")

    @app.post("/api/tf/transform")
    def convert(body: dict) -> dict[str, Any]:
        try:
            frame_id, root, kind, value = parse_transform_request(body)
        except ValueError as ex:
            raise HTTPException(status_code=400, detail=str(ex))

        tree = build_tree(_resolve_root(root), store.snapshot())
        resolved = frame_id == tree.root or frame_id in tree

        try:
            if kind == "pose":
                out: Any = transform_pose(tree, value, frame_id)
            elif kind == "point":
                out = transform_point(tree, value, frame_id)
            else:
                out = transform_batch(tree, value, frame_id)
        except (TypeError, ValueError) as ex:
            raise HTTPException(status_code=400, detail=f"Invalid {kind}: {ex}")
        return {"root": tree.root, "frameId": frame_id, "resolved": resolved, kind: out}
