from __future__ import annotations

from .frames import (
    ORIENTATION_W_EPS,
    POSITION_EPS_SQ,
    is_identity,
    transform_batch,
    transform_point,
    transform_pose,
    world_transform_of,
)
from .poses import IDENTITY_POSE, Pose, compose, compose_poses, quat_multiply, rotate_vector
from .scene import LineSegment, frame_axes, frame_links, scene_segments
from .store import TF_STORE, IngestResult, TransformStore
from .transforms import MalformedTransformError, Transform, edge_key, parse_transform
from .tree import FrameNode, TransformTree, build_tree, index_by_parent
from .viewer_settings import VIEWER_SETTINGS, ViewerSettings, ViewerSettingsStore, choose_fixed_frame

__all__ = [
    "Pose",
    "IDENTITY_POSE",
    "compose",
    "compose_poses",
    "quat_multiply",
    "rotate_vector",
    "Transform",
    "MalformedTransformError",
    "edge_key",
    "parse_transform",
    "TransformStore",
    "IngestResult",
    "TF_STORE",
    "FrameNode",
    "TransformTree",
    "build_tree",
    "index_by_parent",
    "POSITION_EPS_SQ",
    "ORIENTATION_W_EPS",
    "is_identity",
    "world_transform_of",
    "transform_pose",
    "transform_point",
    "transform_batch",
    "LineSegment",
    "frame_axes",
    "frame_links",
    "scene_segments",
    "ViewerSettings",
    "ViewerSettingsStore",
    "VIEWER_SETTINGS",
    "choose_fixed_frame",
]
