from __future__ import annotations

from .runner import TFGraphServer, run
from .client import TFGraphClient
from .core.frames import transform_batch, transform_point, transform_pose, world_transform_of
from .core.poses import Pose, compose
from .core.store import TransformStore
from .core.transforms import Transform
from .core.tree import FrameNode, TransformTree, build_tree

__version__ = "0.1.0"

__all__ = [
    "run",
    "TFGraphServer",
    "TFGraphClient",
    "Pose",
    "compose",
    "Transform",
    "TransformStore",
    "FrameNode",
    "TransformTree",
    "build_tree",
    "world_transform_of",
    "transform_pose",
    "transform_point",
    "transform_batch",
]
