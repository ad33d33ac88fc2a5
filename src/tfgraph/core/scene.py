from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from .poses import Vec3, rotate_vector, to_vec3, vec3_to_dict
from .tree import TransformTree
from .viewer_settings import sanitize_axis_scale


RGBA = tuple[float, float, float, float]

AXIS_COLORS: tuple[RGBA, RGBA, RGBA] = (
    (1.0, 0.2, 0.2, 1.0),  # X red
    (0.2, 1.0, 0.2, 1.0),  # Y green
    (0.2, 0.6, 1.0, 1.0),  # Z cyan
)
LINK_COLOR: RGBA = (0.7, 0.7, 0.7, 0.6)

_UNIT_AXES = np.eye(3, dtype=np.float64)


@dataclass(frozen=True)
class LineSegment:
    start: Vec3
    end: Vec3
    color: RGBA


def frame_axes(tree: TransformTree, frame_id: str, *, scale: float = 1.0) -> list[LineSegment]:
    """Oriented X/Y/Z triad for one tree entry, starting at its world position."""
    node = tree[frame_id]
    s = sanitize_axis_scale(scale)
    origin = np.asarray(node.world_position, dtype=np.float64)
    out: list[LineSegment] = []
    for axis, color in zip(_UNIT_AXES, AXIS_COLORS):
        tip = origin + rotate_vector(node.world_orientation, axis) * s
        out.append(LineSegment(start=node.world_position, end=to_vec3(tip), color=color))
    return out


def frame_links(tree: TransformTree) -> list[LineSegment]:
    return [LineSegment(start=n.parent_world_position, end=n.world_position, color=LINK_COLOR) for n in tree.values()]


def scene_segments(tree: TransformTree, *, axis_scale: float = 1.0, show_links: bool = True) -> list[LineSegment]:
    segments: list[LineSegment] = []
    for frame_id in tree:
        segments.extend(frame_axes(tree, frame_id, scale=axis_scale))
    if show_links:
        segments.extend(frame_links(tree))
    return segments


def segments_to_vertex_arrays(segments: list[LineSegment]) -> tuple[np.ndarray, np.ndarray]:
    """Flatten segments into `(vertices[2n,3], colors[2n,4])` float32 arrays."""
    n = len(segments)
    vertices = np.empty((2 * n, 3), dtype=np.float32)
    colors = np.empty((2 * n, 4), dtype=np.float32)
    for i, seg in enumerate(segments):
        vertices[2 * i] = seg.start
        vertices[2 * i + 1] = seg.end
        colors[2 * i] = seg.color
        colors[2 * i + 1] = seg.color
    return vertices, colors


def segment_to_dict(seg: LineSegment) -> dict[str, Any]:
    return {
        "start": vec3_to_dict(seg.start),
        "end": vec3_to_dict(seg.end),
        "color": [float(c) for c in seg.color],
    }
