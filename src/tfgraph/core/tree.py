from __future__ import annotations

from collections import deque
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from .poses import IDENTITY_QUAT, ZERO_VEC3, Pose, QuatXYZW, Vec3, compose, quat_to_dict, to_quat, to_vec3, vec3_to_dict
from .transforms import Transform


@dataclass(frozen=True)
class FrameNode:
    frame_id: str
    world_position: Vec3
    world_orientation: QuatXYZW
    parent_frame_id: str
    parent_world_position: Vec3

    @property
    def world_pose(self) -> Pose:
        return Pose(position=self.world_position, orientation=self.world_orientation)


class TransformTree(Mapping[str, FrameNode]):
    """World poses of every frame reachable from `root`.

    The root itself is never an entry; its pose is implicitly identity.
    """

    def __init__(self, root: str, nodes: dict[str, FrameNode] | None = None) -> None:
        self.root = root
        self._nodes: dict[str, FrameNode] = dict(nodes or {})

    def __getitem__(self, frame_id: str) -> FrameNode:
        return self._nodes[frame_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"TransformTree(root={self.root!r}, frames={list(self._nodes)!r})"


def index_by_parent(snapshot: Mapping[str, Transform]) -> dict[str, list[Transform]]:
    """Group edges by parent frame, preserving snapshot order within each group."""
    index: dict[str, list[Transform]] = {}
    for t in snapshot.values():
        index.setdefault(t.parent_frame, []).append(t)
    return index


def build_tree(root_frame_id: str, snapshot: Mapping[str, Transform]) -> TransformTree:
    """Compute the world pose of every frame reachable from `root_frame_id`.

    Breadth-first over forward (parent->child) edges. A frame is visited at most once:
    the first path that reaches it wins, so cycles and alternative paths are dropped.
    An unknown root yields an empty tree.
    """

    children = index_by_parent(snapshot)
    nodes: dict[str, FrameNode] = {}
    visited = {root_frame_id}

    queue: deque[tuple[str, Vec3, QuatXYZW]] = deque([(root_frame_id, ZERO_VEC3, IDENTITY_QUAT)])
    while queue:
        frame_id, world_pos, world_rot = queue.popleft()
        for edge in children.get(frame_id, ()):
            child = edge.child_frame
            if child in visited:
                continue

            child_pos, child_rot = compose(world_pos, world_rot, edge.translation, edge.rotation)
            node = FrameNode(
                frame_id=child,
                world_position=to_vec3(child_pos),
                world_orientation=to_quat(child_rot),
                parent_frame_id=frame_id,
                parent_world_position=world_pos,
            )
            nodes[child] = node
            visited.add(child)
            queue.append((child, node.world_position, node.world_orientation))

    return TransformTree(root_frame_id, nodes)


def frame_node_to_dict(node: FrameNode) -> dict[str, Any]:
    return {
        "frameId": node.frame_id,
        "worldPosition": vec3_to_dict(node.world_position),
        "worldOrientation": quat_to_dict(node.world_orientation),
        "parentFrameId": node.parent_frame_id,
        "parentWorldPosition": vec3_to_dict(node.parent_world_position),
    }


def tree_to_dict(tree: TransformTree) -> dict[str, Any]:
    return {
        "root": tree.root,
        "frames": [frame_node_to_dict(n) for n in tree.values()],
    }
