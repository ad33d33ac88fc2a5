from __future__ import annotations

import numpy as np

from tfgraph.core.store import TransformStore
from tfgraph.core.tree import build_tree, index_by_parent, tree_to_dict


def _edge(parent: str, child: str, t=(0.0, 0.0, 0.0), q=(0.0, 0.0, 0.0, 1.0)) -> dict:
    return {
        "parentFrame": parent,
        "childFrame": child,
        "translation": {"x": t[0], "y": t[1], "z": t[2]},
        "rotation": {"x": q[0], "y": q[1], "z": q[2], "w": q[3]},
    }


def _unit(q) -> np.ndarray:
    v = np.asarray(q, dtype=np.float64)
    return v / np.linalg.norm(v)


def _matrix(t, q) -> np.ndarray:
    x, y, z, w = _unit(q).tolist()
    m = np.eye(4, dtype=np.float64)
    m[:3, :3] = [
        [1 - 2 * (y * y + z * z), 2 * (x * y - w * z), 2 * (x * z + w * y)],
        [2 * (x * y + w * z), 1 - 2 * (x * x + z * z), 2 * (y * z - w * x)],
        [2 * (x * z - w * y), 2 * (y * z + w * x), 1 - 2 * (x * x + y * y)],
    ]
    m[:3, 3] = t
    return m


def _hamilton(a, b) -> np.ndarray:
    ax, ay, az, aw = a
    bx, by, bz, bw = b
    return np.array(
        [
            aw * bx + ax * bw + ay * bz - az * by,
            aw * by - ax * bz + ay * bw + az * bx,
            aw * bz + ax * by - ay * bx + az * bw,
            aw * bw - ax * bx - ay * by - az * bz,
        ]
    )


def test_map_base_link_sensor_scenario() -> None:
    store = TransformStore()
    store.ingest(_edge("map", "base_link", (1.0, 0.0, 0.0)))
    store.ingest(_edge("base_link", "sensor", (0.0, 0.0, 0.2)))

    tree = build_tree("map", store.snapshot())
    assert tree.root == "map"
    assert set(tree) == {"base_link", "sensor"}
    assert tree["base_link"].world_position == (1.0, 0.0, 0.0)
    assert np.allclose(tree["sensor"].world_position, (1.0, 0.0, 0.2))
    assert tree["sensor"].parent_frame_id == "base_link"
    assert tree["sensor"].parent_world_position == (1.0, 0.0, 0.0)
    assert tree["base_link"].parent_world_position == (0.0, 0.0, 0.0)


def test_chain_matches_manual_composition() -> None:
    edges = [
        ("A", "B", (1.0, -2.0, 0.5), (0.1, 0.2, 0.3, 0.9)),
        ("B", "C", (0.0, 0.7, -1.2), (-0.4, 0.1, 0.05, 0.8)),
        ("C", "D", (2.5, 0.3, 0.0), (0.0, 0.6, -0.2, 0.5)),
    ]
    store = TransformStore()
    for parent, child, t, q in edges:
        store.ingest(_edge(parent, child, t, q))

    tree = build_tree("A", store.snapshot())
    node = tree["D"]

    expected_m = np.eye(4)
    expected_q = np.array([0.0, 0.0, 0.0, 1.0])
    for _, _, t, q in edges:
        expected_m = expected_m @ _matrix(t, q)
        expected_q = _unit(_hamilton(expected_q, _unit(q)))

    assert np.allclose(node.world_position, expected_m[:3, 3], atol=1e-9, rtol=0.0)
    got_q = np.asarray(node.world_orientation)
    if float(np.dot(got_q, expected_q)) < 0.0:
        expected_q = -expected_q
    assert np.allclose(got_q, expected_q, atol=1e-9, rtol=0.0)
    assert np.allclose(_matrix((0, 0, 0), got_q)[:3, :3], expected_m[:3, :3], atol=1e-9)


def test_cycle_terminates_and_visits_each_frame_once() -> None:
    store = TransformStore()
    store.ingest(_edge("A", "B", (1.0, 0.0, 0.0)))
    store.ingest(_edge("B", "C", (1.0, 0.0, 0.0)))
    store.ingest(_edge("C", "A", (1.0, 0.0, 0.0)))

    tree = build_tree("A", store.snapshot())
    assert sorted(tree) == ["B", "C"]
    assert "A" not in tree
    assert tree["C"].world_position == (2.0, 0.0, 0.0)


def test_first_discovered_path_wins() -> None:
    store = TransformStore()
    store.ingest(_edge("map", "left", (0.0, 1.0, 0.0)))
    store.ingest(_edge("map", "right", (0.0, -1.0, 0.0)))
    store.ingest(_edge("left", "tool", (1.0, 0.0, 0.0)))
    store.ingest(_edge("right", "tool", (5.0, 0.0, 0.0)))

    tree = build_tree("map", store.snapshot())
    assert tree["tool"].parent_frame_id == "left"
    assert tree["tool"].world_position == (1.0, 1.0, 0.0)


def test_unknown_root_and_unreachable_frames() -> None:
    store = TransformStore()
    store.ingest(_edge("map", "base_link"))
    store.ingest(_edge("odom", "wheel"))

    assert len(build_tree("nowhere", store.snapshot())) == 0

    tree = build_tree("map", store.snapshot())
    assert set(tree) == {"base_link"}
    assert "wheel" not in tree

    # Edges are only followed forward.
    assert len(build_tree("base_link", store.snapshot())) == 0


def test_deep_chain_does_not_recurse() -> None:
    store = TransformStore()
    n = 5000
    for i in range(n):
        store.ingest(_edge(f"f{i}", f"f{i + 1}", (0.001, 0.0, 0.0)))

    tree = build_tree("f0", store.snapshot())
    assert len(tree) == n
    assert np.isclose(tree[f"f{n}"].world_position[0], n * 0.001)


def test_index_by_parent_and_tree_serialization() -> None:
    store = TransformStore()
    store.ingest(_edge("map", "a"))
    store.ingest(_edge("map", "b"))
    store.ingest(_edge("a", "c"))

    index = index_by_parent(store.snapshot())
    assert [t.child_frame for t in index["map"]] == ["a", "b"]
    assert [t.child_frame for t in index["a"]] == ["c"]

    data = tree_to_dict(build_tree("map", store.snapshot()))
    assert data["root"] == "map"
    assert [f["frameId"] for f in data["frames"]] == ["a", "b", "c"]
    entry = data["frames"][2]
    assert set(entry) == {"frameId", "worldPosition", "worldOrientation", "parentFrameId", "parentWorldPosition"}
    assert entry["worldOrientation"] == {"x": 0.0, "y": 0.0, "z": 0.0, "w": 1.0}
