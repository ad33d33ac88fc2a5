from __future__ import annotations

import uuid

import tfgraph
from tfgraph.client import TFGraphClient
from tfgraph.runner import TFGraphServer


def test_run_on_busy_port_attaches_and_publishes_into_running_server() -> None:
    server = tfgraph.run(host="127.0.0.1", port=0, new_server=True)
    assert isinstance(server, TFGraphServer)

    attached = tfgraph.run(host=server.host, port=server.port)
    assert isinstance(attached, TFGraphClient)

    root = f"odom_{uuid.uuid4().hex}"
    assert attached.publish_transform(root, f"{root}_base", (3.0, 0.0, 0.0)).accepted == 1

    # The transform went to the server started above, not a second one.
    tree = server.get_tree(root)
    assert tree[f"{root}_base"].world_position == (3.0, 0.0, 0.0)


def test_env_url_is_used_for_attach_unless_new_server(monkeypatch) -> None:
    s1 = tfgraph.run(host="127.0.0.1", port=0, new_server=True)
    monkeypatch.setenv("TFGRAPH_URL", f"{s1.host}:{s1.port}")

    attached = tfgraph.run()
    assert isinstance(attached, TFGraphClient)
    assert attached.base_url == f"http://{s1.host}:{s1.port}"
    assert "frames" in attached.get_frames()

    s2 = tfgraph.run(host="127.0.0.1", port=0, new_server=True)
    assert isinstance(s2, TFGraphServer)
    assert s2.port != s1.port


def test_client_publishes_and_queries_over_http() -> None:
    server = tfgraph.run(host="127.0.0.1", port=0, new_server=True)
    client = tfgraph.TFGraphClient(server.url)

    root = f"root_{uuid.uuid4().hex}"
    result = client.publish_transform(root, f"{root}_child", (0.0, 2.0, 0.0))
    assert result.accepted == 1
    assert result.new_frames is True

    tree = client.get_tree(root)
    assert tree.root == root
    assert tree[f"{root}_child"].world_position == (0.0, 2.0, 0.0)

    point = client.transform_point({"x": 1.0, "y": 0.0, "z": 0.0}, f"{root}_child", root=root)
    assert point == {"x": 1.0, "y": 2.0, "z": 0.0}

    # The in-process handle sees the same store.
    local = server.transform_point((1.0, 0.0, 0.0), f"{root}_child", root=root)
    assert local == (1.0, 2.0, 0.0)
