from __future__ import annotations

import contextlib
import logging
import os
import socket
import threading
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

import uvicorn

from .client import TFGraphClient
from .core.frames import transform_batch, transform_point, transform_pose
from .core.store import TF_STORE, IngestResult
from .core.transforms import Transform
from .core.tree import TransformTree, build_tree
from .core.viewer_settings import VIEWER_SETTINGS
from .server import create_app


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TFGraphServer:
    """Handle to a server started in this process.

    Writes and queries go straight to the process-wide store, skipping HTTP.
    """

    host: str
    port: int
    url: str

    def _as_client(self) -> TFGraphClient:
        return TFGraphClient(self.url.rstrip("/"))

    def publish_transforms(self, transforms: Iterable[Transform | Mapping[str, Any]]) -> IngestResult:
        return TF_STORE.ingest_many(transforms)

    def publish_transform(
        self,
        parent_frame: str,
        child_frame: str,
        translation: tuple[float, float, float] = (0.0, 0.0, 0.0),
        rotation: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 1.0),
    ) -> IngestResult:
        t = Transform(
            parent_frame=parent_frame,
            child_frame=child_frame,
            translation=translation,
            rotation=rotation,
        )
        return self.publish_transforms([t])

    def get_tree(self, root: str | None = None) -> TransformTree:
        if root is None:
            root = VIEWER_SETTINGS.resolve_fixed_frame(TF_STORE.parent_frame_ids())
        if root is None:
            return TransformTree("")
        return build_tree(root, TF_STORE.snapshot())

    def transform_pose(self, pose: Any, frame_id: str, *, root: str | None = None) -> Any:
        return transform_pose(self.get_tree(root), pose, frame_id)

    def transform_point(self, point: Any, frame_id: str, *, root: str | None = None) -> Any:
        return transform_point(self.get_tree(root), point, frame_id)

    def transform_batch(self, entities: list[Mapping[str, Any]], frame_id: str, *, root: str | None = None) -> Any:
        return transform_batch(self.get_tree(root), entities, frame_id)

    def set_fixed_frame(self, frame_id: str) -> None:
        VIEWER_SETTINGS.set_fixed_frame(frame_id)

    def get_viewer_settings(self, *, timeout_s: float = 10.0) -> dict:
        """Return the active viewer settings for this server (over HTTP)."""
        return self._as_client().get_viewer_settings(timeout_s=timeout_s)


def _find_free_port(host: str) -> int:
    with contextlib.closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind((host, 0))
        return int(s.getsockname()[1])


def _normalize_base_url(url: str) -> str:
    url = url.strip()
    if url and "://" not in url:
        url = f"http://{url}"
    return url.rstrip("/")


def _is_server_alive(base_url: str, *, timeout_s: float = 0.2) -> bool:
    """True when `/healthz` at `base_url` answers `{"ok": true}`."""
    import httpx

    try:
        with httpx.Client(base_url=base_url, timeout=timeout_s) as client:
            r = client.get("/healthz")
            if r.status_code != 200:
                return False
            data = r.json()
            return bool(data.get("ok"))
    except (httpx.HTTPError, ValueError):
        return False


def _wait_until_alive(base_url: str, *, timeout_s: float) -> bool:
    deadline = time.monotonic() + timeout_s
    while time.monotonic() < deadline:
        if _is_server_alive(base_url):
            return True
        time.sleep(0.05)
    return False


def _existing_server_url(host: str, port: int, *, timeout_s: float) -> str | None:
    """URL of a live tfgraph server to reuse: `TFGRAPH_URL` first, then `host:port`."""
    candidates = [_normalize_base_url(os.getenv("TFGRAPH_URL", ""))]
    if port != 0:
        candidates.append(_normalize_base_url(f"{host}:{port}"))
    for url in candidates:
        if url and _is_server_alive(url, timeout_s=timeout_s):
            return url
    return None


def run(
    *,
    host: str = "127.0.0.1",
    port: int = 0,
    log_level: str = "info",
    access_log: bool = False,
    new_server: bool = False,
    connect_timeout_s: float = 0.2,
    startup_timeout_s: float = 5.0,
) -> TFGraphServer | TFGraphClient:
    """Return a handle to a tfgraph server, starting one only when needed.

    A live server named by `TFGRAPH_URL`, or already listening on an explicit `port`,
    is reused and a `TFGraphClient` is returned. Transforms published through it land
    in that server's store. Otherwise (or with `new_server=True`) uvicorn is started in a
    daemon thread on `port` (a free one when 0) and a `TFGraphServer` is returned.
    Access logging stays off unless asked for since viewers poll `/api/events`.
    """

    if not new_server:
        existing = _existing_server_url(host, port, timeout_s=connect_timeout_s)
        if existing is not None:
            logger.info("Attaching to tfgraph server at %s", existing)
            return TFGraphClient(existing)

    if port == 0:
        port = _find_free_port(host)

    config = uvicorn.Config(create_app(), host=host, port=port, log_level=log_level, access_log=access_log)
    server = uvicorn.Server(config)
    threading.Thread(target=server.run, name=f"tfgraph-{port}", daemon=True).start()

    url = f"http://{host}:{port}/"
    if _wait_until_alive(url.rstrip("/"), timeout_s=startup_timeout_s):
        logger.info("tfgraph server running at %s", url)
    else:
        logger.warning("tfgraph server at %s did not answer within %.1fs", url, startup_timeout_s)

    return TFGraphServer(host=host, port=port, url=url)
