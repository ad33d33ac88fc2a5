from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from .transforms import MalformedTransformError, Transform, parse_transform


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IngestResult:
    accepted: int
    rejected: int
    new_frames: bool


class TransformStore:
    """Latest transform for every observed (parent, child) edge.

    Edges are only ever added or overwritten. Writes and snapshots share one lock so
    a tree build never sees a half-applied batch.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._edges: dict[str, Transform] = {}
        self._frames: set[str] = set()
        self._parent_frames: set[str] = set()
        self._revision = 0
        self._rejected = 0

    def _ingest_locked(self, msg: Transform | Mapping[str, Any]) -> tuple[bool, bool]:
        try:
            t = parse_transform(msg)
        except MalformedTransformError as ex:
            self._rejected += 1
            logger.debug("Dropping transform: %s", ex)
            return False, False

        # Keep first-insertion order for overwritten keys; the builder relies on it.
        self._edges[t.edge_key] = t
        self._parent_frames.add(t.parent_frame)

        introduced = False
        for fid in (t.parent_frame, t.child_frame):
            if fid not in self._frames:
                self._frames.add(fid)
                introduced = True
        self._revision += 1
        return True, introduced

    def ingest(self, msg: Transform | Mapping[str, Any]) -> bool:
        """Store/overwrite one edge.

        Returns True when the edge introduced a frame id the store had not seen.
        Malformed or incomplete edges are dropped and return False.
        """
        with self._lock:
            _, introduced = self._ingest_locked(msg)
            return introduced

    def ingest_many(self, msgs: Iterable[Transform | Mapping[str, Any]]) -> IngestResult:
        accepted = 0
        rejected = 0
        new_frames = False
        with self._lock:
            for msg in msgs:
                ok, introduced = self._ingest_locked(msg)
                if ok:
                    accepted += 1
                else:
                    rejected += 1
                new_frames = new_frames or introduced
        if rejected:
            logger.debug("Batch ingest: %d accepted, %d rejected", accepted, rejected)
        return IngestResult(accepted=accepted, rejected=rejected, new_frames=new_frames)

    def snapshot(self) -> dict[str, Transform]:
        with self._lock:
            return dict(self._edges)

    def frame_ids(self) -> list[str]:
        with self._lock:
            return sorted(self._frames)

    def parent_frame_ids(self) -> list[str]:
        with self._lock:
            return sorted(self._parent_frames)

    def revision(self) -> int:
        with self._lock:
            return self._revision

    def rejected_count(self) -> int:
        with self._lock:
            return self._rejected

    def __len__(self) -> int:
        with self._lock:
            return len(self._edges)


TF_STORE = TransformStore()
