from __future__ import annotations

import os
import threading
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np


DEFAULT_FIXED_FRAME = "map"


def preferred_fixed_frame() -> str:
    return os.getenv("TFGRAPH_FIXED_FRAME", "").strip() or DEFAULT_FIXED_FRAME


def choose_fixed_frame(current: str | None, candidates: Sequence[str], *, preferred: str | None = None) -> str | None:
    """Pick the fixed frame to display.

    Keeps `current` while it is still a candidate, otherwise falls back to the
    preferred frame (usually `map`), then to the first candidate in sorted order.
    """
    known = set(candidates)
    if current and current in known:
        return current
    pref = preferred if preferred is not None else preferred_fixed_frame()
    if pref in known:
        return pref
    if known:
        return sorted(known)[0]
    return None


def sanitize_axis_scale(value: object) -> float:
    try:
        v = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 1.0
    if not np.isfinite(v) or v <= 0.0:
        return 1.0
    return v


def _checked_fixed_frame(frame_id: object) -> str:
    fid = str(frame_id)
    if not fid:
        raise ValueError("fixedFrame cannot be empty")
    return fid


def _checked_axis_scale(scale: object) -> float:
    v = float(scale)  # type: ignore[arg-type]
    if not np.isfinite(v) or v <= 0.0:
        raise ValueError("axisScale must be a finite positive number")
    return v


@dataclass
class ViewerSettings:
    """Server-side viewer preferences.

    Notes:
    - `fixed_frame` is the root used for tree builds when a request does not name one.
    - `None` means "not chosen yet"; it is resolved against the known frames on read.
    """

    fixed_frame: str | None = None
    axis_scale: float = 1.0
    show_links: bool = True


class ViewerSettingsStore:
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._settings = ViewerSettings()

    def get(self) -> ViewerSettings:
        with self._lock:
            return ViewerSettings(
                fixed_frame=self._settings.fixed_frame,
                axis_scale=self._settings.axis_scale,
                show_links=self._settings.show_links,
            )

    def resolve_fixed_frame(self, candidates: Sequence[str]) -> str | None:
        """Return (and remember) the fixed frame for the given candidate frames."""
        with self._lock:
            chosen = choose_fixed_frame(self._settings.fixed_frame, candidates)
            if chosen is not None:
                self._settings.fixed_frame = chosen
            return chosen

    def update(
        self,
        *,
        fixed_frame: str | None = None,
        axis_scale: float | None = None,
        show_links: bool | None = None,
    ) -> ViewerSettings:
        """Apply several settings at once. Nothing changes unless every value is valid."""
        fid = _checked_fixed_frame(fixed_frame) if fixed_frame is not None else None
        scale = _checked_axis_scale(axis_scale) if axis_scale is not None else None
        with self._lock:
            if fid is not None:
                self._settings.fixed_frame = fid
            if scale is not None:
                self._settings.axis_scale = scale
            if show_links is not None:
                self._settings.show_links = bool(show_links)
            return self.get()

    def set_fixed_frame(self, frame_id: str) -> ViewerSettings:
        return self.update(fixed_frame=str(frame_id))

    def set_axis_scale(self, scale: float) -> ViewerSettings:
        return self.update(axis_scale=scale)

    def set_show_links(self, show: bool) -> ViewerSettings:
        return self.update(show_links=bool(show))


VIEWER_SETTINGS = ViewerSettingsStore()
