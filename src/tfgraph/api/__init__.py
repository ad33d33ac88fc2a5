from __future__ import annotations

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from ..core.store import TF_STORE, TransformStore
from ..core.viewer_settings import VIEWER_SETTINGS, ViewerSettingsStore
from .parsing import parse_bool
from .routes import mount_tf_api


def create_api_app(
    store: TransformStore | None = None,
    settings: ViewerSettingsStore | None = None,
) -> FastAPI:
    """Create the HTTP API.

    `store`/`settings` default to the process-wide instances; pass fresh ones to get an
    isolated session (tests do this).
    """

    store = store if store is not None else TF_STORE
    settings = settings if settings is not None else VIEWER_SETTINGS

    app = FastAPI(title="tfgraph", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    mount_tf_api(app, store, settings)

    @app.get("/healthz")
    def healthz() -> dict[str, bool]:
        return {"ok": True}

    @app.get("/api/events")
    def events() -> dict:
        # Minimal polling endpoint: viewers refetch the tree when the revision moves.
        return {
            "revision": store.revision(),
            "frameCount": len(store.frame_ids()),
        }

    @app.get("/api/viewer/settings")
    def get_viewer_settings() -> dict:
        s = settings.get()
        return {"fixedFrame": s.fixed_frame, "axisScale": s.axis_scale, "showLinks": s.show_links}

    @app.patch("/api/viewer/settings")
    def update_viewer_settings(body: dict) -> dict:
        # Supported: fixedFrame (str), axisScale (> 0), showLinks (bool)
        known = {"fixedFrame", "axisScale", "showLinks"}
        if not known.intersection(body):
            raise HTTPException(status_code=400, detail="Missing field: fixedFrame, axisScale or showLinks")

        try:
            s = settings.update(
                fixed_frame=str(body.get("fixedFrame") or "") if "fixedFrame" in body else None,
                axis_scale=float(body.get("axisScale")) if "axisScale" in body else None,
                show_links=parse_bool(body.get("showLinks"), field="showLinks") if "showLinks" in body else None,
            )
        except (TypeError, ValueError) as e:
            raise HTTPException(status_code=400, detail=str(e))

        return {"ok": True, "fixedFrame": s.fixed_frame, "axisScale": s.axis_scale, "showLinks": s.show_links}

    return app
