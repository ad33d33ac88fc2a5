from __future__ import annotations


def test_public_import_paths_work() -> None:
    import tfgraph
    from tfgraph.api import create_api_app
    from tfgraph.api.routes import mount_tf_api
    from tfgraph.client import TFGraphClient
    from tfgraph.core import TF_STORE, VIEWER_SETTINGS, TransformStore, build_tree, transform_batch
    from tfgraph.log import configure_logging
    from tfgraph.runner import TFGraphServer, run
    from tfgraph.server import app, create_app

    assert tfgraph.__version__
    assert tfgraph.run is run
    assert create_api_app is not None
    assert mount_tf_api is not None
    assert TFGraphClient is not None
    assert TFGraphServer is not None
    assert isinstance(TF_STORE, TransformStore)
    assert VIEWER_SETTINGS is not None
    assert build_tree is not None
    assert transform_batch is not None
    assert app is not None and create_app is not None

    logger = configure_logging("debug")
    configure_logging("info")
    assert logger.name == "tfgraph"
    assert len([h for h in logger.handlers if getattr(h, "_tfgraph_handler", False)]) == 1
