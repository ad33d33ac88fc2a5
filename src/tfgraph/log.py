from __future__ import annotations

import logging
import os


LOG_FORMAT = "[%(levelname)s] [%(asctime)s] [%(name)s]: %(message)s"
TIME_FORMAT = "%m/%d/%Y-%H:%M:%S"


def default_log_level() -> str:
    return os.getenv("TFGRAPH_LOG_LEVEL", "").strip().upper() or "INFO"


def configure_logging(level: str | int | None = None) -> logging.Logger:
    """Attach a single stream handler to the `tfgraph` logger.

    Calling it again only updates the level.
    """
    logger = logging.getLogger("tfgraph")
    lvl = level if level is not None else default_log_level()
    if isinstance(lvl, str):
        lvl = lvl.upper()
    logger.setLevel(lvl)

    if not any(getattr(h, "_tfgraph_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=TIME_FORMAT))
        handler._tfgraph_handler = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
        logger.propagate = False
    return logger
