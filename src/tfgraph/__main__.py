from __future__ import annotations

import argparse

from .core.viewer_settings import VIEWER_SETTINGS
from .log import configure_logging, default_log_level
from .runner import run


def main() -> None:
    p = argparse.ArgumentParser(prog="tfgraph", description="tfgraph: transform tree server for robot telemetry")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=8000)
    p.add_argument("--fixed-frame", default=None, help="initial fixed frame (default: map, or first known frame)")
    p.add_argument("--log-level", default=default_log_level())
    args = p.parse_args()

    configure_logging(args.log_level)
    if args.fixed_frame:
        VIEWER_SETTINGS.set_fixed_frame(args.fixed_frame)

    srv = run(host=args.host, port=args.port, log_level=str(args.log_level).lower(), new_server=True)
    print(srv.url)

    # Block forever (so it behaves like a normal CLI server)
    import time

    try:
        while True:
            time.sleep(3600)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
