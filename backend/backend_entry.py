"""
Server entrypoint: API plus (when SCHEDULER_ENABLED) the polling scheduler.

- Binds HOST (default 127.0.0.1), first free port from PORT (default 8000) upward
- Log level follows LOG_LEVEL

Run from the backend dir: python backend_entry.py [--host H] [--port P]
One-off jobs go through the CLI instead: python -m jobs <name> ...
"""

from __future__ import annotations

import argparse
import logging
import os
import socket
import sys
from pathlib import Path

_backend_dir = Path(__file__).resolve().parent
if str(_backend_dir) not in sys.path:
    sys.path.insert(0, str(_backend_dir))

PORT_SEARCH_SPAN = 10


def _pick_port(host: str, start: int) -> int:
    """Return the first free port in start..start+PORT_SEARCH_SPAN. Bind test then close."""
    for port in range(start, start + PORT_SEARCH_SPAN + 1):
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
                s.bind((host, port))
                return port
        except OSError:
            continue
    return start  # fallback (uvicorn reports the bind error)


def main() -> int:
    parser = argparse.ArgumentParser(description="Run the ingestion API server")
    parser.add_argument("--host", default=os.environ.get("HOST", "127.0.0.1"))
    parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", "8000")))
    args = parser.parse_args()

    from core.config import get_settings

    import uvicorn
    from main import app

    port = _pick_port(args.host, args.port)
    logging.getLogger(__name__).info("Backend entry: host=%s port=%s", args.host, port)
    uvicorn.run(app, host=args.host, port=port, log_level=get_settings().log_level.lower())
    return 0


if __name__ == "__main__":
    sys.exit(main())
