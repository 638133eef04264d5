"""Entry point for running xoroom via ``python -m xoroom``."""

from __future__ import annotations

import logging
import os

import uvicorn


def main() -> None:
    """Start the websocket room server."""

    level = os.environ.get("XOROOM_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    host = os.environ.get("XOROOM_HOST", "0.0.0.0")
    port = int(os.environ.get("XOROOM_PORT", os.environ.get("PORT", "3000")))
    uvicorn.run("xoroom.server:app", host=host, port=port, reload=False, log_level=level.lower())


if __name__ == "__main__":
    main()
