"""
ASGI entry point for the PropTrail API.

Exposes the ``app`` object required by ASGI servers. Environment variables
from ``.env`` are loaded before the application factory runs so that the
settings singleton sees them.

Usage
-----
    $ python -m proptrail.api.server
    $ uvicorn proptrail.api.server:app --reload
"""

import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

# Load .env BEFORE importing anything that reads settings at import time.
load_dotenv(dotenv_path=Path(".env"))

from proptrail.api.app import create_app  # noqa: E402
from proptrail.core.settings import load_settings  # noqa: E402

app = create_app()


def main() -> None:
    """Run the API server locally."""
    cfg = load_settings()
    uvicorn.run(
        "proptrail.api.server:app",
        host=os.getenv("PROPTRAIL_HOST", "127.0.0.1"),
        port=int(os.getenv("PROPTRAIL_PORT", "8000")),
        reload=cfg.is_dev,
        log_level=cfg.log_level.lower(),
    )


if __name__ == "__main__":
    main()
