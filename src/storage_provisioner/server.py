"""Entrypoint for the storage provisioning service."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

if __package__ in (None, ""):
    sys.path.insert(0, str(Path(__file__).resolve().parents[1]))  # pragma: no cover

from storage_provisioner import __version__
from storage_provisioner.config import load_settings
from storage_provisioner.logging_utils import configure_logging
from storage_provisioner.transport.http_server import create_http_app

logger = logging.getLogger(__name__)


def run_entrypoint() -> None:
    """Load settings once, configure logging and serve the HTTP app."""
    settings = load_settings()
    configure_logging(settings.logging)
    logger.info("Initializing storage provisioner v%s", __version__)
    if settings.logging.file:
        logger.info("Log file configured at: %s", settings.logging.file)

    try:
        import uvicorn
    except ImportError as exc:
        raise RuntimeError("uvicorn is required to run the HTTP server") from exc

    app = create_http_app(settings)
    uvicorn.run(
        app,
        host=settings.server.host,
        port=settings.server.port,
        ws="none",
        log_config=None,
    )


if __name__ == "__main__":  # pragma: no cover
    run_entrypoint()
