"""Logging setup for the provisioning service."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from storage_provisioner.config import LoggingSettings

_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

_logger = logging.getLogger(__name__)


def _formatter() -> logging.Formatter:
    return logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT)


def configure_logging(settings: LoggingSettings) -> None:
    """Install stderr (and optional file) handlers on the root logger."""
    level = getattr(logging, settings.level.upper(), logging.INFO)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(_formatter())
    handlers: list[logging.Handler] = [stream_handler]

    file_error: OSError | None = None
    if settings.file:
        try:
            Path(settings.file).parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(settings.file)
            file_handler.setFormatter(_formatter())
            handlers.append(file_handler)
        except OSError as exc:
            file_error = exc

    logging.basicConfig(level=level, handlers=handlers, force=True)

    # httpx logs every request line at INFO; the appliance client does its own.
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))

    if file_error is not None:
        _logger.warning("Failed to open log file %s: %s", settings.file, file_error)
