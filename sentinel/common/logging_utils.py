"""Logging utilities for consistent logging across modules."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(log_dir: Optional[str] = None, level: Optional[str] = None) -> None:
    """Setup logging configuration."""
    log_dir = log_dir or os.getenv("SENTINEL_LOG_DIR", "logs")
    level = (level or os.getenv("LOG_LEVEL", "info")).upper()
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    error_handler = logging.FileHandler(log_path / "error.log")
    error_handler.setLevel(logging.ERROR)

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=LOG_FORMAT,
        handlers=[
            logging.FileHandler(log_path / "combined.log"),
            error_handler,
            logging.StreamHandler()
        ]
    )


def log_server_message(message: str) -> None:
    """Log server-related messages."""
    logging.info(f"[SERVER] {message}")


def log_event(log: logging.Logger, level: int, message: str, **fields: Any) -> None:
    """Log ``message`` with a map of structured attributes.

    The attributes are appended to the message as JSON and attached to the
    record as ``record.fields`` for handlers that want them unrendered.
    """
    if not log.isEnabledFor(level):
        return
    rendered = json.dumps(fields, default=str, sort_keys=True)
    log.log(level, f"{message} {rendered}", extra={"fields": fields})
