"""Logging helpers."""

from __future__ import annotations

import logging
from pathlib import Path


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(settings: dict) -> logging.Logger:
    """Configure root handlers from *settings* and return the package logger."""
    log_dir = Path(settings.get("log_dir") or "logs")
    log_dir.mkdir(parents=True, exist_ok=True)
    level = getattr(logging, str(settings.get("log_level", "INFO")).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            logging.FileHandler(log_dir / "application.log", encoding="utf-8"),
            logging.StreamHandler(),
        ],
    )
    return logging.getLogger("linkqr")
