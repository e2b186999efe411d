"""Application logging utilities."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from . import config
from .data_paths import log_dir

_LOG_FILE_NAME = "hashgen.log"


def configure_logging() -> logging.Logger:
    """Configure the ``hashgen`` logger with a rotating file and stderr output."""
    logger = logging.getLogger("hashgen")
    if logger.handlers:
        return logger

    logger.setLevel(logging.INFO)
    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if not config.LOG_TO_FILE:
        return logger

    try:
        log_directory: Path = log_dir()
        handler = RotatingFileHandler(
            log_directory / _LOG_FILE_NAME,
            maxBytes=1_048_576,
            backupCount=5,
            encoding="utf-8",
        )
    except OSError as exc:
        logger.warning("File logging disabled: %s", exc)
        return logger

    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.info("Logger initialised; logs available at %s", handler.baseFilename)
    return logger
