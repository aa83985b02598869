"""Shared helpers for ORdensity pipeline entry points."""

from __future__ import annotations

import logging
from pathlib import Path

from ordensity.utils import ensure_dir


def setup_logger(log_path: Path, logger_name: str) -> logging.Logger:
    ensure_dir(log_path.parent.as_posix())
    logger = logging.getLogger(logger_name)
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")
    fh = logging.FileHandler(log_path, mode="w", encoding="utf-8")
    fh.setFormatter(formatter)
    logger.addHandler(fh)
    sh = logging.StreamHandler()
    sh.setFormatter(formatter)
    logger.addHandler(sh)
    return logger


def close_logger(logger: logging.Logger) -> None:
    """Detach and close every handler so log files are flushed and released."""
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
