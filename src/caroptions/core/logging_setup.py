"""Logging for desk entry points.

The CLI calls :func:`setup_logger` once with the ``caroptions`` logger name,
so every module's ``logging.getLogger(__name__)`` lands in
``<log_dir>/caroptions.log``.  Console output is opt-in (``--verbose``)
because the CLI prints its own tables and notifications on stdout/stderr.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from caroptions.core.constants import DEFAULT_LOG_DIR

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5

_configured: set[str] = set()


def log_file_path(name: str, log_dir: Path | None = None) -> Path:
    return Path(log_dir if log_dir is not None else DEFAULT_LOG_DIR) / f"{name}.log"


def _file_handler(path: Path) -> RotatingFileHandler | None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return RotatingFileHandler(
            path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT, encoding="utf-8"
        )
    except OSError as exc:
        # the desk still runs without a log file
        print(f"caroptions: cannot write log file {path}: {exc}", file=sys.stderr)
        return None


def setup_logger(
    name: str,
    log_dir: Path | None = None,
    level: int = logging.INFO,
    console: bool = True,
) -> logging.Logger:
    """Attach a rotating file handler (and optionally stderr) to logger *name*.

    Calling it again for the same name returns the logger unchanged.
    """
    logger = logging.getLogger(name)
    if name in _configured:
        return logger

    logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    handlers: list[logging.Handler] = []
    if console:
        handlers.append(logging.StreamHandler(sys.stderr))
    file_handler = _file_handler(log_file_path(name, log_dir))
    if file_handler is not None:
        handlers.append(file_handler)

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
        logger.addHandler(handler)

    _configured.add(name)
    return logger
