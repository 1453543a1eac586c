from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path


_LOG_FILE_NAME = "invoicepage.log"
_MAX_LOG_BYTES = 5 * 1024 * 1024
_BACKUP_COUNT = 5
_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _resolve_level(debug: bool | None) -> int:
    if debug is None:
        debug = os.getenv("INVOICE_DEBUG") == "1"
    return logging.DEBUG if debug else logging.INFO


def setup_logging(log_dir: Path | str | None = None, *, debug: bool | None = None) -> Path:
    """Attach stdout and rotating-file handlers to the root logger.

    Calling it again only adjusts the level, so embedding callers may invoke
    it on every start without stacking handlers.
    """
    log_level = _resolve_level(debug)
    root_logger = logging.getLogger()
    configured = getattr(root_logger, "_invoicepage_log_file", None)
    if configured is not None:
        root_logger.setLevel(log_level)
        for handler in root_logger.handlers:
            handler.setLevel(log_level)
        return configured

    target_dir = Path(log_dir or os.getenv("INVOICE_LOG_DIR") or "./data/logs")
    target_dir.mkdir(parents=True, exist_ok=True)
    log_file = target_dir / _LOG_FILE_NAME

    formatter = logging.Formatter(_FORMAT)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=_MAX_LOG_BYTES,
        backupCount=_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)

    root_logger.handlers.clear()
    root_logger.setLevel(log_level)
    for handler in (stream_handler, file_handler):
        handler.setLevel(log_level)
        root_logger.addHandler(handler)
    root_logger._invoicepage_log_file = log_file
    return log_file


def reset_logging() -> None:
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    if hasattr(root_logger, "_invoicepage_log_file"):
        del root_logger._invoicepage_log_file
