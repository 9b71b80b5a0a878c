from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from flask import Flask

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(threadName)s : %(message)s"

_HANDLER_TAG = "_attendance_otc_handler"


def _tagged(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _HANDLER_TAG, True)
    return handler


def setup_logging(app: Flask, *, log_dir: Optional[str] = None, level: str = "INFO") -> None:
    """
    Configure logging for the application.

    Handlers go on the root logger so module loggers (`logging.getLogger(__name__)`)
    propagate to them. Calling this again (app factory in tests) replaces the
    handlers installed earlier instead of stacking duplicates.

    Args:
        app: Flask application instance
        log_dir: directory for the rotating `app.log`; None disables the file handler
        level: root level name, e.g. "DEBUG" or "INFO"
    """
    log_format = logging.Formatter(LOG_FORMAT)
    root = logging.getLogger()

    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_TAG, False):
            root.removeHandler(handler)
            handler.close()

    console_handler = _tagged(logging.StreamHandler())
    console_handler.setFormatter(log_format)
    root.addHandler(console_handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = _tagged(
            RotatingFileHandler(
                os.path.join(log_dir, "app.log"),
                maxBytes=1024 * 1024 * 10,  # 10MB
                backupCount=5,
            )
        )
        file_handler.setFormatter(log_format)
        file_handler.setLevel(logging.INFO)
        root.addHandler(file_handler)

    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    app.logger.setLevel(root.level)

    # mysql-connector is chatty at DEBUG
    if not app.debug:
        logging.getLogger("mysql.connector").setLevel(logging.WARNING)
