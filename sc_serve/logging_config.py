from __future__ import annotations

import logging
import os
from typing import Optional, Union

from pythonjsonlogger.json import JsonFormatter

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(
        level: Optional[Union[int, str]] = None,
        force_format: Optional[str] = None,
) -> None:
    """
    Configure the root logger for the server process

    Modes:
    - JSON (default), one object per record with the `extra={...}` fields inlined
    - plain text (dev mode)

    Format selection order:
        1) force_format argument ("json" or "plain") if provided
        2) env var SC_SERVE_LOG_FORMAT
        3) default = "json"

    Level selection order:
        1) level argument
        2) env var SC_SERVE_LOG_LEVEL (e.g. "DEBUG")
        3) default = INFO
    """
    if force_format is not None:
        format_mode = force_format.lower()
    else:
        format_mode = os.getenv("SC_SERVE_LOG_FORMAT", "json").lower()

    if level is None:
        level = os.getenv("SC_SERVE_LOG_LEVEL", "INFO").upper()

    logger = logging.getLogger()
    logger.setLevel(level)

    handler = logging.StreamHandler()

    if format_mode == "plain":
        formatter = logging.Formatter(LOG_FORMAT)
    else:
        formatter = JsonFormatter(LOG_FORMAT)

    handler.setFormatter(formatter)

    # Replace any existing handlers to avoid duplicate logs
    logger.handlers.clear()
    logger.addHandler(handler)

    # werkzeug logs every request at INFO; keep it for DEBUG runs only
    if logger.level > logging.DEBUG:
        logging.getLogger("werkzeug").setLevel(logging.WARNING)
