"""
Logging setup for the workbench backend.

Usage:
    from .logging_utils import get_logger

    logger = get_logger(__name__)
    logger.info("Collection renamed")
"""

import logging
import sys
from typing import Optional, Union

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ROOT_LOGGER = "workbench"

_root_configured = False


def configure_logging(
    level: Union[int, str] = logging.INFO,
    format_str: str = DEFAULT_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    stream: Optional[object] = None,
) -> None:
    """
    Configure the ``workbench`` logger once; later calls are ignored.

    Args:
        level: Logging level, as a number or a name such as ``"DEBUG"``
        format_str: Log message format
        date_format: Date format for timestamps
        stream: Output stream (default: sys.stderr)
    """
    global _root_configured
    if _root_configured:
        return

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(format_str, date_format))

    root.addHandler(handler)
    _root_configured = True


def get_logger(name: str) -> logging.Logger:
    """Logger for a module, always placed under the ``workbench`` hierarchy."""
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
