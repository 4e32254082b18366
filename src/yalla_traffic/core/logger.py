"""Package logging: one ``yalla_traffic`` logger tree, silent until the application opts in."""

import logging
import sys
from typing import Optional

PACKAGE_LOGGER = "yalla_traffic"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Return the package logger, or a child of it.

    ``name`` is usually ``__name__``; a leading ``yalla_traffic.`` is dropped
    so module loggers are not nested under the package name twice.
    """
    if not name or name == PACKAGE_LOGGER:
        return logging.getLogger(PACKAGE_LOGGER)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name.removeprefix(PACKAGE_LOGGER + '.')}")


def setup_logging(level: int = logging.INFO, format_str: str = DEFAULT_FORMAT) -> None:
    """
    Send the assistant's log records to stdout.

    Meant for applications and scripts embedding the assistant. Calling it
    again after a real handler is attached does nothing.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if any(not isinstance(h, logging.NullHandler) for h in package_logger.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(format_str))
    package_logger.addHandler(handler)
    package_logger.setLevel(level)


logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())
