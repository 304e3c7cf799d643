"""Logging setup: console plus a persistent file sink.

Module loggers (``logging.getLogger(__name__)``) propagate to the
``order_relay`` logger configured here.
"""

from __future__ import annotations

import logging
import sys

from order_relay.config import Settings

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_ROOT_LOGGER = "order_relay"


def configure_logging(settings: Settings) -> logging.Logger:
    """Install console and file handlers on the package logger.

    Safe to call more than once: existing handlers are replaced.
    """
    logger = logging.getLogger(_ROOT_LOGGER)
    logger.setLevel(settings.log_level.upper())

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(_LOG_FORMAT)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if settings.log_file:
        file_handler = logging.FileHandler(settings.log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
