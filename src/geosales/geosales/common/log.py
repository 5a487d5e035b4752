"""Logging setup shared by the app factory and scripts."""

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
HANDLER_NAME = "geosales-console"

# Root logger of this package, whatever prefix it was imported under.
PACKAGE_LOGGER = __name__.rsplit(".", 2)[0]


def configure_logging(level: int = logging.INFO) -> logging.Logger:
    """Attach one console handler to the package logger (idempotent)."""
    log = logging.getLogger(PACKAGE_LOGGER)
    log.setLevel(level)
    if not any(h.get_name() == HANDLER_NAME for h in log.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        log.addHandler(handler)
    return log
