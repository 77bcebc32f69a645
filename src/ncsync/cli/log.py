"""Logging setup for ncsync commands."""

from __future__ import annotations

import logging
import sys

from ncsync.supervisor.health import HealthMarkerHandler, HealthReporter

LOG_FORMAT = "[%(asctime)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(health: HealthReporter | None = None, debug: bool = False) -> logging.Logger:
    """Install timestamped console output on the ncsync logger.

    When a health reporter is given, every emitted record also refreshes the
    health marker.

    Args:
        health: Reporter touched on each log record.
        debug: Log at DEBUG level instead of INFO.

    Returns:
        The configured package logger.
    """
    ncsync_logger = logging.getLogger("ncsync")
    for handler in ncsync_logger.handlers[:]:
        ncsync_logger.removeHandler(handler)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    ncsync_logger.addHandler(console)

    if health is not None:
        ncsync_logger.addHandler(HealthMarkerHandler(health))

    ncsync_logger.setLevel(logging.DEBUG if debug else logging.INFO)
    ncsync_logger.propagate = False
    return ncsync_logger
