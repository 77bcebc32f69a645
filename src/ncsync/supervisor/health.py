"""Liveness reporting for an external health probe.

This module provides:
- HealthReporter: Writes a timestamp to a well-known marker file
- HealthMarkerHandler: Logging handler that touches the marker on every record

The container's HEALTHCHECK only looks at the marker file, so every log
line doubles as proof that the supervisor loop is alive.
"""

from __future__ import annotations

import contextlib
import logging
import time
from datetime import datetime
from pathlib import Path


class HealthReporter:
    """Best-effort writer for the health marker file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def touch(self) -> None:
        """Write the current time to the marker.

        Write failures are ignored: a broken health report must never stop
        the sync loop. The probe will notice the stale marker instead.
        """
        with contextlib.suppress(OSError):
            self.path.write_text(datetime.now().isoformat() + "\n")

    def last_touched(self) -> datetime | None:
        """Read the timestamp stored in the marker, if any."""
        try:
            return datetime.fromisoformat(self.path.read_text().strip())
        except (OSError, ValueError):
            return None

    def is_healthy(self, max_age: float | None = None) -> bool:
        """Check the marker exists and, optionally, that it is recent.

        Args:
            max_age: Maximum marker age in seconds, None to only check existence.

        Returns:
            True if the marker satisfies the check.
        """
        try:
            mtime = self.path.stat().st_mtime
        except OSError:
            return False
        if max_age is None:
            return True
        return time.time() - mtime <= max_age


class HealthMarkerHandler(logging.Handler):
    """Logging handler that refreshes the health marker on every record."""

    def __init__(self, reporter: HealthReporter) -> None:
        super().__init__()
        self._reporter = reporter

    def emit(self, record: logging.LogRecord) -> None:
        self._reporter.touch()
