"""Daily upgrade of the sync client package.

This module provides:
- PackageManager: Package managers the supervisor knows how to drive
- detect_package_manager: Resolve the platform's package manager once
- DailyUpdateMarker: Date stamp gating at most one upgrade per calendar day
- MaintenanceTask: Runs the upgrade when the marker allows it
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from datetime import date
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

UPGRADE_TIMEOUT = 600  # seconds


class PackageManager(Enum):
    """Package manager detected on the host."""

    APK = "apk"
    APT = "apt-get"
    DNF = "dnf"
    UNKNOWN = "unknown"


# Upgrade command for the sync client package, per package manager.
UPGRADE_COMMANDS: dict[PackageManager, list[str]] = {
    PackageManager.APK: ["apk", "upgrade", "--no-cache", "nextcloud-client"],
    PackageManager.APT: ["apt-get", "install", "--only-upgrade", "-y", "nextcloud-desktop-cmd"],
    PackageManager.DNF: ["dnf", "upgrade", "-y", "nextcloud-client"],
}

_DETECTION_ORDER = (PackageManager.APK, PackageManager.APT, PackageManager.DNF)


def detect_package_manager() -> PackageManager:
    """Return the first known package manager found on PATH."""
    for manager in _DETECTION_ORDER:
        if shutil.which(manager.value):
            return manager
    return PackageManager.UNKNOWN


class DailyUpdateMarker:
    """File holding the ISO date of the last upgrade run."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def last_run(self) -> date | None:
        try:
            return date.fromisoformat(self.path.read_text().strip())
        except (OSError, ValueError):
            return None

    def ran_on(self, day: date) -> bool:
        return self.last_run() == day

    def record(self, day: date) -> None:
        try:
            self.path.write_text(day.isoformat() + "\n")
        except OSError as e:
            logger.warning(f"⚠️ Could not write update marker {self.path}: {e}")


class MaintenanceTask:
    """Upgrades the sync client at most once per calendar day.

    Args:
        marker: Marker recording the last run date.
        manager: Package manager, detected once at startup when omitted.
    """

    def __init__(
        self,
        marker: DailyUpdateMarker,
        manager: PackageManager | None = None,
    ) -> None:
        self.marker = marker
        self.manager = manager if manager is not None else detect_package_manager()

    def maybe_run(self, today: date | None = None) -> bool:
        """Run the upgrade unless it already ran today.

        Args:
            today: Current date (defaults to date.today()).

        Returns:
            True if the upgrade ran and succeeded.
        """
        today = today or date.today()
        if self.marker.ran_on(today):
            return False

        command = UPGRADE_COMMANDS.get(self.manager)
        if command is None:
            logger.warning("⚠️ No supported package manager found, skipping daily update")
            self.marker.record(today)
            return False

        logger.info(f"📦 Running daily sync client update: {' '.join(command)}")
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=UPGRADE_TIMEOUT,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.warning(f"⚠️ Daily update failed: {e}")
            self.marker.record(today)
            return False

        # One try per day, successful or not.
        self.marker.record(today)
        if completed.returncode != 0:
            logger.warning(f"⚠️ Daily update failed (exit code: {completed.returncode})")
            for line in completed.stderr.splitlines():
                logger.warning(f"   {line}")
            return False

        logger.info("✅ Daily update completed")
        return True
