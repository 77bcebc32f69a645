"""Top-level sync loop.

This module provides:
- run_once: One sync cycle, exit code mirrors the result
- run_continuous: Sync cycles separated by an interruptible sleep until shutdown

Only one sync client runs at a time: cycles and attempts are strictly
sequential on the calling thread.
"""

from __future__ import annotations

import logging

from ncsync.core.types import RetryOutcome
from ncsync.supervisor.maintenance import MaintenanceTask
from ncsync.supervisor.retry import RetryController, Sleeper
from ncsync.supervisor.shutdown import ShutdownToken, interruptible_sleep

logger = logging.getLogger(__name__)


def _run_maintenance(maintenance: MaintenanceTask | None) -> None:
    if maintenance is not None:
        maintenance.maybe_run()


def run_once(
    controller: RetryController,
    maintenance: MaintenanceTask | None = None,
) -> int:
    """Run a single sync cycle.

    Returns:
        Process exit code: 0 on success, 1 otherwise.
    """
    logger.info("🔄 Starting one-time sync mode")
    _run_maintenance(maintenance)

    outcome = controller.run()
    if outcome is RetryOutcome.SUCCEEDED:
        logger.info("✅ One-time sync completed successfully")
        return 0
    if outcome is RetryOutcome.ABORTED:
        logger.info("🛑 One-time sync aborted by shutdown request")
    else:
        logger.error("❌ One-time sync failed")
    return 1


def run_continuous(
    controller: RetryController,
    token: ShutdownToken,
    sleep_seconds: int,
    maintenance: MaintenanceTask | None = None,
    sleep: Sleeper = interruptible_sleep,
) -> int:
    """Run sync cycles until shutdown is requested.

    A failed cycle does not end the loop; the next cycle simply runs after
    the regular interval.

    Args:
        controller: Retry controller driving each cycle.
        token: Shutdown token.
        sleep_seconds: Pause between cycles.
        maintenance: Optional daily maintenance hook run before each cycle.
        sleep: Interruptible sleep used between cycles.

    Returns:
        Process exit code (0 on clean shutdown).
    """
    logger.info(f"🔄 Starting continuous sync mode (interval: {sleep_seconds}s)")

    cycles = 0
    while not token.requested:
        _run_maintenance(maintenance)

        outcome = controller.run()
        cycles += 1
        if outcome is RetryOutcome.EXHAUSTED:
            logger.warning("⚠️ Sync cycle failed, will retry at the next interval")

        if token.requested:
            break

        logger.info(f"⏳ Waiting {sleep_seconds} seconds until next sync...")
        sleep(sleep_seconds, token)

    logger.info(f"🛑 Shutdown requested, exiting sync loop after {cycles} cycle(s)")
    return 0
