"""Retry logic with linear backoff around the sync invoker.

This module provides:
- linear_backoff: Wait before the next attempt (attempt number × 30s)
- RetryController: Drives one sync cycle of up to max_retries + 1 attempts

A cycle ends in one of three states: SUCCEEDED, EXHAUSTED (every allowed
attempt failed, or a permanent failure stopped retrying early) or ABORTED
(shutdown was requested before the next attempt could start).
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ncsync.core.config import SyncConfig
from ncsync.core.types import AttemptResult, Classification, RetryOutcome
from ncsync.supervisor.invoker import SyncInvoker
from ncsync.supervisor.shutdown import ShutdownToken, interruptible_sleep

logger = logging.getLogger(__name__)

BACKOFF_STEP = 30.0  # seconds

Sleeper = Callable[[float, ShutdownToken], bool]


def linear_backoff(attempt: int, step: float = BACKOFF_STEP) -> float:
    """Wait inserted after the given failed attempt.

    Args:
        attempt: 1-based number of the attempt that just failed.
        step: Seconds added per attempt.

    Returns:
        Seconds to wait before the next attempt.
    """
    return attempt * step


class RetryController:
    """Runs the sync invoker until success, exhaustion or shutdown.

    Args:
        invoker: Invoker for a single sync attempt.
        token: Shutdown token checked before every attempt.
        max_retries: Retries after the first attempt.
        fast_fail_on_auth_error: Stop after an auth or URL failure instead of
            spending the rest of the retry budget.
        backoff_step: Linear backoff step in seconds.
        sleep: Interruptible sleep used between attempts.
    """

    def __init__(
        self,
        invoker: SyncInvoker,
        token: ShutdownToken,
        max_retries: int,
        fast_fail_on_auth_error: bool = True,
        backoff_step: float = BACKOFF_STEP,
        sleep: Sleeper = interruptible_sleep,
    ) -> None:
        self.invoker = invoker
        self.token = token
        self.max_retries = max_retries
        self.fast_fail_on_auth_error = fast_fail_on_auth_error
        self.backoff_step = backoff_step
        self._sleep = sleep

    @classmethod
    def from_config(
        cls,
        config: SyncConfig,
        invoker: SyncInvoker,
        token: ShutdownToken,
    ) -> RetryController:
        """Create a controller using the configured retry policy."""
        return cls(
            invoker,
            token,
            max_retries=config.max_retries,
            fast_fail_on_auth_error=config.fast_fail_on_auth_error,
        )

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def run(self) -> RetryOutcome:
        """Run one sync cycle.

        Returns:
            Terminal state of the cycle.
        """
        max_attempts = self.max_attempts

        for attempt in range(1, max_attempts + 1):
            if self.token.requested:
                logger.info("🛑 Shutdown requested, aborting sync attempt")
                return RetryOutcome.ABORTED

            logger.info(f"🔄 Sync attempt {attempt}/{max_attempts}")
            logger.info(f"   Server: {self.invoker.server_url}")
            logger.info(f"   Target: {self.invoker.config.sync_dir}")
            logger.info("⏳ Starting sync...")

            result = self.invoker.invoke()
            if result.succeeded:
                logger.info("✅ Synchronization completed successfully")
                return RetryOutcome.SUCCEEDED

            self._log_failure(attempt, result)

            if result.classification.is_permanent and self.fast_fail_on_auth_error:
                label = result.classification.value.replace("_", " ")
                logger.error(f"❌ Giving up on this sync cycle ({label}), retrying will not help")
                return RetryOutcome.EXHAUSTED

            if attempt == max_attempts:
                logger.error(f"❌ All {max_attempts} sync attempts failed")
                return RetryOutcome.EXHAUSTED

            wait = linear_backoff(attempt, self.backoff_step)
            logger.info(f"⏳ Waiting {wait:.0f} seconds before retry...")
            self._sleep(wait, self.token)

        # Should not reach here, but satisfy type checker
        raise RuntimeError("Unexpected retry loop exit")

    def _log_failure(self, attempt: int, result: AttemptResult) -> None:
        classification = result.classification
        if classification is Classification.TIMEOUT:
            logger.error(
                f"❌ Sync attempt {attempt} timed out after "
                f"{self.invoker.config.sync_timeout}s (likely hung)"
            )
        elif classification is Classification.AUTH_FAILURE:
            logger.error(
                f"❌ Sync attempt {attempt} failed: authentication rejected "
                f"(exit code: {result.exit_code})"
            )
        elif classification is Classification.CONFIG_FAILURE:
            logger.error(
                f"❌ Sync attempt {attempt} failed: invalid server URL or client "
                f"configuration (exit code: {result.exit_code})"
            )
        else:
            logger.error(f"❌ Sync attempt {attempt} failed (exit code: {result.exit_code})")
