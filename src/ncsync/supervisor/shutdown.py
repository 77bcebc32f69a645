"""Graceful shutdown coordination.

Termination signals only flip a ShutdownToken. The scheduler, the retry
controller and the sleep routine poll the token at their own checkpoints, so
an in-flight sync client is never killed mid-transfer: shutdown only stops
the next attempt or cycle from starting.
"""

from __future__ import annotations

import logging
import signal
import time
from types import FrameType

logger = logging.getLogger(__name__)

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)

SLEEP_CHUNK_SECONDS = 10.0


class ShutdownToken:
    """Cooperative cancellation token.

    Transitions once from "running" to "shutdown requested" and never back.
    The flag is a plain attribute so a signal handler can set it without
    taking a lock the interrupted frame might already hold.
    """

    def __init__(self) -> None:
        self._requested = False

    @property
    def requested(self) -> bool:
        return self._requested

    def request(self) -> bool:
        """Request shutdown.

        Returns:
            True if this call flipped the token, False if it was already set.
        """
        if self._requested:
            return False
        self._requested = True
        return True

    def wait(self, timeout: float) -> bool:
        """Block up to timeout seconds unless shutdown is already requested.

        Returns:
            True if shutdown has been requested.
        """
        if not self._requested and timeout > 0:
            time.sleep(timeout)
        return self._requested


def install_signal_handlers(token: ShutdownToken) -> None:
    """Route SIGINT and SIGTERM to the token.

    Must be called from the main thread.
    """

    def _handle_signal(signum: int, frame: FrameType | None) -> None:
        name = signal.Signals(signum).name
        if token.request():
            logger.info(f"🛑 Shutdown signal received ({name}), finishing current operation...")
        else:
            logger.info(f"🛑 {name} received again, shutdown already in progress")

    for sig in SHUTDOWN_SIGNALS:
        signal.signal(sig, _handle_signal)


def interruptible_sleep(
    seconds: float,
    token: ShutdownToken,
    chunk: float = SLEEP_CHUNK_SECONDS,
) -> bool:
    """Sleep in bounded chunks, checking for shutdown between them.

    Shutdown latency is bounded by one chunk rather than the full interval.

    Args:
        seconds: Total time to sleep.
        token: Shutdown token to observe.
        chunk: Maximum length of one uninterrupted wait.

    Returns:
        True if the sleep ended early because shutdown was requested.
    """
    deadline = time.monotonic() + seconds
    while not token.requested:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return False
        token.wait(min(chunk, remaining))
    return True
