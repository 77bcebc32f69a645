"""Core module - Configuration and shared types."""

from ncsync.core.config import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_SLEEP_SECONDS,
    DEFAULT_SYNC_TIMEOUT,
    SyncConfig,
    validate_environment,
)
from ncsync.core.types import (
    AttemptResult,
    Classification,
    ConfigurationError,
    DirectoryError,
    RetryOutcome,
    SupervisorError,
    classify_exit_code,
)

__all__ = [
    # Config
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_SLEEP_SECONDS",
    "DEFAULT_SYNC_TIMEOUT",
    "SyncConfig",
    "validate_environment",
    # Types
    "AttemptResult",
    "Classification",
    "ConfigurationError",
    "DirectoryError",
    "RetryOutcome",
    "SupervisorError",
    "classify_exit_code",
]
