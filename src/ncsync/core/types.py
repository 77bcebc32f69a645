"""Shared types for ncsync.

This module defines the values passed between the invoker, the retry
controller and the scheduler:
- SupervisorError, ConfigurationError, DirectoryError: Exception classes
- Classification: Outcome of a single sync attempt
- AttemptResult: Result of one external client invocation
- RetryOutcome: Terminal state of one sync cycle
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SupervisorError(Exception):
    """Base exception for fatal supervisor errors."""


class ConfigurationError(SupervisorError):
    """Required settings are missing.

    Attributes:
        missing: Names of the missing environment variables, in check order.
    """

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(
            f"Missing required environment variables: {' '.join(self.missing)}"
        )


class DirectoryError(SupervisorError):
    """The sync directory cannot be created or is not writable."""


class Classification(str, Enum):
    """Classification of a sync attempt, derived from the client exit code."""

    SUCCESS = "success"
    TRANSIENT_FAILURE = "transient_failure"
    AUTH_FAILURE = "auth_failure"
    CONFIG_FAILURE = "config_failure"
    TIMEOUT = "timeout"

    @property
    def is_permanent(self) -> bool:
        """Whether retrying is pointless without operator action."""
        return self in (Classification.AUTH_FAILURE, Classification.CONFIG_FAILURE)


# Exit codes with a dedicated meaning; every other non-zero code is transient.
EXIT_CODE_CLASSIFICATIONS: dict[int, Classification] = {
    0: Classification.SUCCESS,
    124: Classification.TIMEOUT,
    6: Classification.AUTH_FAILURE,
    4: Classification.CONFIG_FAILURE,
}

TIMEOUT_EXIT_CODE = 124
PERMISSION_DENIED_EXIT_CODE = 126
COMMAND_NOT_FOUND_EXIT_CODE = 127


def classify_exit_code(exit_code: int) -> Classification:
    """Map an external client exit code to a classification.

    Args:
        exit_code: Process exit status.

    Returns:
        The matching classification, TRANSIENT_FAILURE for unknown codes.
    """
    return EXIT_CODE_CLASSIFICATIONS.get(exit_code, Classification.TRANSIENT_FAILURE)


@dataclass
class AttemptResult:
    """Result of a single invocation of the external sync client."""

    exit_code: int
    classification: Classification
    output: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.classification is Classification.SUCCESS


class RetryOutcome(str, Enum):
    """Terminal state of one sync cycle.

    ABORTED is distinct from EXHAUSTED so a deliberate shutdown is never
    reported as a sync failure.
    """

    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"
    ABORTED = "aborted"

    @property
    def succeeded(self) -> bool:
        return self is RetryOutcome.SUCCEEDED
