"""Configuration for the ncsync supervisor.

This module provides:
- SyncConfig: Immutable settings built once at startup
- validate_environment: Build a SyncConfig from environment variables

Required string settings are fatal when missing. Optional numeric settings
are reset to their defaults with a warning instead of being rejected.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from ncsync.core.types import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 4
MIN_RETRIES = 1
MAX_RETRIES = 10

DEFAULT_SLEEP_SECONDS = 300
MIN_SLEEP_SECONDS = 30

DEFAULT_SYNC_TIMEOUT = 1800  # 30 minutes

DEFAULT_SYNC_DIR = Path("/media/nextclouddata")
DEFAULT_HEALTH_FILE = Path("/tmp/healthcheck")
DEFAULT_UPDATE_MARKER = Path("/tmp/ncsync-last-update")
DEFAULT_CLIENT_BINARY = "nextcloudcmd"

REQUIRED_VARIABLES = ("NEXTCLOUD_USER", "NEXTCLOUD_PASS", "NEXTCLOUD_URL")

TRUE_VALUES = frozenset({"true", "1", "yes", "on"})

_DIGITS = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class SyncConfig:
    """Settings for the sync supervisor.

    Attributes:
        user: Nextcloud user name.
        secret: App password. Never logged and hidden from repr().
        server_host: Server address as given (bare host or URL).
        max_retries: Retries after the first attempt, in [1, 10].
        sleep_seconds: Pause between sync cycles in continuous mode.
        run_once: Perform a single sync cycle and exit.
        debug: Pass all client output through and log at DEBUG level.
        sync_dir: Local directory kept in sync.
        health_file: Marker file touched for the liveness probe.
        sync_timeout: Wall-clock limit for one client invocation.
        client_binary: Name or path of the external sync client.
        fast_fail_on_auth_error: Stop retrying on credential or URL errors.
        preflight: Probe the server before the first sync.
        fatal_on_preflight_failure: Exit if the pre-flight probe fails.
        auto_update: Upgrade the sync client at most once per day.
        update_marker: File recording the date of the last upgrade.
        version: Container version shown in the startup banner.
    """

    user: str
    secret: str = field(repr=False)
    server_host: str
    max_retries: int = DEFAULT_MAX_RETRIES
    sleep_seconds: int = DEFAULT_SLEEP_SECONDS
    run_once: bool = False
    debug: bool = False
    sync_dir: Path = DEFAULT_SYNC_DIR
    health_file: Path = DEFAULT_HEALTH_FILE
    sync_timeout: int = DEFAULT_SYNC_TIMEOUT
    client_binary: str = DEFAULT_CLIENT_BINARY
    fast_fail_on_auth_error: bool = True
    preflight: bool = True
    fatal_on_preflight_failure: bool = False
    auto_update: bool = False
    update_marker: Path = DEFAULT_UPDATE_MARKER
    version: str = "unknown"

    @property
    def max_attempts(self) -> int:
        """Retry budget of one sync cycle."""
        return self.max_retries + 1


def parse_bool(value: str | None, default: bool = False) -> bool:
    """Interpret an environment flag."""
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in TRUE_VALUES


def _parse_bounded_int(
    name: str,
    raw: str | None,
    default: int,
    minimum: int,
    maximum: int | None = None,
) -> int:
    """Parse a non-negative integer, falling back to the default when invalid."""
    if raw is None or raw == "":
        return default

    value = int(raw) if _DIGITS.fullmatch(raw) else None
    if value is None or value < minimum or (maximum is not None and value > maximum):
        bounds = f"{minimum}-{maximum}" if maximum is not None else f"≥{minimum}"
        logger.warning(
            f"⚠️ Invalid {name}: {raw} (must be {bounds}), using default: {default}"
        )
        return default
    return value


def validate_environment(env: Mapping[str, str] | None = None) -> SyncConfig:
    """Validate environment settings and build the supervisor configuration.

    Every missing required variable is reported before failing, so a single
    run tells the operator everything that needs fixing.

    Args:
        env: Environment mapping (defaults to os.environ).

    Returns:
        The validated configuration.

    Raises:
        ConfigurationError: If any required variable is missing or empty.
    """
    if env is None:
        env = os.environ

    missing = [name for name in REQUIRED_VARIABLES if not env.get(name, "").strip()]

    max_retries = _parse_bounded_int(
        "NEXTCLOUD_SYNC_RETRIES",
        env.get("NEXTCLOUD_SYNC_RETRIES"),
        DEFAULT_MAX_RETRIES,
        MIN_RETRIES,
        MAX_RETRIES,
    )
    sleep_seconds = _parse_bounded_int(
        "NEXTCLOUD_SLEEP",
        env.get("NEXTCLOUD_SLEEP"),
        DEFAULT_SLEEP_SECONDS,
        MIN_SLEEP_SECONDS,
    )
    sync_timeout = _parse_bounded_int(
        "NEXTCLOUD_SYNC_TIMEOUT",
        env.get("NEXTCLOUD_SYNC_TIMEOUT"),
        DEFAULT_SYNC_TIMEOUT,
        1,
    )

    if missing:
        logger.error(f"❌ Missing required environment variables: {' '.join(missing)}")
        logger.error("   Please set these variables when starting the container:")
        for name in missing:
            logger.error(f"   - {name}")
        raise ConfigurationError(missing)

    config = SyncConfig(
        user=env["NEXTCLOUD_USER"].strip(),
        secret=env["NEXTCLOUD_PASS"],
        server_host=env["NEXTCLOUD_URL"].strip(),
        max_retries=max_retries,
        sleep_seconds=sleep_seconds,
        run_once=parse_bool(env.get("NEXTCLOUD_RUN_ONCE")),
        debug=parse_bool(env.get("NEXTCLOUD_DEBUG")),
        sync_dir=Path(env.get("NEXTCLOUD_SYNC_DIR") or DEFAULT_SYNC_DIR),
        health_file=Path(env.get("NEXTCLOUD_HEALTH_FILE") or DEFAULT_HEALTH_FILE),
        sync_timeout=sync_timeout,
        client_binary=env.get("NEXTCLOUD_CMD") or DEFAULT_CLIENT_BINARY,
        fast_fail_on_auth_error=parse_bool(env.get("NEXTCLOUD_FAST_FAIL_AUTH"), default=True),
        preflight=parse_bool(env.get("NEXTCLOUD_PREFLIGHT"), default=True),
        fatal_on_preflight_failure=parse_bool(env.get("NEXTCLOUD_PREFLIGHT_FATAL")),
        auto_update=parse_bool(env.get("NEXTCLOUD_AUTO_UPDATE")),
        update_marker=Path(env.get("NEXTCLOUD_UPDATE_MARKER") or DEFAULT_UPDATE_MARKER),
        version=env.get("CONTAINER_VERSION") or "unknown",
    )

    logger.info("✅ Environment validation successful")
    return config
