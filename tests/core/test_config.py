"""Tests for environment validation."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from ncsync.core.config import (
    DEFAULT_HEALTH_FILE,
    DEFAULT_MAX_RETRIES,
    DEFAULT_SLEEP_SECONDS,
    DEFAULT_SYNC_DIR,
    DEFAULT_SYNC_TIMEOUT,
    SyncConfig,
    parse_bool,
    validate_environment,
)
from ncsync.core.types import ConfigurationError

REQUIRED = {
    "NEXTCLOUD_USER": "alice",
    "NEXTCLOUD_PASS": "secret",
    "NEXTCLOUD_URL": "cloud.example.com",
}


def make_env(**overrides: str) -> dict[str, str]:
    env = dict(REQUIRED)
    env.update(overrides)
    return env


class TestRequiredVariables:
    """Tests for required settings."""

    def test_valid_environment(self) -> None:
        """Should build a config with defaults when only required vars are set."""
        config = validate_environment(make_env())

        assert config.user == "alice"
        assert config.secret == "secret"
        assert config.server_host == "cloud.example.com"
        assert config.max_retries == DEFAULT_MAX_RETRIES
        assert config.sleep_seconds == DEFAULT_SLEEP_SECONDS
        assert config.run_once is False
        assert config.debug is False
        assert config.sync_dir == DEFAULT_SYNC_DIR
        assert config.health_file == DEFAULT_HEALTH_FILE
        assert config.sync_timeout == DEFAULT_SYNC_TIMEOUT
        assert config.fast_fail_on_auth_error is True
        assert config.fatal_on_preflight_failure is False

    @pytest.mark.parametrize("name", list(REQUIRED))
    def test_single_missing_variable(self, name: str) -> None:
        """Should report exactly the one missing variable."""
        env = make_env()
        del env[name]

        with pytest.raises(ConfigurationError) as exc_info:
            validate_environment(env)

        assert exc_info.value.missing == [name]

    def test_empty_counts_as_missing(self) -> None:
        """Should treat empty and whitespace values as missing."""
        with pytest.raises(ConfigurationError) as exc_info:
            validate_environment(make_env(NEXTCLOUD_USER="", NEXTCLOUD_URL="   "))

        assert exc_info.value.missing == ["NEXTCLOUD_USER", "NEXTCLOUD_URL"]

    def test_all_missing_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """Should log every missing variable and nothing else."""
        with caplog.at_level(logging.INFO), pytest.raises(ConfigurationError):
            validate_environment({})

        errors = [r.getMessage() for r in caplog.records if r.levelno == logging.ERROR]
        assert errors[0].endswith("NEXTCLOUD_USER NEXTCLOUD_PASS NEXTCLOUD_URL")
        listed = [m.strip()[2:] for m in errors if m.strip().startswith("- ")]
        assert listed == ["NEXTCLOUD_USER", "NEXTCLOUD_PASS", "NEXTCLOUD_URL"]


class TestRetries:
    """Tests for NEXTCLOUD_SYNC_RETRIES validation."""

    @pytest.mark.parametrize("value", ["1", "4", "10"])
    def test_valid_values(self, value: str) -> None:
        config = validate_environment(make_env(NEXTCLOUD_SYNC_RETRIES=value))
        assert config.max_retries == int(value)

    @pytest.mark.parametrize("value", ["0", "11", "-1", "abc", "3.5", " 5", "+5"])
    def test_invalid_values_use_default(
        self, value: str, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Should fall back to 4 with a warning instead of failing."""
        with caplog.at_level(logging.WARNING):
            config = validate_environment(make_env(NEXTCLOUD_SYNC_RETRIES=value))

        assert config.max_retries == DEFAULT_MAX_RETRIES
        assert any("NEXTCLOUD_SYNC_RETRIES" in r.getMessage() for r in caplog.records)

    def test_max_attempts(self) -> None:
        config = validate_environment(make_env(NEXTCLOUD_SYNC_RETRIES="2"))
        assert config.max_attempts == 3


class TestSleep:
    """Tests for NEXTCLOUD_SLEEP validation."""

    @pytest.mark.parametrize("value", ["30", "300", "86400"])
    def test_valid_values(self, value: str) -> None:
        config = validate_environment(make_env(NEXTCLOUD_SLEEP=value))
        assert config.sleep_seconds == int(value)

    @pytest.mark.parametrize("value", ["29", "0", "five", "-60"])
    def test_invalid_values_use_default(
        self, value: str, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING):
            config = validate_environment(make_env(NEXTCLOUD_SLEEP=value))

        assert config.sleep_seconds == DEFAULT_SLEEP_SECONDS
        assert any("NEXTCLOUD_SLEEP" in r.getMessage() for r in caplog.records)

    def test_invalid_timeout_uses_default(self) -> None:
        config = validate_environment(make_env(NEXTCLOUD_SYNC_TIMEOUT="0"))
        assert config.sync_timeout == DEFAULT_SYNC_TIMEOUT


class TestOptionalSettings:
    """Tests for flags and paths."""

    @pytest.mark.parametrize("value", ["true", "TRUE", "1", "yes", "on"])
    def test_truthy_flags(self, value: str) -> None:
        config = validate_environment(make_env(NEXTCLOUD_RUN_ONCE=value, NEXTCLOUD_DEBUG=value))
        assert config.run_once is True
        assert config.debug is True

    def test_policy_flags(self) -> None:
        config = validate_environment(
            make_env(NEXTCLOUD_FAST_FAIL_AUTH="false", NEXTCLOUD_PREFLIGHT_FATAL="true")
        )
        assert config.fast_fail_on_auth_error is False
        assert config.fatal_on_preflight_failure is True

    def test_paths_and_binary(self, tmp_path: Path) -> None:
        config = validate_environment(
            make_env(
                NEXTCLOUD_SYNC_DIR=str(tmp_path / "sync"),
                NEXTCLOUD_HEALTH_FILE=str(tmp_path / "health"),
                NEXTCLOUD_CMD="/opt/bin/nextcloudcmd",
                CONTAINER_VERSION="2.7",
            )
        )
        assert config.sync_dir == tmp_path / "sync"
        assert config.health_file == tmp_path / "health"
        assert config.client_binary == "/opt/bin/nextcloudcmd"
        assert config.version == "2.7"

    def test_parse_bool_default(self) -> None:
        assert parse_bool(None) is False
        assert parse_bool("", default=True) is True
        assert parse_bool("nope", default=True) is False


class TestSyncConfig:
    """Tests for the SyncConfig dataclass."""

    def test_secret_hidden_from_repr(self) -> None:
        config = SyncConfig(user="bob", secret="hunter2", server_host="example.com")
        assert "hunter2" not in repr(config)

    def test_immutable(self) -> None:
        config = SyncConfig(user="bob", secret="hunter2", server_host="example.com")
        with pytest.raises(AttributeError):
            config.max_retries = 7  # type: ignore[misc]

    def test_secret_never_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG):
            validate_environment(make_env(NEXTCLOUD_PASS="top-secret-value"))
        assert "top-secret-value" not in caplog.text
