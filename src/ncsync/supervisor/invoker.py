"""Wrapper around a single run of the external sync client.

This module provides:
- normalize_server_url: Turn a bare host or WebDAV URL into a server root URL
- is_interesting_line: Output filter used outside debug mode
- SyncInvoker: Runs nextcloudcmd once and classifies the result

The client is always started from an argument list, never through a shell,
so credentials containing quotes or spaces are passed through untouched.
"""

from __future__ import annotations

import logging
import re
import subprocess
import tempfile

from ncsync.core.config import SyncConfig
from ncsync.core.types import (
    COMMAND_NOT_FOUND_EXIT_CODE,
    PERMISSION_DENIED_EXIT_CODE,
    TIMEOUT_EXIT_CODE,
    AttemptResult,
    Classification,
    classify_exit_code,
)
from ncsync.supervisor.health import HealthReporter

logger = logging.getLogger(__name__)

PREFLIGHT_TIMEOUT = 60  # seconds

INTERESTING_KEYWORDS = ("error", "failed", "success", "completed", "finished", "summary")

_WEBDAV_SUFFIX = re.compile(r"/remote\.php/(?:dav/files|webdav)(?:/.*)?$")


def normalize_server_url(url: str) -> str:
    """Normalize the configured server address.

    Examples:
        cloud.example.com -> https://cloud.example.com
        https://cloud.example.com/remote.php/dav/files/bob/ -> https://cloud.example.com

    Args:
        url: Server address as configured.

    Returns:
        Server root URL with a scheme and without trailing slash.
    """
    url = url.strip()
    if "://" not in url:
        url = f"https://{url}"
    url = _WEBDAV_SUFFIX.sub("", url)
    return url.rstrip("/")


def is_interesting_line(line: str) -> bool:
    """Whether a client output line is worth logging outside debug mode."""
    if not line.strip():
        return True
    return any(keyword in line for keyword in INTERESTING_KEYWORDS)


def _as_text(output: str | bytes | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output


class SyncInvoker:
    """Runs the external sync client for one attempt.

    Args:
        config: Supervisor configuration.
        health: Reporter touched after a successful sync.
    """

    def __init__(self, config: SyncConfig, health: HealthReporter | None = None) -> None:
        self.config = config
        self.health = health
        self.server_url = normalize_server_url(config.server_host)

    def build_command(self, dry_run: bool = False) -> list[str]:
        """Build the client argument list.

        Args:
            dry_run: Probe connectivity and credentials without transferring files.

        Returns:
            Argument vector for subprocess.
        """
        args = [self.config.client_binary, "--non-interactive"]
        if not self.config.debug:
            args.append("--silent")
        if dry_run:
            args.append("--dry-run")
        target = tempfile.gettempdir() if dry_run else str(self.config.sync_dir)
        args += [
            "--user", self.config.user,
            "--password", self.config.secret,
            target,
            self.server_url,
        ]
        return args

    def describe_command(self, dry_run: bool = False) -> str:
        """Printable command line with the password masked."""
        masked = [
            "***" if arg == self.config.secret and arg else arg
            for arg in self.build_command(dry_run)
        ]
        return " ".join(f'"{arg}"' if " " in arg or arg == "***" else arg for arg in masked)

    def invoke(self, dry_run: bool = False) -> AttemptResult:
        """Run the client once.

        Args:
            dry_run: Run a short connectivity probe instead of a real sync.

        Returns:
            Attempt result with exit code, classification and kept output lines.
        """
        timeout = PREFLIGHT_TIMEOUT if dry_run else self.config.sync_timeout
        logger.info(f"   Command: {self.describe_command(dry_run)}")

        try:
            completed = subprocess.run(
                self.build_command(dry_run),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
                check=False,
            )
            exit_code = completed.returncode
            raw_output = _as_text(completed.stdout)
        except subprocess.TimeoutExpired as e:
            exit_code = TIMEOUT_EXIT_CODE
            raw_output = _as_text(e.output)
        except FileNotFoundError:
            logger.error(f"❌ Sync client not found: {self.config.client_binary}")
            exit_code = COMMAND_NOT_FOUND_EXIT_CODE
            raw_output = ""
        except PermissionError as e:
            logger.error(f"❌ Sync client is not executable: {e}")
            exit_code = PERMISSION_DENIED_EXIT_CODE
            raw_output = ""
        except OSError as e:
            logger.error(f"❌ Failed to start sync client: {e}")
            exit_code = COMMAND_NOT_FOUND_EXIT_CODE
            raw_output = ""

        lines = self._filter_output(raw_output.splitlines())
        for line in lines:
            logger.info(f"   {line}")

        classification = classify_exit_code(exit_code)
        if classification is Classification.TIMEOUT:
            logger.debug(f"Client exceeded its {timeout}s timeout")
        if classification is Classification.SUCCESS and not dry_run and self.health:
            self.health.touch()

        return AttemptResult(exit_code=exit_code, classification=classification, output=lines)

    def _filter_output(self, lines: list[str]) -> list[str]:
        if self.config.debug:
            return lines
        return [line for line in lines if is_interesting_line(line)]
