"""Startup checks run before the first sync cycle.

This module provides:
- ensure_sync_directory: Create the sync directory and verify it is writable
- probe_server: Query the Nextcloud status endpoint
- probe_credentials: Dry-run the sync client to validate credentials
- run_preflight: Combined best-effort connectivity check
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

import httpx

from ncsync.core.types import Classification, DirectoryError
from ncsync.supervisor.invoker import PREFLIGHT_TIMEOUT, SyncInvoker

logger = logging.getLogger(__name__)

STATUS_TIMEOUT = 15.0  # seconds


def _format_size(size: float) -> str:
    for unit in ("B", "K", "M", "G"):
        if size < 1024:
            return f"{size:.0f}{unit}" if unit == "B" else f"{size:.1f}{unit}"
        size /= 1024
    return f"{size:.1f}T"


def ensure_sync_directory(path: Path) -> None:
    """Make sure the sync directory exists and is writable.

    Args:
        path: Sync directory.

    Raises:
        DirectoryError: If the directory cannot be created or written to.
    """
    logger.info("🔍 Validating directory permissions...")

    if not path.is_dir():
        logger.info(f"📁 Creating sync directory: {path}")
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"❌ Failed to create directory: {path}")
            raise DirectoryError(f"Failed to create directory {path}: {e}") from e

    if not os.access(path, os.W_OK):
        logger.error(f"❌ Directory is not writable: {path}")
        logger.error("   Check volume mount permissions and user mapping")
        raise DirectoryError(f"Directory is not writable: {path}")

    try:
        usage = shutil.disk_usage(path)
        logger.info(f"💾 Available disk space: {_format_size(usage.free)}")
    except OSError as e:
        logger.warning(f"⚠️ Could not determine free disk space: {e}")

    logger.info("✅ Directory permissions validated")


def probe_server(server_url: str, timeout: float = STATUS_TIMEOUT) -> bool:
    """Check that the server answers and is not in maintenance mode.

    Args:
        server_url: Normalized server root URL.
        timeout: Request timeout in seconds.

    Returns:
        True if status.php reports an installed instance outside maintenance.
    """
    try:
        response = httpx.get(f"{server_url}/status.php", timeout=timeout, follow_redirects=True)
    except httpx.HTTPError as e:
        logger.warning(f"   Server unreachable: {e}")
        return False

    if response.status_code != 200:
        logger.warning(f"   Status endpoint returned HTTP {response.status_code}")
        return False

    try:
        status = response.json()
    except ValueError:
        status = None
    if not isinstance(status, dict):
        logger.warning("   Status endpoint did not return a JSON object")
        return False

    if not status.get("installed", False):
        logger.warning("   Server reports Nextcloud is not installed")
        return False
    if status.get("maintenance", False):
        logger.warning("   Server is in maintenance mode")
        return False

    logger.info(f"   Server version: {status.get('versionstring', 'unknown')}")
    return True


def probe_credentials(invoker: SyncInvoker) -> bool:
    """Dry-run the sync client to check credentials without transferring files."""
    result = invoker.invoke(dry_run=True)
    if result.succeeded:
        return True

    if result.classification is Classification.TIMEOUT:
        logger.error(f"❌ Connectivity test timed out after {PREFLIGHT_TIMEOUT}s")
    else:
        logger.error(f"❌ Connectivity test failed (exit code: {result.exit_code})")
    return False


def run_preflight(invoker: SyncInvoker) -> bool:
    """Test connectivity and credentials before syncing.

    Args:
        invoker: Invoker configured for the target server.

    Returns:
        True if both the status endpoint and the dry-run succeeded.
    """
    logger.info("🌐 Testing Nextcloud connectivity...")
    logger.info(f"   Testing server: {invoker.server_url}")

    if probe_server(invoker.server_url) and probe_credentials(invoker):
        logger.info("✅ Connectivity test successful")
        return True

    logger.warning("   This could indicate:")
    logger.warning("   - Wrong credentials")
    logger.warning("   - Network connectivity issues")
    logger.warning("   - Incorrect Nextcloud URL")
    logger.warning("   - Firewall blocking the connection")
    return False
