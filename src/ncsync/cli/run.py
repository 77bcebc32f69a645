"""Run command for ncsync CLI.

Commands:
- run: Validate the environment and supervise nextcloudcmd
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import click

from ncsync.cli.log import configure_logging
from ncsync.core.config import DEFAULT_HEALTH_FILE, parse_bool, validate_environment
from ncsync.core.types import SupervisorError
from ncsync.supervisor.health import HealthReporter
from ncsync.supervisor.invoker import SyncInvoker
from ncsync.supervisor.maintenance import DailyUpdateMarker, MaintenanceTask
from ncsync.supervisor.preflight import ensure_sync_directory, run_preflight
from ncsync.supervisor.retry import RetryController
from ncsync.supervisor.scheduler import run_continuous, run_once
from ncsync.supervisor.shutdown import ShutdownToken, install_signal_handlers

logger = logging.getLogger(__name__)


@click.command()
def run() -> None:
    """Synchronize with the Nextcloud server.

    All settings come from NEXTCLOUD_* environment variables. Runs a single
    sync when NEXTCLOUD_RUN_ONCE is true, otherwise syncs every
    NEXTCLOUD_SLEEP seconds until SIGINT or SIGTERM.
    """
    env = os.environ
    health = HealthReporter(Path(env.get("NEXTCLOUD_HEALTH_FILE") or DEFAULT_HEALTH_FILE))
    configure_logging(health, debug=parse_bool(env.get("NEXTCLOUD_DEBUG")))

    logger.info(f"🚀 Starting Nextcloud Sync Container v{env.get('CONTAINER_VERSION') or 'unknown'}")

    try:
        config = validate_environment(env)
        logger.info(f"   User: {config.user}")
        logger.info(f"   URL: {config.server_host}")
        logger.info(f"   Retries: {config.max_retries}")
        logger.info(f"   Run Once: {str(config.run_once).lower()}")
        ensure_sync_directory(config.sync_dir)
    except SupervisorError:
        sys.exit(1)

    token = ShutdownToken()
    install_signal_handlers(token)

    invoker = SyncInvoker(config, health)

    if config.preflight and not run_preflight(invoker):
        if config.fatal_on_preflight_failure:
            logger.error("❌ Pre-flight connectivity test failed, exiting")
            sys.exit(1)
        logger.warning("⚠️ Pre-flight connectivity test failed, continuing anyway")

    health.touch()

    controller = RetryController.from_config(config, invoker, token)
    maintenance = (
        MaintenanceTask(DailyUpdateMarker(config.update_marker)) if config.auto_update else None
    )

    if config.run_once:
        exit_code = run_once(controller, maintenance)
    else:
        exit_code = run_continuous(controller, token, config.sleep_seconds, maintenance)

    logger.info("👋 Nextcloud sync container shutting down")
    sys.exit(exit_code)
