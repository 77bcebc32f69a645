"""Health commands for ncsync CLI.

Commands:
- healthcheck: Liveness probe for container orchestrators
- check-config: Validate the environment and show effective settings
"""

from __future__ import annotations

import os
import sys
from dataclasses import fields
from pathlib import Path

import click

from ncsync.cli.log import configure_logging
from ncsync.core.config import DEFAULT_HEALTH_FILE, validate_environment
from ncsync.core.types import ConfigurationError
from ncsync.supervisor.health import HealthReporter
from ncsync.supervisor.invoker import normalize_server_url


@click.command()
@click.option(
    "--file",
    "health_file",
    type=click.Path(path_type=Path),
    default=None,
    help="Health marker path (default: $NEXTCLOUD_HEALTH_FILE or /tmp/healthcheck).",
)
@click.option(
    "--max-age",
    type=click.FloatRange(min=0),
    default=None,
    help="Fail if the marker is older than this many seconds.",
)
def healthcheck(health_file: Path | None, max_age: float | None) -> None:
    """Exit 0 if the supervisor is alive, 1 otherwise."""
    if health_file is None:
        health_file = Path(os.environ.get("NEXTCLOUD_HEALTH_FILE") or DEFAULT_HEALTH_FILE)

    reporter = HealthReporter(health_file)
    if reporter.is_healthy(max_age):
        click.echo(f"healthy (last update: {reporter.last_touched() or 'unknown'})")
        return

    click.echo(f"unhealthy: {health_file} missing or stale", err=True)
    sys.exit(1)


@click.command("check-config")
def check_config() -> None:
    """Validate NEXTCLOUD_* settings and print the effective configuration."""
    configure_logging()

    try:
        config = validate_environment()
    except ConfigurationError:
        sys.exit(1)

    for f in fields(config):
        value = "***" if f.name == "secret" else getattr(config, f.name)
        click.echo(f"{f.name}: {value}")
    click.echo(f"server_url: {normalize_server_url(config.server_host)}")
