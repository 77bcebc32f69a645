"""Command-line interface for ncsync.

This module provides the main CLI entry point and assembles all commands.

Commands:
- run: Supervise nextcloudcmd (one-shot or continuous)
- check-config: Validate the environment and show effective settings
- healthcheck: Liveness probe reading the health marker
"""

from __future__ import annotations

import click

from ncsync.cli.health import check_config, healthcheck
from ncsync.cli.log import configure_logging
from ncsync.cli.run import run


@click.group()
@click.version_option(package_name="ncsync")
def cli() -> None:
    """ncsync - unattended Nextcloud sync supervisor."""


cli.add_command(run)
cli.add_command(check_config)
cli.add_command(healthcheck)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = [
    "cli",
    "configure_logging",
    "main",
]
