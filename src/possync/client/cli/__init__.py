"""Command-line interface for possync.

This module provides the main CLI entry point and assembles all commands.

Commands:
- config: Show or update configuration
- enqueue: Queue a mutation for delivery
- status: Show sync status
- sync: Run one sync cycle now
- clear-failed: Drop dead-lettered items
- retry-failed: Revive dead-lettered items and sync
- run: Keep the sync engine running in the foreground
"""

from __future__ import annotations

import click

from possync.client.cli.config import (
    config_cmd,
    get_config_dir,
    get_config_file,
    get_database_path,
    load_config,
    save_config,
)
from possync.client.cli.context import open_engine, setup_logging
from possync.client.cli.outbox import (
    clear_failed,
    enqueue,
    retry_failed,
    status,
    sync,
)
from possync.client.cli.run import run


@click.group()
@click.version_option(package_name="possync")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logs.")
def cli(verbose: bool) -> None:
    """possync - Offline-first outbox for point-of-sale devices."""
    setup_logging(verbose)


# Configuration
cli.add_command(config_cmd)

# Outbox commands
cli.add_command(enqueue)
cli.add_command(status)
cli.add_command(sync)
cli.add_command(clear_failed)
cli.add_command(retry_failed)

# Engine
cli.add_command(run)

__all__ = [
    "cli",
    "get_config_dir",
    "get_config_file",
    "get_database_path",
    "load_config",
    "open_engine",
    "save_config",
]
