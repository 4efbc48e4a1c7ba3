"""Run command for the possync CLI.

Commands:
- run: Keep the sync engine running in the foreground
"""

from __future__ import annotations

import time

import click

from possync.client.cli.context import open_engine


@click.command()
def run() -> None:
    """Run the sync engine until interrupted.

    Syncs once at startup if online, then every configured interval.
    """
    with open_engine() as engine:
        engine.initialize()
        click.echo(
            f"Sync engine running (every {engine.config.sync_interval:.0f}s). "
            "Press Ctrl+C to stop."
        )
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            click.echo("\nStopping...")

    click.echo("Sync engine stopped.")
