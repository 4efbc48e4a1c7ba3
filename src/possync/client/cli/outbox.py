"""Outbox commands for the possync CLI.

Commands:
- enqueue: Queue a mutation for delivery
- status: Show sync status
- sync: Run one sync cycle now
- clear-failed: Drop dead-lettered items
- retry-failed: Revive dead-lettered items and sync
"""

from __future__ import annotations

import json
import sys

import click

from possync.client.cli.context import open_engine
from possync.client.sync import SyncError
from possync.core.types import ItemType, Priority


@click.command()
@click.argument("item_type", type=click.Choice([t.value for t in ItemType]))
@click.argument("payload")
@click.option(
    "--priority",
    "-p",
    type=click.Choice([p.value for p in Priority]),
    default=None,
    help="Delivery priority (default depends on the item type).",
)
def enqueue(item_type: str, payload: str, priority: str | None) -> None:
    """Queue ITEM_TYPE with a JSON PAYLOAD for delivery."""
    try:
        data = json.loads(payload)
    except ValueError as e:
        raise click.BadParameter(f"not valid JSON ({e})", param_hint="PAYLOAD") from e

    try:
        with open_engine() as engine:
            item = engine.enqueue(
                item_type,
                data,
                priority=Priority(priority) if priority else None,
            )
    except SyncError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Queued {item.item_type} item {item.id} ({item.priority.value} priority)")


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Print status as JSON.")
@click.option("--items", "show_items", is_flag=True, help="List queued items.")
def status(as_json: bool, show_items: bool) -> None:
    """Show sync status."""
    with open_engine() as engine:
        current = engine.get_status()
        pending = engine.pending_items() if show_items else []
        failed = engine.failed_items() if show_items else []

    if as_json:
        data = current.to_dict()
        if show_items:
            data["items"] = [item.to_dict() for item in pending + failed]
        click.echo(json.dumps(data, indent=2))
        return

    click.echo(f"State: {current.state.value}")
    click.echo(f"Online: {'yes' if current.online else 'no'}")
    last_sync = current.last_sync.isoformat() if current.last_sync else "never"
    click.echo(f"Last sync: {last_sync}")
    click.echo(f"Pending items: {current.pending_items}")
    click.echo(f"Failed items: {current.failed_items}")

    for item in pending:
        click.echo(f"  … {item.item_type} {item.id} [{item.priority.value}] attempts={item.attempts}")
    for item in failed:
        click.echo(f"  ✗ {item.item_type} {item.id}: {item.last_error}")


@click.command()
def sync() -> None:
    """Run one sync cycle now."""
    try:
        with open_engine() as engine:
            ran = engine.sync_now()
            report = engine.last_report
    except SyncError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if not ran or report is None:
        click.echo("Sync not started: offline or already running.", err=True)
        sys.exit(1)

    click.echo(f"Sync completed: {report.synced} synced, {report.failed} failed")
    for error in report.errors:
        click.echo(f"  ✗ {error}")


@click.command("clear-failed")
@click.confirmation_option(prompt="Drop all dead-lettered items?")
def clear_failed() -> None:
    """Drop items that exhausted their retries."""
    try:
        with open_engine() as engine:
            removed = engine.clear_failed_items()
    except SyncError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Cleared {removed} failed items.")


@click.command("retry-failed")
def retry_failed() -> None:
    """Reset items that exhausted their retries and sync."""
    try:
        with open_engine() as engine:
            revived = engine.retry_failed_items()
            remaining = engine.get_status()
    except SyncError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Revived {revived} failed items.")
    click.echo(f"Pending items: {remaining.pending_items}, failed items: {remaining.failed_items}")
