"""Configuration utilities for the possync CLI.

This module provides shared configuration functions used across CLI commands,
and the `config` command that edits them.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import click

from possync.core.config import EngineConfig, ServerConfig


def get_config_dir() -> Path:
    """Get the configuration directory for possync.

    Returns:
        Path to ~/.possync or equivalent.
    """
    return Path.home() / ".possync"


def get_config_file() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.json"


def get_database_path() -> Path:
    """Get the path to the local outbox database."""
    return get_config_dir() / "outbox.db"


def load_config() -> dict[str, Any]:
    """Load configuration from config file."""
    config_file = get_config_file()
    if config_file.exists():
        return dict(json.loads(config_file.read_text()))
    return {}


def save_config(config: dict[str, Any]) -> None:
    """Save configuration to config file."""
    config_file = get_config_file()
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(json.dumps(config, indent=2))


def get_server_config(config: dict[str, Any] | None = None) -> ServerConfig | None:
    """Build the server configuration.

    Returns:
        ServerConfig if a server URL and token are configured, None otherwise.
    """
    config = load_config() if config is None else config
    if not config.get("server_url") or not config.get("token"):
        return None
    return ServerConfig(
        server_url=config["server_url"],
        token=config["token"],
        timeout=float(config.get("timeout", 30.0)),
        verify_ssl=bool(config.get("verify_ssl", True)),
    )


def get_engine_config(config: dict[str, Any] | None = None) -> EngineConfig:
    """Build the engine configuration from the config file."""
    config = load_config() if config is None else config
    return EngineConfig.from_dict(config)


@click.command("config")
@click.option("--server-url", help="Base URL of the back-office server.")
@click.option("--token", help="Device authentication token.")
@click.option("--interval", type=float, help="Seconds between periodic syncs.")
@click.option("--max-attempts", type=int, help="Failed attempts before an item is dead-lettered.")
def config_cmd(
    server_url: str | None,
    token: str | None,
    interval: float | None,
    max_attempts: int | None,
) -> None:
    """Show or update the possync configuration."""
    config = load_config()
    updates: dict[str, Any] = {
        "server_url": server_url,
        "token": token,
        "sync_interval": interval,
        "max_attempts": max_attempts,
    }
    changed = {k: v for k, v in updates.items() if v is not None}

    if changed:
        try:
            get_engine_config({**config, **changed})
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)
        config.update(changed)
        save_config(config)
        click.echo(f"Configuration saved to {get_config_file()}")

    for key in sorted(config):
        value = "********" if key == "token" else config[key]
        click.echo(f"{key}: {value}")
