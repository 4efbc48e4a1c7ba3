"""Core module - Shared configuration and enums."""

from possync.core.config import EngineConfig, ServerConfig
from possync.core.types import (
    DEFAULT_PRIORITIES,
    ItemType,
    Priority,
    SyncState,
    default_priority,
)

__all__ = [
    # Config
    "EngineConfig",
    "ServerConfig",
    # Types
    "DEFAULT_PRIORITIES",
    "ItemType",
    "Priority",
    "SyncState",
    "default_priority",
]
