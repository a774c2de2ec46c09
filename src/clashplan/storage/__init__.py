"""Persistence and sharing adapters used by the CLI around the pure planning core."""

from .sharing import decode_token, encode_token, parse_token
from .state import (
    CONFIG_KEYS,
    IMPORTABLE_KEYS,
    SHARE_KEYS,
    STATE_KEY,
    WORKER_COUNT_KEY,
    load_config,
    load_state,
    save_config,
    save_state,
    validate_shared_values,
)
from .store import KeyValueStore, MemoryStore, SQLiteStore

__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "SQLiteStore",
    "encode_token",
    "decode_token",
    "parse_token",
    "STATE_KEY",
    "WORKER_COUNT_KEY",
    "CONFIG_KEYS",
    "SHARE_KEYS",
    "IMPORTABLE_KEYS",
    "save_state",
    "load_state",
    "save_config",
    "load_config",
    "validate_shared_values",
]
