"""Share tokens: transport-safe snapshots of selected store keys.

A token is ``<marker>.<payload>`` where the payload is URL-safe base64 of a JSON object mapping
keys to their stored values. Marker ``z1`` means the JSON was zlib-deflated before encoding,
``j1`` means it was not.
"""

from __future__ import annotations

import base64
import binascii
import json
import zlib
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from clashplan.storage.store import KeyValueStore

COMPRESSED_MARKER = "z1"
PLAIN_MARKER = "j1"

__all__ = ["COMPRESSED_MARKER", "PLAIN_MARKER", "encode_token", "decode_token", "parse_token"]


def encode_token(store: KeyValueStore, keys: Iterable[str], *, compress: bool = True) -> str:
    """Serialise the values stored under ``keys``; absent keys are skipped."""

    payload = {}
    for key in keys:
        value = store.get(key)
        if value is not None:
            payload[key] = value
    raw = json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    if compress:
        raw = zlib.compress(raw, level=9)
    body = base64.urlsafe_b64encode(raw).decode("ascii")
    marker = COMPRESSED_MARKER if compress else PLAIN_MARKER
    return f"{marker}.{body}"


def parse_token(token: str) -> dict[str, Any]:
    """Decode ``token`` into its key/value mapping; raises ``ValueError`` when malformed."""

    marker, sep, body = token.strip().partition(".")
    if not sep or marker not in (COMPRESSED_MARKER, PLAIN_MARKER):
        raise ValueError("Unrecognised share token format")
    try:
        raw = base64.urlsafe_b64decode(body.encode("ascii"))
        if marker == COMPRESSED_MARKER:
            raw = zlib.decompress(raw)
        payload = json.loads(raw.decode("utf-8"))
    except (binascii.Error, zlib.error, UnicodeError, json.JSONDecodeError) as exc:
        raise ValueError(f"Corrupt share token: {exc}") from exc
    if not isinstance(payload, dict) or not all(isinstance(key, str) for key in payload):
        raise ValueError("Share token payload must be an object keyed by strings")
    return payload


def decode_token(
    store: KeyValueStore,
    token: str,
    *,
    validate: Callable[[Mapping[str, Any]], None] | None = None,
) -> bool:
    """Apply a token's values to ``store``.

    Returns ``False`` on malformed input without touching the store. ``validate`` may reject a
    well-formed payload by raising ``ValueError``; nothing is written in that case. Writes are
    all-or-nothing: if any write fails the keys already written are restored.
    """

    try:
        payload = parse_token(token)
        if validate is not None:
            validate(payload)
    except ValueError:
        return False

    previous = {key: store.get(key) for key in payload}
    written: list[str] = []
    try:
        for key, value in payload.items():
            store.set(key, value)
            written.append(key)
    except Exception:
        for key in written:
            if previous[key] is None:
                store.remove(key)
            else:
                store.set(key, previous[key])
        return False
    return True
