import pytest

from clashplan.storage import MemoryStore, decode_token, encode_token, parse_token
from clashplan.storage.sharing import COMPRESSED_MARKER, PLAIN_MARKER

BUNDLE = {"workers": [], "tasks": [{"id": 1, "name": "Cannon", "duration_ms": 60000}]}


@pytest.mark.parametrize("compress, marker", [(True, COMPRESSED_MARKER), (False, PLAIN_MARKER)])
def test_token_round_trip_touches_only_shared_keys(compress, marker):
    source = MemoryStore({"cocUpgradePlanner": BUNDLE, "cocBuilderCount": 4, "private": 1})
    token = encode_token(source, ["cocUpgradePlanner", "cocBuilderCount"], compress=compress)
    assert token.startswith(f"{marker}.")

    target = MemoryStore({"cocBuilderCount": 2, "private": "keep"})
    assert decode_token(target, token) is True
    assert target.get("cocUpgradePlanner") == BUNDLE
    assert target.get("cocBuilderCount") == 4
    assert target.get("private") == "keep"


def test_absent_keys_are_skipped():
    token = encode_token(MemoryStore({"a": 1}), ["a", "b"])
    assert parse_token(token) == {"a": 1}


@pytest.mark.parametrize("token", ["", "garbage", "z1.!!!", "j1.bm90IGpzb24", "x9.e30="])
def test_malformed_tokens_leave_store_untouched(token):
    store = MemoryStore({"a": 1})
    assert decode_token(store, token) is False
    assert store.get("a") == 1
    with pytest.raises(ValueError):
        parse_token(token)


class _FailingStore(MemoryStore):
    def set(self, key, value):
        if key == "boom":
            raise OSError("disk full")
        super().set(key, value)


def test_failed_write_restores_previous_values():
    token = encode_token(MemoryStore({"a": 2, "new": 3, "boom": 4}), ["a", "new", "boom"])
    store = _FailingStore({"a": 1})
    assert decode_token(store, token) is False
    assert store.get("a") == 1
    assert store.get("new") is None


def _reject_unknown(values):
    if set(values) - {"a"}:
        raise ValueError("unexpected keys")


def test_validator_rejects_well_formed_payload():
    token = encode_token(MemoryStore({"a": 2, "b": 3}), ["a", "b"])
    store = MemoryStore({"a": 1})
    assert decode_token(store, token, validate=_reject_unknown) is False
    assert store.get("a") == 1
    assert store.get("b") is None

    token = encode_token(MemoryStore({"a": 2}), ["a"])
    assert decode_token(store, token, validate=_reject_unknown) is True
    assert store.get("a") == 2
