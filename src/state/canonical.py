"""
Canonical encoding and digests for actor state snapshots.

A snapshot dict (see `state_to_dict()` in each actor's `state.py`) is encoded
as compact, key-sorted UTF-8 JSON and hashed behind a label prefix, so the
hub and ledger digests can never collide even for identical documents.
"""

from __future__ import annotations

import hashlib
import json
import re
from typing import Any

CANONICAL_ENCODING_VERSION = 1

_LABEL_RE = re.compile(r"^[a-z0-9][a-z0-9-]*$")


def _check(value: Any, path: str) -> None:
    """Raise TypeError naming *path* for anything without one exact JSON form."""
    if value is None or isinstance(value, (bool, int)):
        return
    if isinstance(value, float):
        raise TypeError(f"{path}: floats are not allowed in canonical encoding")
    if isinstance(value, str):
        if any(0xD800 <= ord(ch) <= 0xDFFF for ch in value):
            raise TypeError(f"{path}: surrogate code points are not allowed")
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"{path}: object keys must be str, got {type(key).__name__}")
            _check(key, f"{path}.{key}")
            _check(item, f"{path}.{key}")
        return
    if isinstance(value, (list, tuple)):
        for i, item in enumerate(value):
            _check(item, f"{path}[{i}]")
        return
    raise TypeError(f"{path}: {type(value).__name__} has no canonical encoding")


def canonical_json_bytes(value: Any) -> bytes:
    """Sorted keys, no whitespace, UTF-8, no NaN; ints of any size are exact."""
    _check(value, "$")
    return json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    ).encode("utf-8")


def sha256_hex(data: bytes) -> str:
    return "0x" + hashlib.sha256(data).hexdigest()


def domain_separator(label: str) -> bytes:
    """``b"vaulthub:<label>:v<version>\\x00"`` for a lowercase kebab-case *label*."""
    if not isinstance(label, str):
        raise TypeError("label must be a str")
    if not _LABEL_RE.match(label):
        raise ValueError(f"invalid digest label: {label!r}")
    return f"vaulthub:{label}:v{CANONICAL_ENCODING_VERSION}\x00".encode("ascii")


def digest_document(label: str, document: Any) -> str:
    """SHA-256 over ``domain_separator(label) || canonical_json_bytes(document)``."""
    return sha256_hex(domain_separator(label) + canonical_json_bytes(document))
