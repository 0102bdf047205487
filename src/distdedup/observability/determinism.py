"""Order-independent serialisation and checksums for run reports.

Nodes finish in arbitrary order, so anything hashed or written for comparison
between runs goes through :func:`canonical_json` first.
"""

from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from hashlib import sha256
from typing import Any, Iterable

from distdedup.entities.core import DuplicatePair


def _encode(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=canonical_json)
    raise TypeError(f"Cannot serialise {type(value).__name__} canonically")


def canonical_json(payload: Any) -> str:
    """Compact JSON with sorted keys; sets are sorted and dataclasses become objects."""

    return json.dumps(payload, default=_encode, sort_keys=True, separators=(",", ":"))


def stable_hash(payload: Any) -> str:
    return sha256(canonical_json(payload).encode("utf-8")).hexdigest()


def duplicates_checksum(duplicates: Iterable[DuplicatePair]) -> str:
    """Fingerprint of a duplicate set; equal sets always give equal checksums."""

    return stable_hash(sorted(pair.as_tuple() for pair in duplicates))


__all__ = ["canonical_json", "stable_hash", "duplicates_checksum"]
