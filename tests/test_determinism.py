"""Tests for canonical serialisation used in run checksums."""

from __future__ import annotations

import pytest

from distdedup.entities.core import DuplicatePair
from distdedup.observability import canonical_json, duplicates_checksum, stable_hash


def test_set_order_does_not_change_hash() -> None:
    first = frozenset({DuplicatePair("1", "2"), DuplicatePair("3", "9"), DuplicatePair("4", "5")})
    second = frozenset(sorted(first, reverse=True))

    assert stable_hash(first) == stable_hash(second)
    assert duplicates_checksum(first) == duplicates_checksum(list(reversed(sorted(first))))


def test_mapping_keys_are_sorted() -> None:
    assert canonical_json({"b": 1, "a": [2, 3]}) == '{"a":[2,3],"b":1}'


def test_dataclasses_serialise_as_objects() -> None:
    assert canonical_json(DuplicatePair("x", "y")) == '{"high_id":"y","low_id":"x"}'


def test_sets_are_sorted() -> None:
    assert canonical_json({"ids": {"c", "a", "b"}}) == '{"ids":["a","b","c"]}'


def test_unsupported_values_rejected() -> None:
    with pytest.raises(TypeError):
        canonical_json(object())


def test_distinct_duplicate_sets_hash_differently() -> None:
    assert duplicates_checksum({DuplicatePair("1", "2")}) != duplicates_checksum({DuplicatePair("1", "3")})
