"""Deterministic fingerprints for run reports."""

from .determinism import canonical_json, duplicates_checksum, stable_hash

__all__ = ["canonical_json", "stable_hash", "duplicates_checksum"]
