"""Top-level package for parallel brute-force near-duplicate detection."""

from __future__ import annotations

from importlib.metadata import version

try:
    __version__ = version("distdedup")
except Exception:  # pragma: no cover - fallback during local development
    __version__ = "0.1.0"

from .config.settings import Settings, get_settings
from .entities import (
    AssignmentInconsistency,
    ConfigurationError,
    DuplicatePair,
    OracleError,
    Partitioning,
)
from .pipeline.bruteforce import ParallelBruteForce, deduplicate, plan_partitioning

__all__ = [
    "__version__",
    "Settings",
    "get_settings",
    "DuplicatePair",
    "Partitioning",
    "ConfigurationError",
    "OracleError",
    "AssignmentInconsistency",
    "ParallelBruteForce",
    "deduplicate",
    "plan_partitioning",
]
