"""Domain entities for brute-force duplicate detection."""

from .core import (
    AssignmentInconsistency,
    Bucket,
    ConfigurationError,
    DedupError,
    DuplicatePair,
    DuplicateSet,
    OracleError,
    Partitioning,
    Record,
    RecordSet,
    record_id,
)

__all__ = [
    "Record",
    "RecordSet",
    "record_id",
    "DuplicatePair",
    "DuplicateSet",
    "Bucket",
    "Partitioning",
    "DedupError",
    "ConfigurationError",
    "OracleError",
    "AssignmentInconsistency",
]
