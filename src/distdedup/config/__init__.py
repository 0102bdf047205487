"""Configuration utilities for brute-force duplicate detection."""

from .policies import (
    DatasetPolicy,
    EvaluationPolicy,
    ExecutionPolicy,
    PartitioningPolicy,
    Policies,
    SimilarityPolicy,
    load_policies,
)
from .settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "Policies",
    "load_policies",
    "PartitioningPolicy",
    "ExecutionPolicy",
    "DatasetPolicy",
    "SimilarityPolicy",
    "EvaluationPolicy",
]
