"""Parallel brute-force duplicate detection: planner, node workers and coordinator."""

from .coordinator import BruteForceResult, ParallelBruteForce, deduplicate
from .main import deduplicate_dataset
from .partitioning import plan_partitioning, validate_partitioning
from .worker import (
    DuplicateStore,
    InMemoryDuplicateStore,
    NodeReport,
    NodeWorker,
    run_worker,
)

__all__ = [
    "plan_partitioning",
    "validate_partitioning",
    "NodeWorker",
    "NodeReport",
    "DuplicateStore",
    "InMemoryDuplicateStore",
    "run_worker",
    "ParallelBruteForce",
    "BruteForceResult",
    "deduplicate",
    "deduplicate_dataset",
]
