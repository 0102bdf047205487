"""Coordinator fanning node workers out over a partitioning and merging results."""

from __future__ import annotations

import operator
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import reduce
from time import perf_counter
from typing import Callable, Dict, List, Sequence, Tuple

from distdedup.config.settings import Settings, get_settings
from distdedup.entities.core import (
    DEFAULT_ID_FIELD,
    ConfigurationError,
    DuplicateSet,
    Partitioning,
    Record,
    RecordSet,
    record_id,
    total_comparisons,
)
from distdedup.observability.determinism import duplicates_checksum
from distdedup.oracles.base import SimilarityOracle
from distdedup.pipeline.bruteforce.partitioning import plan_partitioning, validate_partitioning
from distdedup.pipeline.bruteforce.worker import (
    DuplicateStore,
    NodeReport,
    NodeWorker,
    execute_node,
)
from distdedup.utils.logging import get_logger


_LOGGER = get_logger(module=__name__)

_EXECUTORS: Dict[str, Callable[..., Executor]] = {
    "thread": ThreadPoolExecutor,
    "process": ProcessPoolExecutor,
}


@dataclass
class BruteForceResult:
    """Aggregate result of a parallel brute-force run."""

    duplicates: DuplicateSet
    partitioning: Partitioning
    node_reports: List[NodeReport] = field(default_factory=list)
    stats: Dict[str, object] = field(default_factory=dict)

    def sorted_pairs(self) -> List[Tuple[str, str]]:
        return [pair.as_tuple() for pair in sorted(self.duplicates)]


class ParallelBruteForce:
    """Compare every pair of records, spreading the work across simulated nodes.

    The whole record set is conceptually replicated to every node. Each node
    receives one bucket of the partitioning and compares its records with all
    records to their right, so every unordered pair is scored by exactly one
    node. Nodes run concurrently and share the records and oracle read-only;
    the coordinator joins all of them before folding their local duplicate sets
    into the final result with set union. A failure in any node fails the whole
    run and no partial result is returned.
    """

    def __init__(
        self,
        records: RecordSet,
        oracle: SimilarityOracle,
        *,
        nodes: int,
        record_count: int | None = None,
        id_field: str = DEFAULT_ID_FIELD,
        executor: str = "thread",
        max_workers: int | None = None,
        store_factory: Callable[[], DuplicateStore] | None = None,
    ) -> None:
        if nodes <= 0:
            raise ConfigurationError(f"Node count must be positive, got {nodes}")
        frozen_records: Tuple[Record, ...] = tuple(records)
        if record_count is not None and record_count != len(frozen_records):
            raise ConfigurationError(
                f"Declared record count {record_count} does not match the {len(frozen_records)} records supplied"
            )
        if executor not in _EXECUTORS:
            raise ConfigurationError(
                f"Unknown executor '{executor}'. Expected one of: {', '.join(sorted(_EXECUTORS))}"
            )
        if max_workers is not None and max_workers <= 0:
            raise ConfigurationError(f"max_workers must be positive, got {max_workers}")
        for record in frozen_records:
            record_id(record, id_field)

        self.records = frozen_records
        self.oracle = oracle
        self.nodes = nodes
        self.id_field = id_field
        self.executor = executor
        self.max_workers = max_workers
        self.store_factory = store_factory

    @classmethod
    def from_settings(
        cls,
        records: RecordSet,
        oracle: SimilarityOracle,
        *,
        settings: Settings | None = None,
        nodes: int | None = None,
        store_factory: Callable[[], DuplicateStore] | None = None,
    ) -> "ParallelBruteForce":
        cfg = settings or get_settings()
        policies = cfg.policies
        return cls(
            records,
            oracle,
            nodes=nodes if nodes is not None else policies.partitioning.nodes,
            id_field=policies.dataset.id_field,
            executor=policies.execution.executor,
            max_workers=policies.execution.max_workers,
            store_factory=store_factory,
        )

    @property
    def record_count(self) -> int:
        return len(self.records)

    def partitioning(self) -> Partitioning:
        """Plan the default partitioning for the configured node count."""

        return plan_partitioning(self.record_count, self.nodes)

    def _resolve_partitioning(self, partitioning: Partitioning | None) -> Partitioning:
        if partitioning is None:
            return self.partitioning()
        if partitioning.record_count != self.record_count:
            raise ConfigurationError(
                f"Partitioning covers {partitioning.record_count} records but {self.record_count} were supplied"
            )
        validate_partitioning(partitioning)
        return partitioning

    def _build_workers(self, partitioning: Partitioning) -> List[NodeWorker]:
        return [
            NodeWorker(
                bucket,
                self.records,
                self.oracle,
                id_field=self.id_field,
                store=self.store_factory() if self.store_factory is not None else None,
            )
            for bucket in partitioning
        ]

    def _fan_out(self, workers: Sequence[NodeWorker]) -> List[Tuple[DuplicateSet, NodeReport]]:
        if not workers:
            return []
        pool_size = min(self.max_workers or len(workers), len(workers))
        with _EXECUTORS[self.executor](max_workers=pool_size) as pool:
            futures = [pool.submit(execute_node, worker) for worker in workers]
            try:
                return [future.result() for future in futures]
            except BaseException:
                for future in futures:
                    future.cancel()
                raise

    def process(self, partitioning: Partitioning | None = None) -> BruteForceResult:
        """Run every node and return duplicates together with run statistics."""

        start_time = perf_counter()
        resolved = self._resolve_partitioning(partitioning)
        workers = self._build_workers(resolved)
        _LOGGER.info(
            "Brute-force run started",
            records=self.record_count,
            nodes=self.nodes,
            buckets=len(resolved),
            executor=self.executor,
        )

        try:
            outcomes = self._fan_out(workers)
        except Exception as exc:
            _LOGGER.error(
                "Brute-force run failed; discarding all node results",
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise

        local_sets = [duplicates for duplicates, _ in outcomes]
        reports = sorted((report for _, report in outcomes), key=lambda report: report.node_id)
        duplicates: DuplicateSet = reduce(operator.or_, local_sets, frozenset())

        elapsed_seconds = perf_counter() - start_time
        node_comparisons = [report.comparisons for report in reports]
        stats: Dict[str, object] = {
            "records": self.record_count,
            "nodes_requested": self.nodes,
            "buckets": len(resolved),
            "executor": self.executor,
            "total_comparisons": total_comparisons(self.record_count),
            "average_comparisons": resolved.average_comparisons,
            "max_node_comparisons": max(node_comparisons, default=0),
            "min_node_comparisons": min(node_comparisons, default=0),
            "local_duplicates": sum(len(local) for local in local_sets),
            "duplicates": len(duplicates),
            "duplicates_checksum": duplicates_checksum(duplicates),
            "timing": {"elapsed_seconds": elapsed_seconds},
        }
        _LOGGER.info(
            "Brute-force run finished",
            records=self.record_count,
            buckets=len(resolved),
            duplicates=len(duplicates),
            elapsed_seconds=elapsed_seconds,
        )
        return BruteForceResult(
            duplicates=duplicates,
            partitioning=resolved,
            node_reports=reports,
            stats=stats,
        )

    def deduplicate(self, partitioning: Partitioning | None = None) -> DuplicateSet:
        """Return the merged duplicate set of all nodes."""

        return self.process(partitioning).duplicates


def deduplicate(
    records: RecordSet,
    nodes: int,
    oracle: SimilarityOracle,
    partitioning: Partitioning | None = None,
    *,
    record_count: int | None = None,
    id_field: str = DEFAULT_ID_FIELD,
) -> DuplicateSet:
    """Functional entry point over :class:`ParallelBruteForce`."""

    coordinator = ParallelBruteForce(
        records,
        oracle,
        nodes=nodes,
        record_count=record_count,
        id_field=id_field,
    )
    return coordinator.deduplicate(partitioning)


__all__ = ["BruteForceResult", "ParallelBruteForce", "deduplicate"]
