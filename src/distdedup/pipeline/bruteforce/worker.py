"""Node worker comparing its bucket against every record to the right."""

from __future__ import annotations

from dataclasses import dataclass
from time import perf_counter
from typing import Iterator, Protocol, Tuple

from distdedup.entities.core import (
    DEFAULT_ID_FIELD,
    Bucket,
    DuplicatePair,
    DuplicateSet,
    RecordSet,
    record_id,
)
from distdedup.oracles.base import SimilarityOracle
from distdedup.utils.logging import get_logger, logging_context


_LOGGER = get_logger(module=__name__)


class DuplicateStore(Protocol):
    """Write-then-read sink for a node's duplicates.

    Placeholder for a durable store shared between nodes and the coordinator
    (for example a distributed filesystem). ``retrieve`` must return exactly
    what was last passed to ``store``.
    """

    def store(self, duplicates: DuplicateSet) -> None:
        ...

    def retrieve(self) -> DuplicateSet:
        ...


class InMemoryDuplicateStore:
    """Process-local :class:`DuplicateStore`."""

    def __init__(self) -> None:
        self._duplicates: DuplicateSet | None = None

    def store(self, duplicates: DuplicateSet) -> None:
        self._duplicates = frozenset(duplicates)

    def retrieve(self) -> DuplicateSet:
        if self._duplicates is None:
            raise LookupError("No duplicates have been stored yet")
        return self._duplicates


@dataclass(frozen=True, slots=True)
class NodeReport:
    """Execution summary for one node."""

    node_id: int
    records_assigned: int
    comparisons: int
    duplicates: int
    elapsed_seconds: float


class NodeWorker:
    """Finds duplicates for the records assigned to a single node.

    The worker sees the whole record set, since each assigned record is
    compared against every record after it and not only against its own
    bucket. In a real deployment this means replicating the full dataset to
    every node.
    """

    def __init__(
        self,
        bucket: Bucket,
        records: RecordSet,
        oracle: SimilarityOracle,
        *,
        id_field: str = DEFAULT_ID_FIELD,
        store: DuplicateStore | None = None,
    ) -> None:
        self.bucket = bucket
        self.records = records
        self.oracle = oracle
        self.id_field = id_field
        self.store = store

    @property
    def node_id(self) -> int:
        return self.bucket.node_id

    def compared_pairs(self) -> Iterator[Tuple[int, int]]:
        """Yield every ``(i, j)`` index pair this node is responsible for."""

        total = len(self.records)
        for i in self.bucket.indices:
            for j in range(i + 1, total):
                yield i, j

    def run(self) -> DuplicateSet:
        """Compare every assigned pair and return the pairs at or above the threshold.

        Any exception raised by the oracle propagates unchanged and no partial
        result is kept.
        """

        threshold = self.oracle.threshold()
        records = self.records
        duplicates: set[DuplicatePair] = set()
        for i, j in self.compared_pairs():
            score = self.oracle.similarity(records[i], records[j])
            if score >= threshold:
                duplicates.add(
                    DuplicatePair(
                        record_id(records[i], self.id_field),
                        record_id(records[j], self.id_field),
                    )
                )
        result = frozenset(duplicates)
        if self.store is not None:
            self.store.store(result)
        return result


def run_worker(bucket: Bucket, records: RecordSet, oracle: SimilarityOracle) -> DuplicateSet:
    """Functional form of :meth:`NodeWorker.run`."""

    return NodeWorker(bucket, records, oracle).run()


def execute_node(worker: NodeWorker) -> Tuple[DuplicateSet, NodeReport]:
    """Run *worker* and time it; used as the unit of work submitted to executors."""

    with logging_context(node=worker.node_id):
        start = perf_counter()
        comparisons = worker.bucket.workload(len(worker.records))
        _LOGGER.debug(
            "Node started",
            node_id=worker.node_id,
            records_assigned=len(worker.bucket),
            comparisons=comparisons,
        )
        duplicates = worker.run()
        elapsed = perf_counter() - start
        report = NodeReport(
            node_id=worker.node_id,
            records_assigned=len(worker.bucket),
            comparisons=comparisons,
            duplicates=len(duplicates),
            elapsed_seconds=elapsed,
        )
        _LOGGER.debug(
            "Node finished",
            node_id=worker.node_id,
            duplicates=len(duplicates),
            elapsed_seconds=elapsed,
        )
    return duplicates, report


__all__ = [
    "DuplicateStore",
    "InMemoryDuplicateStore",
    "NodeReport",
    "NodeWorker",
    "run_worker",
    "execute_node",
]
