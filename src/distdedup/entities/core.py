"""Core domain entities shared by the planner, workers and coordinator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, FrozenSet, Iterator, List, Mapping, Sequence, Tuple

Record = Mapping[str, Any]
RecordSet = Sequence[Record]

DEFAULT_ID_FIELD = "id"


class DedupError(Exception):
    """Base exception for duplicate detection failures."""


class ConfigurationError(DedupError, ValueError):
    """Raised before any work starts when run parameters are inconsistent."""


class OracleError(DedupError, RuntimeError):
    """Raised by similarity oracles that cannot score a pair of records."""


class AssignmentInconsistency(DedupError, AssertionError):
    """Raised when a partitioning does not cover every record index exactly once."""


def record_id(record: Record, id_field: str = DEFAULT_ID_FIELD) -> str:
    """Return the stable string identifier of *record*."""

    try:
        value = record[id_field]
    except KeyError:
        raise ConfigurationError(f"Record is missing identifier field '{id_field}'") from None
    return str(value)


@dataclass(frozen=True, slots=True, order=True)
class DuplicatePair:
    """Identifiers of two records judged to describe the same entity.

    ``low_id`` always belongs to the record with the smaller position in the
    record set; the order is positional, not lexicographic.
    """

    low_id: str
    high_id: str

    def as_tuple(self) -> Tuple[str, str]:
        return (self.low_id, self.high_id)

    def unordered(self) -> FrozenSet[str]:
        return frozenset((self.low_id, self.high_id))


DuplicateSet = FrozenSet[DuplicatePair]


def comparisons_for(index: int, record_count: int) -> int:
    """Number of partners to the right of *index* in a record set of *record_count*."""

    return record_count - index - 1


def total_comparisons(record_count: int) -> int:
    """Size of the triangular comparison space for *record_count* records."""

    return record_count * (record_count - 1) // 2


@dataclass(frozen=True, slots=True)
class Bucket:
    """Contiguous record indices owned by one simulated node."""

    node_id: int
    indices: Tuple[int, ...]

    def workload(self, record_count: int) -> int:
        return sum(comparisons_for(index, record_count) for index in self.indices)

    @property
    def first(self) -> int | None:
        return self.indices[0] if self.indices else None

    @property
    def last(self) -> int | None:
        return self.indices[-1] if self.indices else None

    def __len__(self) -> int:
        return len(self.indices)


@dataclass(frozen=True, slots=True)
class Partitioning:
    """Ordered buckets splitting the comparison space of ``record_count`` records.

    ``node_count`` is the requested number of nodes; ``len(buckets)`` may differ
    from it because the planner closes a bucket whenever its workload reaches
    ``average_comparisons``.
    """

    record_count: int
    node_count: int
    average_comparisons: int
    buckets: Tuple[Bucket, ...]

    def __iter__(self) -> Iterator[Bucket]:
        return iter(self.buckets)

    def __len__(self) -> int:
        return len(self.buckets)

    def workloads(self) -> List[int]:
        return [bucket.workload(self.record_count) for bucket in self.buckets]

    def flattened(self) -> List[int]:
        return [index for bucket in self.buckets for index in bucket.indices]

    def as_mapping(self) -> dict[int, List[int]]:
        return {bucket.node_id: list(bucket.indices) for bucket in self.buckets}

    @classmethod
    def from_mapping(
        cls,
        mapping: Mapping[int, Sequence[int]],
        *,
        record_count: int,
        node_count: int | None = None,
    ) -> "Partitioning":
        """Build a partitioning from a precalculated ``node_id -> indices`` mapping."""

        buckets = tuple(
            Bucket(node_id=int(node_id), indices=tuple(int(index) for index in indices))
            for node_id, indices in sorted(mapping.items(), key=lambda item: int(item[0]))
        )
        nodes = node_count if node_count is not None else max(len(buckets), 1)
        if nodes <= 0:
            raise ConfigurationError(f"Node count must be positive, got {nodes}")
        return cls(
            record_count=record_count,
            node_count=nodes,
            average_comparisons=total_comparisons(record_count) // nodes,
            buckets=buckets,
        )


__all__ = [
    "Record",
    "RecordSet",
    "DEFAULT_ID_FIELD",
    "DedupError",
    "ConfigurationError",
    "OracleError",
    "AssignmentInconsistency",
    "record_id",
    "DuplicatePair",
    "DuplicateSet",
    "comparisons_for",
    "total_comparisons",
    "Bucket",
    "Partitioning",
]
