"""Greedy load-balanced split of the triangular comparison space.

Record ``i`` must be compared with every record to its right, so it carries a
workload of ``m - i - 1`` comparisons. Scanning indices in ascending order and
closing a bucket as soon as its accumulated workload reaches the per-node
average yields contiguous buckets of near-equal cost. Early buckets therefore
hold few indices and later buckets many.

The number of buckets is not forced to match the requested node count. When
``n`` exceeds the total number of comparisons the average drops to zero and
every index becomes its own bucket. Records at the tail that carry no
comparisons of their own are folded into the last closed bucket, so large
per-bucket overshoots leave fewer buckets than requested.
"""

from __future__ import annotations

from collections import Counter
from typing import List

from distdedup.entities.core import (
    AssignmentInconsistency,
    Bucket,
    ConfigurationError,
    Partitioning,
    comparisons_for,
    total_comparisons,
)
from distdedup.utils.logging import get_logger


_LOGGER = get_logger(module=__name__)


def _greedy_ranges(record_count: int, average: int) -> List[range]:
    ranges: List[range] = []
    start = 0
    workload = 0
    for index in range(record_count):
        workload += comparisons_for(index, record_count)
        if workload >= average:
            ranges.append(range(start, index + 1))
            start = index + 1
            workload = 0
    if start < record_count:
        if workload == 0 and ranges:
            # A remainder without comparisons joins the last closed bucket.
            ranges[-1] = range(ranges[-1].start, record_count)
        else:
            ranges.append(range(start, record_count))
    return ranges


def plan_partitioning(record_count: int, node_count: int) -> Partitioning:
    """Split the comparisons among ``record_count`` records across ``node_count`` nodes."""

    if node_count <= 0:
        raise ConfigurationError(f"Node count must be positive, got {node_count}")
    if record_count < 0:
        raise ConfigurationError(f"Record count must not be negative, got {record_count}")

    total = total_comparisons(record_count)
    average = total // node_count
    _LOGGER.info(
        "Average number of comparisons per node",
        average_comparisons=average,
        total_comparisons=total,
        records=record_count,
        nodes=node_count,
    )

    buckets = tuple(
        Bucket(node_id=node_id, indices=tuple(indices))
        for node_id, indices in enumerate(_greedy_ranges(record_count, average))
    )
    partitioning = Partitioning(
        record_count=record_count,
        node_count=node_count,
        average_comparisons=average,
        buckets=buckets,
    )
    validate_partitioning(partitioning)

    for bucket in buckets:
        _LOGGER.debug(
            "Node assigned comparisons",
            node_id=bucket.node_id,
            first_index=bucket.first,
            last_index=bucket.last,
            comparisons=bucket.workload(record_count),
        )
    if len(buckets) != node_count:
        _LOGGER.info(
            "Bucket count differs from requested node count",
            buckets=len(buckets),
            nodes=node_count,
        )
    return partitioning


def validate_partitioning(partitioning: Partitioning) -> None:
    """Raise :class:`AssignmentInconsistency` unless buckets cover ``0..m-1`` in order.

    Every index must appear exactly once and concatenating the buckets must
    reproduce the ascending index order.
    """

    record_count = partitioning.record_count
    flattened = partitioning.flattened()
    if flattened == list(range(record_count)):
        return

    counts = Counter(flattened)
    repeated = sorted(index for index, count in counts.items() if count > 1)
    missing = sorted(set(range(record_count)) - counts.keys())
    out_of_range = sorted(index for index in counts if index < 0 or index >= record_count)
    _LOGGER.error(
        "Partitioning does not cover the record set exactly once",
        records=record_count,
        repeated=repeated[:10],
        missing=missing[:10],
        out_of_range=out_of_range[:10],
    )
    if repeated or missing or out_of_range:
        raise AssignmentInconsistency(
            f"Partitioning of {record_count} records is inconsistent: "
            f"{len(missing)} missing, {len(repeated)} repeated, {len(out_of_range)} out of range"
        )
    raise AssignmentInconsistency(
        f"Partitioning of {record_count} records is not in ascending index order"
    )


__all__ = ["plan_partitioning", "validate_partitioning"]
