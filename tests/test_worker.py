"""Tests for node workers and the duplicate store contract."""

from __future__ import annotations

from itertools import combinations

import pytest

from distdedup.entities.core import Bucket, DuplicatePair, OracleError
from distdedup.oracles.base import FunctionOracle
from distdedup.pipeline.bruteforce.partitioning import plan_partitioning
from distdedup.pipeline.bruteforce.worker import (
    InMemoryDuplicateStore,
    NodeWorker,
    execute_node,
    run_worker,
)


def _records(count: int) -> list[dict[str, str]]:
    return [{"id": f"r{index}", "group": str(index % 3)} for index in range(count)]


def _same_group(left, right) -> float:
    return 1.0 if left["group"] == right["group"] else 0.0


def test_worker_compares_bucket_against_all_later_records() -> None:
    records = _records(6)
    worker = NodeWorker(Bucket(0, (1, 2)), records, FunctionOracle(_same_group, 0.5))

    assert list(worker.compared_pairs()) == [
        (1, 2), (1, 3), (1, 4), (1, 5),
        (2, 3), (2, 4), (2, 5),
    ]


@pytest.mark.parametrize("record_count,node_count", [(9, 2), (12, 5), (20, 20)])
def test_buckets_cover_every_pair_exactly_once(record_count: int, node_count: int) -> None:
    records = _records(record_count)
    oracle = FunctionOracle(_same_group, 0.5)
    partitioning = plan_partitioning(record_count, node_count)

    owned = [
        pair
        for bucket in partitioning
        for pair in NodeWorker(bucket, records, oracle).compared_pairs()
    ]

    assert len(owned) == len(set(owned))
    assert set(owned) == set(combinations(range(record_count), 2))


def test_worker_reports_pairs_ordered_by_position() -> None:
    records = [{"id": "zeta", "group": "a"}, {"id": "alpha", "group": "a"}]

    duplicates = run_worker(Bucket(0, (0, 1)), records, FunctionOracle(_same_group, 0.5))

    assert duplicates == frozenset({DuplicatePair("zeta", "alpha")})


def test_threshold_is_inclusive() -> None:
    records = _records(2)
    oracle = FunctionOracle(lambda left, right: 0.75, 0.75)

    assert run_worker(Bucket(0, (0,)), records, oracle) == frozenset({DuplicatePair("r0", "r1")})


def test_last_index_has_nothing_to_compare() -> None:
    calls: list[tuple[str, str]] = []

    def _recording(left, right) -> float:
        calls.append((left["id"], right["id"]))
        return 1.0

    duplicates = run_worker(Bucket(0, (3,)), _records(4), FunctionOracle(_recording, 0.0))

    assert duplicates == frozenset()
    assert calls == []


def test_oracle_failure_propagates() -> None:
    def _broken(left, right) -> float:
        raise OracleError("cannot score")

    with pytest.raises(OracleError):
        run_worker(Bucket(0, (0, 1)), _records(3), FunctionOracle(_broken, 0.5))


def test_store_receives_the_returned_set() -> None:
    store = InMemoryDuplicateStore()
    worker = NodeWorker(Bucket(0, (0, 1, 2)), _records(6), FunctionOracle(_same_group, 0.5), store=store)

    result = worker.run()

    assert store.retrieve() == result
    assert result == frozenset({DuplicatePair("r0", "r3"), DuplicatePair("r1", "r4"), DuplicatePair("r2", "r5")})


def test_store_retrieve_before_store_raises() -> None:
    with pytest.raises(LookupError):
        InMemoryDuplicateStore().retrieve()


def test_execute_node_reports_workload() -> None:
    worker = NodeWorker(Bucket(4, (0, 1)), _records(5), FunctionOracle(_same_group, 0.5))

    duplicates, report = execute_node(worker)

    assert report.node_id == 4
    assert report.records_assigned == 2
    assert report.comparisons == 4 + 3
    assert report.duplicates == len(duplicates) == 2
    assert report.elapsed_seconds >= 0.0
