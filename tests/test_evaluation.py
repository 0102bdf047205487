"""Tests for evaluation against known duplicate pairs."""

from __future__ import annotations

from pathlib import Path

import pytest

from distdedup.config.policies import EvaluationPolicy
from distdedup.entities.core import ConfigurationError, DuplicatePair
from distdedup.evaluation import Evaluation, Evaluator, load_gold_standard


def test_evaluation_scores() -> None:
    evaluation = Evaluation(true_positives=3, false_positives=1, false_negatives=2)

    assert evaluation.precision == pytest.approx(0.75)
    assert evaluation.recall == pytest.approx(0.6)
    assert evaluation.f1 == pytest.approx(2 * 0.75 * 0.6 / 1.35)


def test_evaluation_handles_empty_denominators() -> None:
    evaluation = Evaluation(true_positives=0, false_positives=0, false_negatives=0)

    assert evaluation.summary()["precision"] == 0.0
    assert evaluation.summary()["recall"] == 0.0
    assert evaluation.summary()["f1"] == 0.0


def test_evaluator_ignores_pair_orientation() -> None:
    evaluator = Evaluator([("b", "a"), ("c", "d"), ("e", "f")])
    found = {DuplicatePair("a", "b"), DuplicatePair("d", "c"), DuplicatePair("x", "y")}

    evaluation = evaluator.evaluate(found)

    assert len(evaluator) == 3
    assert evaluation.true_positives == 2
    assert evaluation.false_positives == 1
    assert evaluation.false_negatives == 1


def test_load_gold_standard(tmp_path: Path) -> None:
    gold = tmp_path / "gold.tsv"
    gold.write_text("id1\tid2\n1\t2\n2\t1\n3\t4\n5\t5\n", encoding="utf-8")

    pairs = load_gold_standard(gold)

    assert pairs == {frozenset({"1", "2"}), frozenset({"3", "4"})}


def test_load_gold_standard_custom_columns(tmp_path: Path) -> None:
    gold = tmp_path / "gold.csv"
    gold.write_text("left,right\na,b\n", encoding="utf-8")
    policy = EvaluationPolicy(delimiter=",", left_column="left", right_column="right")

    evaluator = Evaluator.from_file(gold, policy=policy)

    assert evaluator.evaluate([DuplicatePair("b", "a")]).true_positives == 1


def test_load_gold_standard_missing_columns(tmp_path: Path) -> None:
    gold = tmp_path / "gold.tsv"
    gold.write_text("first\tsecond\n1\t2\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="id1"):
        load_gold_standard(gold)
