"""Tests for similarity oracles and the string similarity helpers behind them."""

from __future__ import annotations

import math

import pytest

from distdedup.config.policies import DatasetPolicy, SimilarityPolicy
from distdedup.entities.core import OracleError
from distdedup.oracles import FieldSimilarityOracle, FunctionOracle, SimilarityOracle
from distdedup.utils import (
    compute_similarity,
    jaro_winkler_similarity,
    preprocess_for_similarity,
    token_jaccard_similarity,
)


def test_preprocess_for_similarity_normalizes_text() -> None:
    assert preprocess_for_similarity("  Deep   Learning, Vol. 2!  ") == "deep learning vol 2"


def test_token_jaccard_similarity() -> None:
    assert token_jaccard_similarity("data science", "Science, Data") == 1.0
    assert math.isclose(token_jaccard_similarity("data science", "data mining"), 1 / 3)
    assert token_jaccard_similarity("", "data") == 0.0


def test_jaro_winkler_is_symmetric() -> None:
    forward = jaro_winkler_similarity("Martha", "Marhta")
    backward = jaro_winkler_similarity("Marhta", "Martha")

    assert forward == backward
    assert 0.9 < forward < 1.0


def test_compute_similarity_rejects_unknown_method() -> None:
    with pytest.raises(ValueError, match="Unsupported"):
        compute_similarity("a", "b", method="cosine")


def test_function_oracle_satisfies_protocol() -> None:
    oracle = FunctionOracle(lambda left, right: 0.3, 0.4)

    assert isinstance(oracle, SimilarityOracle)
    assert oracle.threshold() == 0.4
    assert oracle.similarity({}, {}) == 0.3


def test_field_oracle_identical_records_score_one() -> None:
    oracle = FieldSimilarityOracle(["title", "authors"], 0.9)
    record = {"id": "1", "title": "Parallel Duplicate Detection", "authors": "Smith, J."}

    assert oracle.similarity(record, dict(record, id="2")) == pytest.approx(1.0)


def test_field_oracle_ignores_fields_missing_on_both_sides() -> None:
    oracle = FieldSimilarityOracle(["title", "venue"], 0.9)
    left = {"title": "Record Linkage", "venue": None}
    right = {"title": "Record Linkage"}

    assert oracle.similarity(left, right) == pytest.approx(1.0)


def test_field_oracle_penalises_one_sided_fields() -> None:
    oracle = FieldSimilarityOracle(["title", "venue"], 0.9)
    left = {"title": "Record Linkage", "venue": "VLDB"}
    right = {"title": "Record Linkage", "venue": "  "}

    assert oracle.similarity(left, right) == pytest.approx(0.5)


def test_field_oracle_without_comparable_fields_scores_zero() -> None:
    oracle = FieldSimilarityOracle(["title"], 0.5)

    assert oracle.similarity({"id": "1"}, {"id": "2"}) == 0.0


def test_field_oracle_applies_weights() -> None:
    oracle = FieldSimilarityOracle(
        ["title", "venue"],
        0.5,
        weights={"title": 3.0, "venue": 1.0},
        method="token_jaccard",
    )
    left = {"title": "entity resolution", "venue": "SIGMOD"}
    right = {"title": "entity resolution", "venue": "ICDE"}

    assert oracle.similarity(left, right) == pytest.approx(0.75)


def test_field_oracle_zero_weight_skips_field() -> None:
    oracle = FieldSimilarityOracle(["title", "venue"], 0.5, weights={"venue": 0.0}, method="token_jaccard")

    assert oracle.similarity({"title": "a b", "venue": "x"}, {"title": "a b", "venue": "y"}) == 1.0


def test_field_oracle_rejects_non_mapping_records() -> None:
    oracle = FieldSimilarityOracle(["title"], 0.5)

    with pytest.raises(OracleError):
        oracle.similarity(("title",), {"title": "x"})


def test_field_oracle_validates_construction() -> None:
    with pytest.raises(ValueError):
        FieldSimilarityOracle([], 0.5)
    with pytest.raises(ValueError):
        FieldSimilarityOracle(["title"], 0.5, method="soundex")


def test_field_oracle_from_policies() -> None:
    oracle = FieldSimilarityOracle.from_policies(
        DatasetPolicy(compared_fields=["name"]),
        SimilarityPolicy(threshold=0.7, method="token_jaccard"),
    )

    assert oracle.fields == ("name",)
    assert oracle.threshold() == 0.7
    assert isinstance(oracle, SimilarityOracle)
