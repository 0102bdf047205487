"""Precision/recall evaluation of detected duplicates against a gold standard."""

from __future__ import annotations

from pathlib import Path
from typing import FrozenSet, Iterable, Set, Tuple

import polars as pl
from pydantic import BaseModel, Field

from distdedup.config.policies import EvaluationPolicy
from distdedup.entities.core import ConfigurationError, DuplicatePair
from distdedup.utils.logging import get_logger


_LOGGER = get_logger(module=__name__)

UnorderedPair = FrozenSet[str]


class Evaluation(BaseModel):
    """Confusion counts and derived scores for one run."""

    true_positives: int = Field(..., ge=0)
    false_positives: int = Field(..., ge=0)
    false_negatives: int = Field(..., ge=0)

    @property
    def precision(self) -> float:
        found = self.true_positives + self.false_positives
        return self.true_positives / found if found else 0.0

    @property
    def recall(self) -> float:
        expected = self.true_positives + self.false_negatives
        return self.true_positives / expected if expected else 0.0

    @property
    def f1(self) -> float:
        precision, recall = self.precision, self.recall
        if precision + recall == 0.0:
            return 0.0
        return 2 * precision * recall / (precision + recall)

    def summary(self) -> dict[str, float | int]:
        return {
            "true_positives": self.true_positives,
            "false_positives": self.false_positives,
            "false_negatives": self.false_negatives,
            "precision": round(self.precision, 6),
            "recall": round(self.recall, 6),
            "f1": round(self.f1, 6),
        }


def _unordered(left: str, right: str) -> UnorderedPair:
    return frozenset((str(left), str(right)))


def load_gold_standard(
    path: str | Path,
    *,
    policy: EvaluationPolicy | None = None,
) -> Set[UnorderedPair]:
    """Read known duplicate pairs; pair order in the file is irrelevant."""

    cfg = policy or EvaluationPolicy()
    source = Path(path)
    frame = pl.read_csv(source, separator=cfg.delimiter, infer_schema_length=0)
    missing = [column for column in (cfg.left_column, cfg.right_column) if column not in frame.columns]
    if missing:
        raise ConfigurationError(
            f"Gold standard {source} is missing column(s): {', '.join(missing)}"
        )
    pairs = {
        _unordered(left, right)
        for left, right in zip(frame[cfg.left_column].to_list(), frame[cfg.right_column].to_list())
        if left is not None and right is not None and left != right
    }
    _LOGGER.info("Loaded gold standard", path=str(source), pairs=len(pairs))
    return pairs


class Evaluator:
    """Compare detected duplicate pairs with a gold standard."""

    def __init__(self, gold_standard: Iterable[UnorderedPair | Tuple[str, str]]) -> None:
        self._gold: Set[UnorderedPair] = {
            pair if isinstance(pair, frozenset) else _unordered(*pair) for pair in gold_standard
        }

    @classmethod
    def from_file(cls, path: str | Path, *, policy: EvaluationPolicy | None = None) -> "Evaluator":
        return cls(load_gold_standard(path, policy=policy))

    def __len__(self) -> int:
        return len(self._gold)

    def evaluate(self, duplicates: Iterable[DuplicatePair]) -> Evaluation:
        found = {pair.unordered() for pair in duplicates}
        evaluation = Evaluation(
            true_positives=len(found & self._gold),
            false_positives=len(found - self._gold),
            false_negatives=len(self._gold - found),
        )
        _LOGGER.info("Evaluation complete", **evaluation.summary())
        return evaluation


__all__ = ["Evaluation", "Evaluator", "load_gold_standard"]
