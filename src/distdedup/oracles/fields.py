"""Reference oracle scoring records by weighted per-field string similarity."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Dict, Sequence

from distdedup.config.policies import DatasetPolicy, SimilarityPolicy
from distdedup.entities.core import OracleError, Record
from distdedup.utils.similarity import compute_similarity


def _field_text(record: Record, field: str) -> str | None:
    value = record.get(field)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class FieldSimilarityOracle:
    """Weighted mean of per-field similarities over a fixed list of fields.

    A field missing (or blank) on both records is ignored; a field present on
    only one of them scores 0.0. When no field is comparable the pair scores
    0.0 so sparse records never collapse into a single duplicate cluster.
    """

    def __init__(
        self,
        fields: Sequence[str],
        threshold: float,
        *,
        weights: Dict[str, float] | None = None,
        method: str = "jaro_winkler",
    ) -> None:
        if not fields:
            raise ValueError("FieldSimilarityOracle requires at least one field")
        self._fields = tuple(fields)
        self._threshold = float(threshold)
        self._weights = dict(weights or {})
        self._method = method
        # raises ValueError for unknown methods
        compute_similarity("", "", method=method)

    @classmethod
    def from_policies(
        cls, dataset: DatasetPolicy, similarity: SimilarityPolicy
    ) -> "FieldSimilarityOracle":
        return cls(
            dataset.compared_fields,
            similarity.threshold,
            weights=similarity.weights,
            method=similarity.method,
        )

    @property
    def fields(self) -> tuple[str, ...]:
        return self._fields

    def threshold(self) -> float:
        return self._threshold

    def similarity(self, left: Record, right: Record) -> float:
        if not isinstance(left, Mapping) or not isinstance(right, Mapping):
            raise OracleError(
                f"Records must be mappings, got {type(left).__name__} and {type(right).__name__}"
            )

        weighted_total = 0.0
        weight_sum = 0.0
        for field in self._fields:
            left_text = _field_text(left, field)
            right_text = _field_text(right, field)
            if left_text is None and right_text is None:
                continue
            weight = self._weights.get(field, 1.0)
            if weight == 0.0:
                continue
            if left_text is None or right_text is None:
                score = 0.0
            else:
                score = compute_similarity(left_text, right_text, method=self._method)
            weighted_total += weight * score
            weight_sum += weight

        if weight_sum == 0.0:
            return 0.0
        return weighted_total / weight_sum


__all__ = ["FieldSimilarityOracle"]
