"""Similarity oracle interface consumed by node workers."""

from __future__ import annotations

from typing import Callable, Protocol, runtime_checkable

from distdedup.entities.core import Record


@runtime_checkable
class SimilarityOracle(Protocol):
    """Decides whether two records describe the same entity.

    Implementations must be safe for concurrent reads: workers share a single
    oracle instance and call it from several threads at once.
    """

    def similarity(self, left: Record, right: Record) -> float:
        ...

    def threshold(self) -> float:
        ...


class FunctionOracle:
    """Adapt a plain scoring callable and a fixed threshold to :class:`SimilarityOracle`."""

    def __init__(self, func: Callable[[Record, Record], float], threshold: float) -> None:
        self._func = func
        self._threshold = float(threshold)

    def similarity(self, left: Record, right: Record) -> float:
        return self._func(left, right)

    def threshold(self) -> float:
        return self._threshold

    def __repr__(self) -> str:
        name = getattr(self._func, "__name__", type(self._func).__name__)
        return f"FunctionOracle(func={name}, threshold={self._threshold})"


__all__ = ["SimilarityOracle", "FunctionOracle"]
