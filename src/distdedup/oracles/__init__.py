"""Similarity oracles: the interface and reference implementations."""

from .base import FunctionOracle, SimilarityOracle
from .fields import FieldSimilarityOracle

__all__ = ["SimilarityOracle", "FunctionOracle", "FieldSimilarityOracle"]
