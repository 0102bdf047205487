"""Utility helpers shared across distdedup modules."""

from .helpers import ensure_directory, normalize_whitespace
from .logging import configure_logging, get_logger, log_timing, logging_context
from .similarity import (
    compute_similarity,
    jaro_winkler_similarity,
    preprocess_for_similarity,
    token_jaccard_similarity,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "logging_context",
    "log_timing",
    "normalize_whitespace",
    "ensure_directory",
    "preprocess_for_similarity",
    "jaro_winkler_similarity",
    "token_jaccard_similarity",
    "compute_similarity",
]
