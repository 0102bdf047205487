"""String similarity helpers backing the reference similarity oracle."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Callable, Dict, Tuple

import jellyfish

from .helpers import normalize_whitespace


_NON_WORD_RE = re.compile(r"[^\w\s]+", re.UNICODE)

# Cache sizes balance reuse against memory (roughly a few MiB per cache at these limits).
_PREPROCESS_CACHE_SIZE = 4096
_TOKENIZE_CACHE_SIZE = 4096
_JW_CACHE_SIZE = 16384


def _ordered_pair(text1: str, text2: str) -> Tuple[str, str]:
    """Return a deterministic ordering of two strings for cache keys."""

    return (text1, text2) if text1 <= text2 else (text2, text1)


@lru_cache(maxsize=_PREPROCESS_CACHE_SIZE)
def preprocess_for_similarity(text: str) -> str:
    """Normalize text for similarity calculations."""

    if not text:
        return ""
    lowered = normalize_whitespace(text).lower()
    stripped = _NON_WORD_RE.sub(" ", lowered)
    return " ".join(stripped.split())


@lru_cache(maxsize=_TOKENIZE_CACHE_SIZE)
def _tokenize(text: str) -> Tuple[str, ...]:
    """Tokenize preprocessed text and cache the result."""

    normalized = preprocess_for_similarity(text)
    if not normalized:
        return tuple()
    return tuple(normalized.split())


def token_jaccard_similarity(text1: str, text2: str) -> float:
    """Compute Jaccard similarity over token sets with preprocessing."""

    tokens_a = set(_tokenize(text1))
    tokens_b = set(_tokenize(text2))
    if not tokens_a and not tokens_b:
        return 1.0
    if not tokens_a or not tokens_b:
        return 0.0
    return len(tokens_a & tokens_b) / len(tokens_a | tokens_b)


@lru_cache(maxsize=_JW_CACHE_SIZE)
def _jaro_winkler_cached(text1: str, text2: str) -> float:
    return jellyfish.jaro_winkler_similarity(text1, text2)


def jaro_winkler_similarity(text1: str, text2: str) -> float:
    """Compute the Jaro-Winkler similarity between two strings."""

    normalized_1 = preprocess_for_similarity(text1)
    normalized_2 = preprocess_for_similarity(text2)
    if not normalized_1 and not normalized_2:
        return 1.0
    if not normalized_1 or not normalized_2:
        return 0.0
    ordered_1, ordered_2 = _ordered_pair(normalized_1, normalized_2)
    return _jaro_winkler_cached(ordered_1, ordered_2)


_METHODS: Dict[str, Callable[[str, str], float]] = {
    "jaro_winkler": jaro_winkler_similarity,
    "token_jaccard": token_jaccard_similarity,
}


def compute_similarity(text1: str, text2: str, *, method: str = "jaro_winkler") -> float:
    """Dispatch similarity computation based on the configured method."""

    try:
        handler = _METHODS[method.lower()]
    except KeyError:
        raise ValueError(f"Unsupported similarity method: {method}") from None
    return handler(text1, text2)


__all__ = [
    "preprocess_for_similarity",
    "token_jaccard_similarity",
    "jaro_winkler_similarity",
    "compute_similarity",
]
