"""Word tokenization and n-gram overlap for similarity and repetition checks."""

from __future__ import annotations

import re
from itertools import combinations

_PUNCT = re.compile(r"[^\w\s]")


def tokenize(text: str) -> list[str]:
    """Lowercase, strip punctuation, split on whitespace."""
    return _PUNCT.sub("", text.lower()).split()


def tokenize_set(text: str) -> set[str]:
    return set(tokenize(text))


def jaccard(a: set[str], b: set[str]) -> float:
    """|a & b| / |a | b|, defined as 0.0 when both sets are empty."""
    if not a and not b:
        return 0.0
    return len(a & b) / len(a | b)


def extract_ngrams(text: str, n: int) -> set[str]:
    tokens = tokenize(text)
    if len(tokens) < n:
        return set()
    return {" ".join(tokens[i : i + n]) for i in range(len(tokens) - n + 1)}


def compute_corpus_repetition(messages: list[str], n: int) -> float:
    """Average pairwise n-gram Jaccard overlap; 0.0 for fewer than two messages."""
    if len(messages) < 2:
        return 0.0
    ngram_sets = [extract_ngrams(m, n) for m in messages]
    overlaps = [jaccard(a, b) for a, b in combinations(ngram_sets, 2)]
    return sum(overlaps) / len(overlaps)
