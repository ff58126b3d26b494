"""Tests for word tokenization and n-gram overlap."""

import pytest

from agent_judge.text.tokenizer import (
    compute_corpus_repetition,
    extract_ngrams,
    jaccard,
    tokenize,
    tokenize_set,
)


def test_tokenize_lowercases_and_strips_punctuation():
    assert tokenize("Hello, World! It's me.") == ["hello", "world", "its", "me"]


def test_tokenize_empty():
    assert tokenize("") == []
    assert tokenize("   ") == []


def test_tokenize_set_dedupes():
    assert tokenize_set("beets beets BEETS") == {"beets"}


def test_jaccard():
    assert jaccard({"a", "b"}, {"b", "c"}) == pytest.approx(1 / 3)
    assert jaccard({"a"}, {"a"}) == 1.0
    assert jaccard({"a"}, {"b"}) == 0.0


def test_jaccard_both_empty_is_zero():
    assert jaccard(set(), set()) == 0.0


def test_extract_ngrams():
    assert extract_ngrams("one two three four", 3) == {"one two three", "two three four"}


def test_extract_ngrams_short_text():
    assert extract_ngrams("one two", 3) == set()


def test_corpus_repetition_identical_messages():
    msgs = ["bears beets battlestar galactica"] * 3
    assert compute_corpus_repetition(msgs, 3) == 1.0


def test_corpus_repetition_disjoint_messages():
    msgs = ["bears eat beets daily", "the office is closed today"]
    assert compute_corpus_repetition(msgs, 3) == 0.0


def test_corpus_repetition_single_message():
    assert compute_corpus_repetition(["only one message here"], 3) == 0.0


def test_corpus_repetition_averages_pairs():
    # pairs: (a,b)=1.0, (a,c)=0.0, (b,c)=0.0
    msgs = ["one two three", "one two three", "four five six"]
    assert compute_corpus_repetition(msgs, 3) == pytest.approx(1 / 3)
