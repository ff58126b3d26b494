"""Tests for n-gram repetition suppression."""

import pytest

from agent_judge.interventions.repetition import (
    build_repetition_context,
    check_repetition_suppression,
    detect_repetition,
    find_repeated_ngrams,
)
from agent_judge.models.domain import ChannelMessage
from fakes import StaticMessageSource

REPEATED = [
    "that's what she said, everybody",
    "well well, that's what she said",
    "that's what she said again",
]


def test_detect_repetition_above_threshold():
    detected, overlap = detect_repetition(["a b c d"] * 3)
    assert detected is True
    assert overlap == 1.0


def test_detect_repetition_below_threshold():
    detected, overlap = detect_repetition(["the quarterly numbers look good", "who wants pretzels today"])
    assert detected is False
    assert overlap == 0.0


def test_detect_repetition_threshold_is_inclusive():
    detected, _ = detect_repetition(["a b c", "a b c"], threshold=1.0)
    assert detected is True


def test_find_repeated_ngrams():
    ngrams = find_repeated_ngrams(REPEATED)
    assert ngrams[0] in {"thats what she", "what she said"}
    assert set(ngrams[:2]) == {"thats what she", "what she said"}
    assert "said again" not in " ".join(ngrams)


def test_build_repetition_context_caps_listed_ngrams():
    ngrams = [f"gram number {i}" for i in range(15)]
    text = build_repetition_context(["first", "second"], ngrams)
    assert '1. "first"' in text
    assert '2. "second"' in text
    assert '"gram number 9"' in text
    assert '"gram number 10"' not in text


async def test_check_detects_repetition():
    source = StaticMessageSource([ChannelMessage(user_id="michael", text=t) for t in REPEATED])
    result = await check_repetition_suppression("michael", source)

    assert result.detected is True
    assert result.overlap_score >= 0.3
    assert "what she said" in result.repeated_ngrams
    assert "Vary your language" in result.context
    assert source.requested_limits == [5]


async def test_check_clean_history():
    source = StaticMessageSource([
        ChannelMessage(user_id="oscar", text="the budget is off by three percent"),
        ChannelMessage(user_id="oscar", text="has anyone seen my reading glasses"),
    ])
    result = await check_repetition_suppression("oscar", source)
    assert result.detected is False
    assert result.repeated_ngrams == []
    assert result.context is None


@pytest.mark.parametrize("count", [0, 1])
async def test_check_skips_with_too_few_messages(count):
    source = StaticMessageSource([ChannelMessage(user_id="kevin", text="chili") for _ in range(count)])
    result = await check_repetition_suppression("kevin", source)
    assert result.detected is False
    assert result.overlap_score == 0.0
    assert result.context is None
