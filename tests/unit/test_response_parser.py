"""Tests for judge payload parsing and normalization."""

import json

import pytest

from agent_judge.exceptions import BatchLengthMismatch, JudgeResponseError
from agent_judge.scoring.response_parser import (
    normalize_confidence,
    normalize_score,
    parse_batch_score_response,
    parse_check_response,
    parse_score_response,
)


@pytest.mark.parametrize(
    "raw,expected",
    [(15, 9), (-3, 0), (6.7, 7), (6.3, 6), (6.5, 7), (0, 0), (9, 9)],
)
def test_normalize_score_rounds_and_clamps(raw, expected):
    assert normalize_score(raw) == expected


def test_normalize_confidence():
    assert normalize_confidence(1.5) == 1.0
    assert normalize_confidence(-0.3) == 0.0
    assert normalize_confidence(None) == 0.5
    assert normalize_confidence("high") == 0.5
    assert normalize_confidence(True) == 0.5
    assert normalize_confidence(0.42) == 0.42


def test_parse_score_direct_json():
    score, reasoning, confidence = parse_score_response(
        json.dumps({"score": 6.7, "reasoning": "mostly true", "confidence": 0.8})
    )
    assert score == 7
    assert reasoning == "mostly true"
    assert confidence == 0.8


def test_parse_score_missing_confidence_defaults():
    score, reasoning, confidence = parse_score_response('{"score": 4}')
    assert score == 4
    assert reasoning == ""
    assert confidence == 0.5


def test_parse_score_extracts_from_prose():
    raw = 'Sure! Here is my evaluation: {"score": 3, "reasoning": "weak", "confidence": 0.7} Hope it helps.'
    score, reasoning, _ = parse_score_response(raw)
    assert score == 3
    assert reasoning == "weak"


def test_parse_score_skips_unbalanced_brace_before_payload():
    raw = 'Note {this is not json. {"score": 8, "reasoning": "good"}'
    score, _, _ = parse_score_response(raw)
    assert score == 8


def test_parse_score_unparseable_raises_with_excerpt():
    raw = "no json here " * 40
    with pytest.raises(JudgeResponseError) as exc_info:
        parse_score_response(raw)
    assert exc_info.value.raw_excerpt == raw[:200]


def test_parse_score_non_numeric_score_raises():
    with pytest.raises(JudgeResponseError):
        parse_score_response('{"score": "seven", "reasoning": "x"}')


def test_parse_score_missing_score_raises():
    with pytest.raises(JudgeResponseError):
        parse_score_response('{"reasoning": "x"}')


def test_parse_check_response():
    result, reasoning, confidence = parse_check_response(
        '{"result": false, "reasoning": "nope", "confidence": 2}'
    )
    assert result is False
    assert reasoning == "nope"
    assert confidence == 1.0


@pytest.mark.parametrize("payload", ['{"result": "yes"}', '{"result": 1}', '{"reasoning": "x"}'])
def test_parse_check_non_boolean_result_raises(payload):
    with pytest.raises(JudgeResponseError):
        parse_check_response(payload)


def test_parse_batch_plain_array():
    raw = json.dumps([{"score": 9, "reasoning": "a"}, {"score": 1.2, "reasoning": "b"}])
    results = parse_batch_score_response(raw, 2)
    assert [r[0] for r in results] == [9, 1]


def test_parse_batch_results_envelope():
    raw = json.dumps({"results": [{"score": 5, "reasoning": "a", "confidence": 0.6}]})
    results = parse_batch_score_response(raw, 1)
    assert results == [(5, "a", 0.6)]


def test_parse_batch_array_embedded_in_prose():
    raw = 'Results:\n[{"score": 2, "reasoning": "x"}, {"score": 3, "reasoning": "y"}]\nDone.'
    results = parse_batch_score_response(raw, 2)
    assert [r[0] for r in results] == [2, 3]


def test_parse_batch_length_mismatch():
    raw = json.dumps([{"score": 9, "reasoning": "a"}])
    with pytest.raises(BatchLengthMismatch) as exc_info:
        parse_batch_score_response(raw, 3)
    assert exc_info.value.expected == 3
    assert exc_info.value.actual == 1
    assert "expected 3, got 1" in str(exc_info.value)


def test_parse_batch_not_an_array():
    with pytest.raises(JudgeResponseError):
        parse_batch_score_response('{"score": 3}', 1)


def test_parse_batch_bad_item_reports_index():
    raw = json.dumps([{"score": 9}, {"score": None}])
    with pytest.raises(JudgeResponseError, match="index 1"):
        parse_batch_score_response(raw, 2)


HUGE = "1" + "0" * 400


def test_parse_score_huge_confidence_clamps():
    score, _, confidence = parse_score_response(
        '{"score": 5, "reasoning": "x", "confidence": ' + HUGE + "}"
    )
    assert score == 5
    assert confidence == 1.0


@pytest.mark.parametrize("sign,expected", [("", 9), ("-", 0)])
def test_parse_score_huge_integer_clamps(sign, expected):
    score, _, _ = parse_score_response('{"score": ' + sign + HUGE + ', "reasoning": "x"}')
    assert score == expected


def test_parse_batch_huge_values_clamp():
    raw = '[{"score": ' + HUGE + ', "confidence": -' + HUGE + "}]"
    assert parse_batch_score_response(raw, 1) == [(9, "", 0.0)]


def test_parse_check_huge_confidence_clamps():
    _, _, confidence = parse_check_response('{"result": true, "confidence": ' + HUGE + "}")
    assert confidence == 1.0


def test_parse_score_infinite_float_raises():
    with pytest.raises(JudgeResponseError):
        parse_score_response('{"score": 1e400, "reasoning": "x"}')
