"""Defensive parsing of judge payloads.

The judge is asked for strict JSON, but its output is still treated as
untrusted. Every response shape (score, check, batch) goes through
``decode_payload``: direct decode, then extraction of the first JSON
array/object embedded in surrounding prose, then a hard failure carrying a
truncated excerpt of the raw text.
"""

from __future__ import annotations

import json
import math

from agent_judge.config.constants import (
    DEFAULT_CONFIDENCE,
    MAX_SCORE,
    MIN_SCORE,
    RAW_EXCERPT_CHARS,
)
from agent_judge.exceptions import BatchLengthMismatch, JudgeResponseError
from agent_judge.observability.logger import get_logger

logger = get_logger("response_parser")

_decoder = json.JSONDecoder()


def _excerpt(raw: str) -> str:
    return raw[:RAW_EXCERPT_CHARS]


def _extract_embedded_json(raw: str):
    """Return the first value decodable from a '[' or '{' position, or raise ValueError."""
    for i, ch in enumerate(raw):
        if ch not in "[{":
            continue
        try:
            value, _ = _decoder.raw_decode(raw, i)
        except ValueError:
            continue
        return value
    raise ValueError("no embedded JSON found")


def decode_payload(raw: str, kind: str):
    try:
        return json.loads(raw)
    # ValueError also covers integers past the interpreter's digit limit
    except (ValueError, TypeError):
        pass

    try:
        value = _extract_embedded_json(raw)
    except ValueError:
        logger.error("judge_response_parse_failed", kind=kind, raw=_excerpt(raw))
        raise JudgeResponseError(
            f"Failed to parse {kind} response: {_excerpt(raw)}", _excerpt(raw)
        ) from None

    logger.warning("judge_response_extracted", kind=kind, raw=_excerpt(raw))
    return value


def _is_number(value) -> bool:
    if isinstance(value, bool):
        return False
    # JSON integers are unbounded; only floats can be inf or nan
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def normalize_score(value: float) -> int:
    """Round half up to the nearest integer, then clamp to the 0-9 scale."""
    if isinstance(value, int):
        return int(clamp(value, MIN_SCORE, MAX_SCORE))
    return int(clamp(math.floor(value + 0.5), MIN_SCORE, MAX_SCORE))


def normalize_confidence(value) -> float:
    if not _is_number(value):
        return DEFAULT_CONFIDENCE
    return float(clamp(value, 0.0, 1.0))


def normalize_reasoning(value) -> str:
    return value if isinstance(value, str) else ""


def _score_fields(obj, raw: str, where: str = "") -> tuple[int, str, float]:
    if not isinstance(obj, dict):
        raise JudgeResponseError(
            f"Invalid score response structure{where}: {_excerpt(raw)}", _excerpt(raw)
        )
    score = obj.get("score")
    if not _is_number(score):
        logger.error("judge_response_invalid_score", score=repr(score), raw=_excerpt(raw))
        raise JudgeResponseError(
            f"Invalid score{where}: {score!r}", _excerpt(raw)
        )
    return (
        normalize_score(score),
        normalize_reasoning(obj.get("reasoning")),
        normalize_confidence(obj.get("confidence")),
    )


def parse_score_response(raw: str) -> tuple[int, str, float]:
    """Return (score, reasoning, confidence) from a single-score payload."""
    return _score_fields(decode_payload(raw, "score"), raw)


def parse_check_response(raw: str) -> tuple[bool, str, float]:
    """Return (result, reasoning, confidence); a non-boolean result is a protocol error."""
    obj = decode_payload(raw, "check")
    if not isinstance(obj, dict):
        raise JudgeResponseError(
            f"Invalid check response structure: {_excerpt(raw)}", _excerpt(raw)
        )
    result = obj.get("result")
    if not isinstance(result, bool):
        logger.error("judge_response_invalid_check", result=repr(result), raw=_excerpt(raw))
        raise JudgeResponseError(f"Invalid check result type: {result!r}", _excerpt(raw))
    return (
        result,
        normalize_reasoning(obj.get("reasoning")),
        normalize_confidence(obj.get("confidence")),
    )


def parse_batch_score_response(raw: str, count: int) -> list[tuple[int, str, float]]:
    """Parse a JSON array (or {"results": [...]}) holding exactly ``count`` scores."""
    parsed = decode_payload(raw, "batch")

    if isinstance(parsed, dict) and "results" in parsed:
        parsed = parsed["results"]

    if not isinstance(parsed, list):
        logger.error("judge_response_not_array", raw=_excerpt(raw))
        raise JudgeResponseError(
            f"Batch response is not an array: {_excerpt(raw)}", _excerpt(raw)
        )

    if len(parsed) != count:
        logger.error(
            "judge_response_count_mismatch", expected=count, actual=len(parsed)
        )
        raise BatchLengthMismatch(count, len(parsed), _excerpt(raw))

    return [
        _score_fields(item, raw, where=f" at index {index}")
        for index, item in enumerate(parsed)
    ]
