"""Repetition suppression: n-gram overlap across an agent's recent messages. No judge calls."""

from __future__ import annotations

from collections import Counter

from agent_judge.config.constants import (
    REPETITION_MAX_LISTED_NGRAMS,
    REPETITION_MESSAGE_COUNT,
    REPETITION_NGRAM_SIZE,
    REPETITION_THRESHOLD,
)
from agent_judge.models.domain import RepetitionCheckResult
from agent_judge.observability.logger import get_logger
from agent_judge.protocols.storage import MessageSource
from agent_judge.text.tokenizer import compute_corpus_repetition, extract_ngrams

logger = get_logger("repetition")


def detect_repetition(
    messages: list[str],
    threshold: float = REPETITION_THRESHOLD,
    n: int = REPETITION_NGRAM_SIZE,
) -> tuple[bool, float]:
    overlap = compute_corpus_repetition(messages, n)
    return overlap >= threshold, overlap


def find_repeated_ngrams(messages: list[str], n: int = REPETITION_NGRAM_SIZE) -> list[str]:
    """N-grams present in two or more messages, most frequent first."""
    frequency: Counter[str] = Counter()
    for message in messages:
        frequency.update(extract_ngrams(message, n))
    return [ngram for ngram, count in frequency.most_common() if count >= 2]


def build_repetition_context(messages: list[str], repeated_ngrams: list[str]) -> str:
    message_list = "\n".join(f'{i}. "{m}"' for i, m in enumerate(messages, 1))
    ngram_list = ", ".join(f'"{ng}"' for ng in repeated_ngrams[:REPETITION_MAX_LISTED_NGRAMS])
    return (
        f"### Recent Messages You've Sent\n{message_list}\n\n"
        "IMPORTANT: You've been repeating similar phrases. Vary your language, sentence "
        "structure, and conversation starters. Do not reuse the following phrases: "
        f"{ngram_list}"
    )


async def check_repetition_suppression(
    agent_id: str,
    message_source: MessageSource,
    threshold: float = REPETITION_THRESHOLD,
) -> RepetitionCheckResult:
    recent = await message_source.recent_agent_messages(agent_id, REPETITION_MESSAGE_COUNT)
    texts = [m.text for m in recent]

    if len(texts) < 2:
        logger.info("repetition_skipped", agent_id=agent_id, reason="insufficient_messages")
        return RepetitionCheckResult(
            detected=False, overlap_score=0.0, repeated_ngrams=[], context=None
        )

    detected, overlap = detect_repetition(texts, threshold)
    repeated = find_repeated_ngrams(texts) if detected else []
    context = build_repetition_context(texts, repeated) if detected else None

    logger.info(
        "repetition_checked",
        agent_id=agent_id,
        detected=detected,
        overlap_score=round(overlap, 4),
        repeated_ngram_count=len(repeated),
    )
    return RepetitionCheckResult(
        detected=detected, overlap_score=overlap, repeated_ngrams=repeated, context=context
    )
