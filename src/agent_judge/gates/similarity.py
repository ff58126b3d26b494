"""Action similarity: LLM-free near-duplicate detection against recent messages."""

from __future__ import annotations

from agent_judge.models.domain import SimilarityResult
from agent_judge.text.tokenizer import jaccard, tokenize_set


def compute_action_similarity(
    proposed_text: str,
    recent_messages: list[str],
    threshold: float = 0.6,
) -> SimilarityResult:
    """Max Jaccard word-set similarity of the proposal against each candidate.

    Passes when the maximum does not exceed ``threshold``. The first candidate
    reaching the maximum is reported as ``most_similar_message``.
    """
    if not recent_messages:
        return SimilarityResult(score=0.0, passed=True, threshold=threshold)

    proposed = tokenize_set(proposed_text)
    best = 0.0
    best_message: str | None = None
    for message in recent_messages:
        similarity = jaccard(proposed, tokenize_set(message))
        if similarity > best:
            best = similarity
            best_message = message

    return SimilarityResult(
        score=best,
        passed=best <= threshold,
        threshold=threshold,
        most_similar_message=best_message,
    )
