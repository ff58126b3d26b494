"""Precondition evaluators: functional (pure), textual (judge check), propositional (judge score)."""

from __future__ import annotations

from collections.abc import Callable
from uuid import uuid4

from agent_judge.models.domain import (
    InterventionTarget,
    PreconditionResult,
    Proposition,
    ScoringContext,
)
from agent_judge.observability.logger import get_logger
from agent_judge.scoring.proposition_engine import PropositionEngine

logger = get_logger("preconditions")

FunctionalPrecondition = Callable[[list[InterventionTarget]], bool]


def evaluate_functional(
    fn: FunctionalPrecondition, targets: list[InterventionTarget]
) -> PreconditionResult:
    passed = bool(fn(targets))
    logger.debug("precondition_functional", passed=passed)
    return PreconditionResult(kind="functional", passed=passed)


async def evaluate_textual(
    engine: PropositionEngine, claim: str, context: ScoringContext
) -> PreconditionResult:
    proposition = Proposition(id=f"textual-precondition-{uuid4().hex[:8]}", claim=claim)
    result = await engine.check(proposition, context)
    logger.info("precondition_textual", claim=claim[:80], passed=result.result)
    return PreconditionResult(
        kind="textual",
        passed=result.result,
        reasoning=result.reasoning,
        token_usage=result.token_usage,
    )


async def evaluate_propositional(
    engine: PropositionEngine,
    proposition: Proposition,
    context: ScoringContext,
    threshold: int | None = None,
) -> PreconditionResult:
    """With a threshold the precondition holds while the score stays below it.

    A high score means the desired condition is already met, so no
    intervention is needed. Without a threshold the proposition is checked.
    """
    if threshold is not None:
        result = await engine.score(proposition, context)
        passed = result.score < threshold
        logger.info(
            "precondition_propositional_scored",
            proposition_id=proposition.id,
            score=result.score,
            threshold=threshold,
            passed=passed,
        )
        return PreconditionResult(
            kind="propositional",
            passed=passed,
            reasoning=result.reasoning,
            score=result.score,
            token_usage=result.token_usage,
        )

    result = await engine.check(proposition, context)
    logger.info(
        "precondition_propositional_checked",
        proposition_id=proposition.id,
        passed=result.result,
    )
    return PreconditionResult(
        kind="propositional",
        passed=result.result,
        reasoning=result.reasoning,
        token_usage=result.token_usage,
    )
