"""Multi-dimension quality gate for a single proposed agent action."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from agent_judge.config.constants import OTHER_SPEAKER
from agent_judge.models.domain import (
    ALL_DIMENSIONS,
    DimensionResult,
    GateResult,
    Proposition,
    QualityDimension,
    ScoringContext,
    TokenUsage,
    TrajectoryEntry,
)
from agent_judge.models.schemas import GateConfig
from agent_judge.observability.logger import get_logger
from agent_judge.gates.similarity import compute_action_similarity
from agent_judge.scoring.proposition_engine import PropositionEngine

logger = get_logger("quality_gate")


@dataclass(frozen=True)
class DimensionSpec:
    proposition: Proposition
    include_persona: bool


DIMENSION_SPECS: dict[QualityDimension, DimensionSpec] = {
    "persona_adherence": DimensionSpec(
        Proposition(
            id="gate-persona-adherence",
            claim=(
                "The agent's next action adheres to the agent's persona specification: "
                "personality traits, style, beliefs, behaviors, and skills"
            ),
            recommendation=(
                "Rewrite to better match your character's personality traits, "
                "speech patterns, and behaviors."
            ),
        ),
        include_persona=True,
    ),
    "self_consistency": DimensionSpec(
        Proposition(
            id="gate-self-consistency",
            claim=(
                "The agent's next action is self-consistent: it does not contradict the "
                "agent's previous actions in this conversation. Ignore the agent's persona; "
                "self-consistency concerns ONLY the actions observed."
            ),
            recommendation=(
                "Ensure your message does not contradict your previous statements "
                "in this conversation."
            ),
        ),
        include_persona=False,
    ),
    "fluency": DimensionSpec(
        Proposition(
            id="gate-fluency",
            claim=(
                "The agent's next action is fluent: it is natural and human-like, avoids "
                "repetition of thoughts or words, and avoids formulaic language patterns"
            ),
            recommendation=(
                "Use natural, varied language. Avoid repeating phrases or using "
                "formulaic patterns."
            ),
        ),
        include_persona=False,
    ),
    "suitability": DimensionSpec(
        Proposition(
            id="gate-suitability",
            claim=(
                "The agent's next action is suitable: it is a reasonable step toward a goal, "
                "produces relevant information, OR is a reasonable response to incoming "
                "stimuli. Meeting ANY ONE of these conditions means FULLY suitable."
            ),
            recommendation=(
                "Make your message a reasonable response to the conversation or a "
                "productive step toward a goal."
            ),
        ),
        include_persona=True,
    ),
}


def build_action_trajectory(
    agent_name: str, text: str, conversation_context: list[str]
) -> list[TrajectoryEntry]:
    entries = [
        TrajectoryEntry(kind="stimulus", agent_name=OTHER_SPEAKER, text=snippet)
        for snippet in conversation_context
    ]
    entries.append(TrajectoryEntry(kind="action", agent_name=agent_name, text=text))
    return entries


class QualityGate:
    def __init__(self, engine: PropositionEngine) -> None:
        self._engine = engine

    async def _score_dimension(
        self,
        dimension: QualityDimension,
        threshold: int,
        trajectory: list[TrajectoryEntry],
        persona: str | None,
    ) -> tuple[DimensionResult, TokenUsage]:
        spec = DIMENSION_SPECS[dimension]
        context = ScoringContext(
            trajectory=trajectory,
            persona=persona if spec.include_persona else None,
        )
        result = await self._engine.score(spec.proposition, context)
        return (
            DimensionResult(
                dimension=dimension,
                score=result.score,
                reasoning=result.reasoning,
                passed=result.score >= threshold,
                threshold=threshold,
            ),
            result.token_usage,
        )

    async def check(
        self,
        agent_id: str,
        text: str,
        conversation_context: list[str],
        config: GateConfig | None = None,
        agent_name: str | None = None,
        persona: str | None = None,
        recent_messages: list[str] | None = None,
    ) -> GateResult:
        config = config or GateConfig()
        enabled = [d for d in ALL_DIMENSIONS if config.dimension(d).enabled]
        similarity_enabled = config.similarity.enabled

        if not enabled and not similarity_enabled:
            logger.debug("gate_noop", agent_id=agent_id)
            return GateResult.trivial_pass()

        trajectory = build_action_trajectory(
            agent_name or agent_id, text, conversation_context
        )
        logger.info(
            "gate_check_start",
            agent_id=agent_id,
            dimensions=enabled,
            similarity_enabled=similarity_enabled,
        )

        # Siblings run to completion even when one dimension raises
        outcomes = await asyncio.gather(
            *(
                self._score_dimension(
                    d, config.dimension(d).threshold, trajectory, persona
                )
                for d in enabled
            ),
            return_exceptions=True,
        )
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                logger.error("gate_dimension_failed", agent_id=agent_id, error=str(outcome))
                raise outcome

        dimension_results = [result for result, _ in outcomes]
        usage = TokenUsage()
        for _, dimension_usage in outcomes:
            usage = usage + dimension_usage

        similarity_result = None
        if similarity_enabled:
            similarity_result = compute_action_similarity(
                text, recent_messages or [], config.similarity.threshold
            )

        passed = all(r.passed for r in dimension_results) and (
            similarity_result is None or similarity_result.passed
        )
        total_score = sum(r.score for r in dimension_results)

        logger.info(
            "gate_check_complete",
            agent_id=agent_id,
            passed=passed,
            total_score=total_score,
            failed=[r.dimension for r in dimension_results if not r.passed],
            similarity=round(similarity_result.score, 4) if similarity_result else None,
        )
        return GateResult(
            passed=passed,
            dimension_results=dimension_results,
            similarity_result=similarity_result,
            total_score=total_score,
            token_usage=usage,
        )
