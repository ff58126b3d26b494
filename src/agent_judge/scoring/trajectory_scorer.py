"""Run-level dimension scoring over an agent's message history."""

from __future__ import annotations

from agent_judge.config.constants import MAX_SCORE
from agent_judge.exceptions import ConfigurationError
from agent_judge.models.domain import (
    ZERO_USAGE,
    DimensionScoreResult,
    Proposition,
    PropositionScore,
    ScoringContext,
    TrajectoryEntry,
)
from agent_judge.observability.logger import get_logger
from agent_judge.protocols.storage import EvaluationRunStore
from agent_judge.scoring.proposition_engine import (
    PropositionEngine,
    apply_hard_mode_penalty,
    apply_inverted_score,
)
from agent_judge.scoring.proposition_loader import PropositionLoader
from agent_judge.text.tokenizer import compute_corpus_repetition

logger = get_logger("trajectory_scorer")


def ngram_evidence(messages: list[str]) -> dict[str, float]:
    return {
        "trigram": compute_corpus_repetition(messages, 3),
        "fivegram": compute_corpus_repetition(messages, 5),
    }


class TrajectoryScorer:
    def __init__(
        self,
        engine: PropositionEngine,
        run_store: EvaluationRunStore,
        loader: PropositionLoader | None = None,
    ) -> None:
        self._engine = engine
        self._runs = run_store
        self._loader = loader

    async def score_from_files(
        self,
        agent_id: str,
        agent_name: str,
        dimension: str,
        messages: list[str],
        persona: str | None = None,
    ) -> DimensionScoreResult:
        """Score with the dimension's proposition files and their window and flags."""
        if self._loader is None:
            raise ConfigurationError("No proposition loader configured")
        prop_file = self._loader.load_for_dimension(
            dimension, agent_id, variables={"agent_name": agent_name}
        )
        return await self.score_dimension(
            agent_id,
            agent_name,
            dimension,
            prop_file.propositions,
            prop_file.window(messages),
            persona=persona if prop_file.include_personas else None,
            hard=prop_file.hard,
        )

    async def score_dimension(
        self,
        agent_id: str,
        agent_name: str,
        dimension: str,
        propositions: list[Proposition],
        messages: list[str],
        persona: str | None = None,
        hard: bool = False,
    ) -> DimensionScoreResult:
        run = await self._runs.create_run(agent_id, [dimension])
        logger.info(
            "dimension_scoring_start",
            agent_id=agent_id,
            run_id=run.run_id,
            dimension=dimension,
            sample_size=len(messages),
        )
        try:
            return await self._score(
                run.run_id, agent_name, dimension, propositions, messages, persona, hard
            )
        except Exception as e:
            logger.error(
                "dimension_scoring_failed",
                agent_id=agent_id,
                run_id=run.run_id,
                dimension=dimension,
                error=str(e),
            )
            await self._runs.update_status(run.run_id, "failed")
            raise

    async def _score(
        self,
        run_id: str,
        agent_name: str,
        dimension: str,
        propositions: list[Proposition],
        messages: list[str],
        persona: str | None,
        hard: bool,
    ) -> DimensionScoreResult:
        if not messages:
            await self._runs.update_status(
                run_id, "completed", overall_score=MAX_SCORE, token_usage=ZERO_USAGE
            )
            return DimensionScoreResult(
                evaluation_run_id=run_id,
                dimension=dimension,
                overall_score=MAX_SCORE,
                proposition_scores=[],
                sample_size=0,
                token_usage=ZERO_USAGE,
            )

        trajectory = [
            TrajectoryEntry(kind="action", agent_name=agent_name, text=m) for m in messages
        ]
        ngram_stats = None
        if dimension == "fluency":
            ngram_stats = ngram_evidence(messages)
            trajectory.append(
                TrajectoryEntry(
                    kind="stimulus",
                    agent_name=agent_name,
                    text=(
                        "[Supplementary Evidence] N-gram repetition analysis: "
                        f"3-gram repetition: {ngram_stats['trigram']:.2f}, "
                        f"5-gram repetition: {ngram_stats['fivegram']:.2f}"
                    ),
                )
            )

        batch = await self._engine.score_batch(
            propositions, ScoringContext(trajectory=trajectory, persona=persona)
        )

        scores: list[PropositionScore] = []
        weighted_sum = 0.0
        weight_sum = 0.0
        for proposition, result in zip(propositions, batch.results):
            final = apply_hard_mode_penalty(
                apply_inverted_score(result.score, proposition.inverted), hard
            )
            scores.append(
                PropositionScore(
                    proposition_id=proposition.id,
                    score=final,
                    reasoning=result.reasoning,
                    recommendation=(
                        proposition.recommendation if final < MAX_SCORE else None
                    ),
                )
            )
            await self._runs.record_score(
                run_id, dimension, proposition.id, final, result.reasoning
            )
            weighted_sum += final * proposition.weight
            weight_sum += proposition.weight

        overall = weighted_sum / weight_sum if weight_sum > 0 else float(MAX_SCORE)

        await self._runs.update_status(
            run_id,
            "completed",
            overall_score=overall,
            token_usage=batch.token_usage,
            sample_size=len(messages),
        )
        logger.info(
            "dimension_scoring_complete",
            run_id=run_id,
            dimension=dimension,
            overall_score=round(overall, 4),
            sample_size=len(messages),
        )
        return DimensionScoreResult(
            evaluation_run_id=run_id,
            dimension=dimension,
            overall_score=overall,
            proposition_scores=scores,
            sample_size=len(messages),
            token_usage=batch.token_usage,
            ngram_stats=ngram_stats,
        )
