"""Proposition scoring engine: LLM-judged 0-9 scores and boolean checks over trajectories."""

from __future__ import annotations

import time

from agent_judge.config.constants import BATCH_SIZE, HARD_MODE_FACTOR, MAX_SCORE, TRIVIALLY_TRUE_REASONING
from agent_judge.config.settings import Settings
from agent_judge.generation.prompt_templates import (
    BATCH_SCORE_PROMPT,
    CHECK_PROMPT,
    DOUBLE_CHECK_PROMPT,
    SCORE_PROMPT,
    build_judge_system_prompt,
    format_numbered_claims,
    format_trajectory,
)
from agent_judge.models.domain import (
    ZERO_USAGE,
    BatchScoreResult,
    CheckResult,
    JudgeResponse,
    Proposition,
    ScoreResult,
    ScoringContext,
    TokenUsage,
)
from agent_judge.models.schemas import BatchScoreResponse, CheckResponse, ScoreResponse
from agent_judge.observability.logger import get_logger
from agent_judge.protocols.judge import JudgeClient
from agent_judge.scoring.response_parser import (
    parse_batch_score_response,
    parse_check_response,
    parse_score_response,
)

logger = get_logger("proposition_engine")


def apply_inverted_score(raw_score: float, inverted: bool) -> float:
    return MAX_SCORE - raw_score if inverted else raw_score


def apply_hard_mode_penalty(score: float, hard: bool) -> float:
    if not hard or score >= MAX_SCORE:
        return score
    return score * HARD_MODE_FACTOR


def _precondition_blocks(proposition: Proposition, context: ScoringContext) -> bool:
    return proposition.precondition is not None and not proposition.precondition(context)


class PropositionEngine:
    def __init__(self, judge: JudgeClient, settings: Settings) -> None:
        self._judge = judge
        self._max_tokens = settings.judge_max_tokens
        self._temperature = settings.judge_temperature

    async def _call_judge(
        self, system: str, messages: list[dict[str, str]], schema
    ) -> JudgeResponse:
        return await self._judge.invoke(
            system,
            messages,
            schema,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )

    async def score(
        self,
        proposition: Proposition,
        context: ScoringContext,
        double_check: bool = False,
    ) -> ScoreResult:
        if _precondition_blocks(proposition, context):
            logger.info("precondition_skip", proposition_id=proposition.id, mode="score")
            return ScoreResult(
                score=MAX_SCORE,
                reasoning=TRIVIALLY_TRUE_REASONING,
                confidence=1.0,
                token_usage=ZERO_USAGE,
            )

        start = time.monotonic()
        system = build_judge_system_prompt(context.persona)
        user = SCORE_PROMPT.format(
            claim=proposition.claim, trajectory=format_trajectory(context.trajectory)
        )
        messages = [{"role": "user", "content": user}]

        response = await self._call_judge(system, messages, ScoreResponse)
        score, reasoning, confidence = parse_score_response(response.text)
        usage = response.token_usage

        if double_check:
            revision = await self._call_judge(
                system,
                messages
                + [
                    {"role": "assistant", "content": response.text},
                    {"role": "user", "content": DOUBLE_CHECK_PROMPT},
                ],
                ScoreResponse,
            )
            original_score = score
            score, reasoning, confidence = parse_score_response(revision.text)
            usage = usage + revision.token_usage
            logger.info(
                "double_check_revision",
                proposition_id=proposition.id,
                original_score=original_score,
                revised_score=score,
            )

        logger.info(
            "proposition_scored",
            proposition_id=proposition.id,
            score=score,
            confidence=round(confidence, 4),
            duration_ms=round((time.monotonic() - start) * 1000, 2),
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
        )
        return ScoreResult(
            score=score, reasoning=reasoning, confidence=confidence, token_usage=usage
        )

    async def check(self, proposition: Proposition, context: ScoringContext) -> CheckResult:
        if _precondition_blocks(proposition, context):
            logger.info("precondition_skip", proposition_id=proposition.id, mode="check")
            return CheckResult(
                result=True,
                reasoning=TRIVIALLY_TRUE_REASONING,
                confidence=1.0,
                token_usage=ZERO_USAGE,
            )

        system = build_judge_system_prompt(context.persona)
        user = CHECK_PROMPT.format(
            claim=proposition.claim, trajectory=format_trajectory(context.trajectory)
        )
        response = await self._call_judge(
            system, [{"role": "user", "content": user}], CheckResponse
        )
        result, reasoning, confidence = parse_check_response(response.text)

        logger.info(
            "proposition_checked",
            proposition_id=proposition.id,
            result=result,
            confidence=round(confidence, 4),
        )
        return CheckResult(
            result=result,
            reasoning=reasoning,
            confidence=confidence,
            token_usage=response.token_usage,
        )

    async def score_batch(
        self, propositions: list[Proposition], context: ScoringContext
    ) -> BatchScoreResult:
        """Score propositions in chunks of BATCH_SIZE, one judge call per chunk."""
        chunks = [
            propositions[i : i + BATCH_SIZE]
            for i in range(0, len(propositions), BATCH_SIZE)
        ]
        logger.info(
            "batch_start", proposition_count=len(propositions), batch_count=len(chunks)
        )

        system = build_judge_system_prompt(context.persona)
        trajectory = format_trajectory(context.trajectory)
        results: list[ScoreResult] = []
        usage = TokenUsage()

        for chunk in chunks:
            user = BATCH_SCORE_PROMPT.format(
                numbered_claims=format_numbered_claims([p.claim for p in chunk]),
                trajectory=trajectory,
            )
            response = await self._call_judge(
                system, [{"role": "user", "content": user}], BatchScoreResponse
            )
            for score, reasoning, confidence in parse_batch_score_response(
                response.text, len(chunk)
            ):
                results.append(
                    ScoreResult(score=score, reasoning=reasoning, confidence=confidence)
                )
            usage = usage + response.token_usage

        logger.info(
            "batch_complete",
            proposition_count=len(propositions),
            batch_count=len(chunks),
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
        )
        return BatchScoreResult(results=results, token_usage=usage)
