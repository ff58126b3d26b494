"""Correction pipeline: gate, then regeneration, then direct correction, then forced-through."""

from __future__ import annotations

from dataclasses import asdict

from agent_judge.config.settings import Settings
from agent_judge.gates.direct_correction import DirectCorrector
from agent_judge.gates.pipeline_state import PipelineStateStore
from agent_judge.gates.quality_gate import DIMENSION_SPECS, QualityGate
from agent_judge.models.domain import (
    CorrectionAttempt,
    CorrectionLog,
    CorrectionOutcome,
    CorrectionPipelineResult,
    FailedDimension,
    GateResult,
    QualityDimension,
    RegenerationFeedback,
)
from agent_judge.models.schemas import (
    CorrectionPipelineConfig,
    FailedDimensionPayload,
    QualityCheckFailedMessage,
)
from agent_judge.observability.logger import get_logger
from agent_judge.observability.tracing import TraceContext
from agent_judge.protocols.storage import CorrectionLogWriter

logger = get_logger("correction_pipeline")

ESCALATION_CLAUSE = (
    "\n\nIMPORTANT: Your previous attempts also failed quality checks. You MUST be "
    "MORE RADICAL in your changes and produce something VERY different from previous "
    "attempts. It is better to stop acting than to act poorly."
)

STANDALONE_RUN_ID = "standalone"


def build_recommendation(dimension: QualityDimension, reasoning: str) -> str:
    rule = DIMENSION_SPECS[dimension].proposition.recommendation
    return f"{rule} (Issue: {reasoning})"


def failed_dimensions_from(gate_result: GateResult) -> list[FailedDimension]:
    return [
        FailedDimension(
            dimension=d.dimension,
            score=d.score,
            threshold=d.threshold,
            reasoning=d.reasoning,
            recommendation=build_recommendation(d.dimension, d.reasoning),
        )
        for d in gate_result.failed_dimensions
    ]


def build_regeneration_feedback(
    text: str, gate_result: GateResult, attempt_number: int, max_attempts: int
) -> RegenerationFeedback:
    return RegenerationFeedback(
        tentative_action=text,
        failed_dimensions=failed_dimensions_from(gate_result),
        attempt_number=attempt_number,
        max_attempts=max_attempts,
    )


def format_feedback_for_agent(feedback: RegenerationFeedback) -> str:
    """JSON envelope handed back to the acting agent as its tool result."""
    dim_lines = "\n".join(
        f"  - {d.dimension}: score {d.score}/{d.threshold}: {d.reasoning}\n"
        f"    Recommendation: {d.recommendation}"
        for d in feedback.failed_dimensions
    )
    escalation = ESCALATION_CLAUSE if feedback.attempt_number > 1 else ""
    instruction = (
        f"Your message failed quality checks on {len(feedback.failed_dimensions)} "
        f"dimension(s):\n{dim_lines}\n\nPlease rewrite your message to address these "
        f"issues. Attempt {feedback.attempt_number} of {feedback.max_attempts}.{escalation}"
    )
    message = QualityCheckFailedMessage(
        tentative_action=feedback.tentative_action,
        failed_dimensions=[
            FailedDimensionPayload(**asdict(d)) for d in feedback.failed_dimensions
        ],
        instruction=instruction,
    )
    return message.model_dump_json(by_alias=True)


def select_best_attempt(attempts: list[CorrectionAttempt]) -> CorrectionAttempt:
    """Highest total score; the earliest attempt wins ties."""
    best = attempts[0]
    for attempt in attempts[1:]:
        if attempt.gate_result.total_score > best.gate_result.total_score:
            best = attempt
    return best


class CorrectionPipeline:
    def __init__(
        self,
        gate: QualityGate,
        corrector: DirectCorrector,
        state_store: PipelineStateStore,
        log_store: CorrectionLogWriter | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._gate = gate
        self._corrector = corrector
        self._states = state_store
        self._log_store = log_store
        self._settings = settings

    async def _log_attempt(
        self,
        agent_id: str,
        original_text: str,
        final_text: str,
        attempt: CorrectionAttempt,
        outcome: CorrectionOutcome,
        run_id: str,
        channel_id: str | None,
        trace: TraceContext,
    ) -> None:
        if self._log_store is None:
            return
        gate_result = attempt.gate_result
        record = CorrectionLog(
            agent_id=agent_id,
            run_id=run_id,
            channel_id=channel_id,
            original_text=original_text,
            final_text=final_text,
            stage=attempt.stage,
            attempt_number=attempt.attempt_number,
            outcome=outcome,
            dimension_scores=[asdict(d) for d in gate_result.dimension_results],
            similarity_score=(
                gate_result.similarity_result.score
                if gate_result.similarity_result
                else None
            ),
            total_score=gate_result.total_score,
            # Every judge call of this invocation, rewrites included
            token_usage=trace.token_usage,
            duration_ms=round(trace.elapsed_ms, 2),
        )
        try:
            await self._log_store.save(record)
        except Exception as e:
            logger.warning(
                "correction_log_failed", agent_id=agent_id, outcome=outcome, error=str(e)
            )

    async def run(
        self,
        agent_id: str,
        text: str,
        conversation_context: list[str],
        config: CorrectionPipelineConfig | None = None,
        run_id: str = STANDALONE_RUN_ID,
        channel_id: str | None = None,
        prior_action_count: int = 0,
        agent_name: str | None = None,
        persona: str | None = None,
        recent_messages: list[str] | None = None,
    ) -> CorrectionPipelineResult:
        if config is None:
            config = (
                CorrectionPipelineConfig.from_settings(self._settings)
                if self._settings
                else CorrectionPipelineConfig()
            )
        trace = TraceContext()

        if (
            config.minimum_required_actions > 0
            and prior_action_count < config.minimum_required_actions
        ):
            logger.info(
                "pipeline_skip_min_actions",
                agent_id=agent_id,
                prior_actions=prior_action_count,
                minimum=config.minimum_required_actions,
            )
            return CorrectionPipelineResult(
                final_text=text,
                outcome="passed",
                attempts=[],
                best_attempt=CorrectionAttempt(
                    stage="original",
                    attempt_number=0,
                    text=text,
                    gate_result=GateResult.trivial_pass(),
                ),
                feedback=None,
                total_duration_ms=trace.elapsed_ms,
            )

        state = self._states.get_or_create(run_id, agent_id)

        async def check(candidate: str) -> GateResult:
            return await self._gate.check(
                agent_id,
                candidate,
                conversation_context,
                config,
                agent_name=agent_name,
                persona=persona,
                recent_messages=recent_messages,
            )

        with trace.span("gate") as span:
            gate_result = await check(text)
            span.charge(gate_result.token_usage)

        stage = "regeneration" if state.regeneration_count > 0 else "original"
        attempt = CorrectionAttempt(
            stage=stage,
            attempt_number=len(state.attempts) + 1,
            text=text,
            gate_result=gate_result,
        )
        state.attempts.append(attempt)

        if gate_result.passed:
            outcome: CorrectionOutcome = (
                "regeneration_success" if stage == "regeneration" else "passed"
            )
            logger.info(
                "pipeline_passed",
                agent_id=agent_id,
                outcome=outcome,
                attempt_number=attempt.attempt_number,
            )
            await self._log_attempt(
                agent_id, text, text, attempt, outcome, run_id, channel_id, trace
            )
            self._states.clear(run_id, agent_id)
            return CorrectionPipelineResult(
                final_text=text,
                outcome=outcome,
                attempts=list(state.attempts),
                best_attempt=attempt,
                feedback=None,
                total_duration_ms=trace.elapsed_ms,
            )

        # Stage 1: ask the agent to regenerate; state survives until the caller re-invokes
        if (
            config.enable_regeneration
            and state.regeneration_count < config.max_correction_attempts
        ):
            state.regeneration_count += 1
            feedback = build_regeneration_feedback(
                text, gate_result, state.regeneration_count, config.max_correction_attempts
            )
            logger.info(
                "pipeline_regeneration_requested",
                agent_id=agent_id,
                attempt_number=state.regeneration_count,
                max_attempts=config.max_correction_attempts,
                failed_dimensions=[d.dimension for d in feedback.failed_dimensions],
            )
            await self._log_attempt(
                agent_id,
                text,
                text,
                attempt,
                "regeneration_requested",
                run_id,
                channel_id,
                trace,
            )
            return CorrectionPipelineResult(
                final_text=text,
                outcome="regeneration_requested",
                attempts=list(state.attempts),
                best_attempt=select_best_attempt(state.attempts),
                feedback=feedback,
                total_duration_ms=trace.elapsed_ms,
            )

        # Stage 2: rewrite directly, re-gating each correction
        if (
            config.enable_direct_correction
            and state.direct_correction_count < config.max_correction_attempts
        ):
            failed = failed_dimensions_from(gate_result)
            logger.info(
                "pipeline_direct_correction_start",
                agent_id=agent_id,
                remaining=config.max_correction_attempts - state.direct_correction_count,
            )
            while state.direct_correction_count < config.max_correction_attempts:
                state.direct_correction_count += 1
                with trace.span("direct_correction") as span:
                    correction = await self._corrector.correct(
                        text,
                        failed,
                        agent_name or agent_id,
                        persona=persona,
                        conversation_context=conversation_context,
                    )
                    span.charge(correction.token_usage)
                with trace.span("gate") as span:
                    corrected_result = await check(correction.corrected_text)
                    span.charge(corrected_result.token_usage)

                corrected_attempt = CorrectionAttempt(
                    stage="direct_correction",
                    attempt_number=len(state.attempts) + 1,
                    text=correction.corrected_text,
                    gate_result=corrected_result,
                )
                state.attempts.append(corrected_attempt)

                if corrected_result.passed:
                    logger.info(
                        "pipeline_direct_correction_success",
                        agent_id=agent_id,
                        attempt_number=corrected_attempt.attempt_number,
                        spans=trace.span_summary(),
                    )
                    await self._log_attempt(
                        agent_id,
                        text,
                        correction.corrected_text,
                        corrected_attempt,
                        "direct_correction_success",
                        run_id,
                        channel_id,
                        trace,
                    )
                    self._states.clear(run_id, agent_id)
                    return CorrectionPipelineResult(
                        final_text=correction.corrected_text,
                        outcome="direct_correction_success",
                        attempts=list(state.attempts),
                        best_attempt=corrected_attempt,
                        feedback=None,
                        total_duration_ms=trace.elapsed_ms,
                    )

        best = select_best_attempt(state.attempts)
        final_text = best.text if config.continue_on_failure else text
        logger.warning(
            "pipeline_forced_through",
            agent_id=agent_id,
            best_score=best.gate_result.total_score,
            total_attempts=len(state.attempts),
            rewrites=trace.stage_count("direct_correction"),
            continue_on_failure=config.continue_on_failure,
            spans=trace.span_summary(),
        )
        await self._log_attempt(
            agent_id,
            text,
            final_text,
            best,
            "forced_through",
            run_id,
            channel_id,
            trace,
        )
        self._states.clear(run_id, agent_id)
        return CorrectionPipelineResult(
            final_text=final_text,
            outcome="forced_through",
            attempts=list(state.attempts),
            best_attempt=best,
            feedback=None,
            total_duration_ms=trace.elapsed_ms,
        )
