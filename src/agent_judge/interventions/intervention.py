"""Intervention and InterventionBatch.

An ``Intervention`` evaluates its configured preconditions against an
agent/channel context and fires its effect (typically a nudge) only when all
of them pass. Preconditions always run in the order functional, textual,
propositional, and the first failure skips the remaining ones so that no
judge call is spent on an intervention that cannot fire.

``InterventionBatch`` applies identical configuration to one intervention per
agent and evaluates them concurrently.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import replace

from agent_judge.config.constants import EVALUATION_WINDOW
from agent_judge.interventions.preconditions import (
    FunctionalPrecondition,
    evaluate_functional,
    evaluate_propositional,
    evaluate_textual,
)
from agent_judge.models.domain import (
    InterventionContext,
    InterventionLog,
    InterventionResult,
    InterventionTarget,
    InterventionType,
    PreconditionKind,
    PreconditionResult,
    Proposition,
    TrajectoryEntry,
)
from agent_judge.observability.logger import get_logger
from agent_judge.observability.tracing import TraceContext
from agent_judge.protocols.storage import InterventionLogWriter
from agent_judge.scoring.proposition_engine import PropositionEngine

logger = get_logger("intervention")

EffectFn = Callable[[list[InterventionTarget]], "str | None"]


def apply_trajectory_window(
    trajectory: list[TrajectoryEntry], first_n: int, last_n: int
) -> list[TrajectoryEntry]:
    """Keep the first N and last M entries when the trajectory is longer than N+M."""
    if len(trajectory) <= first_n + last_n:
        return list(trajectory)
    head = trajectory[:first_n]
    tail = trajectory[len(trajectory) - last_n :]
    return head + tail


def _result_of(results: list[PreconditionResult], kind: PreconditionKind) -> bool | None:
    for r in results:
        if r.kind == kind:
            return r.passed
    return None


class Intervention:
    def __init__(
        self,
        targets: InterventionTarget | list[InterventionTarget],
        engine: PropositionEngine,
        log_store: InterventionLogWriter | None = None,
    ) -> None:
        self._targets = targets if isinstance(targets, list) else [targets]
        self._engine = engine
        self._log_store = log_store
        self._intervention_type: InterventionType = "custom"
        self._functional: FunctionalPrecondition | None = None
        self._textual_claim: str | None = None
        self._propositional: tuple[Proposition, int | None] | None = None
        self._effect: EffectFn | None = None
        self._first_n, self._last_n = EVALUATION_WINDOW

    @property
    def targets(self) -> list[InterventionTarget]:
        return list(self._targets)

    @property
    def intervention_type(self) -> InterventionType:
        return self._intervention_type

    @property
    def trajectory_window(self) -> tuple[int, int]:
        return self._first_n, self._last_n

    @property
    def target_id(self) -> str:
        return self._targets[0].id if self._targets else "unknown"

    def set_intervention_type(self, intervention_type: InterventionType) -> Intervention:
        self._intervention_type = intervention_type
        return self

    def set_functional_precondition(self, fn: FunctionalPrecondition) -> Intervention:
        self._functional = fn
        return self

    def set_textual_precondition(self, claim: str) -> Intervention:
        self._textual_claim = claim
        return self

    def set_propositional_precondition(
        self, proposition: Proposition, threshold: int | None = None
    ) -> Intervention:
        self._propositional = (proposition, threshold)
        return self

    def set_effect(self, fn: EffectFn) -> Intervention:
        self._effect = fn
        return self

    def set_trajectory_window(self, first_n: int, last_n: int) -> Intervention:
        if first_n < 0 or last_n < 0:
            raise ValueError("Trajectory window sizes must be non-negative")
        self._first_n = first_n
        self._last_n = last_n
        return self

    async def evaluate(self, context: InterventionContext) -> InterventionResult:
        trace = TraceContext()
        results: list[PreconditionResult] = []

        windowed = apply_trajectory_window(
            context.trajectory, self._first_n, self._last_n
        )
        scoring_context = replace(context.scoring_context, trajectory=windowed)

        if self._functional is not None:
            results.append(evaluate_functional(self._functional, context.targets))

        if self._textual_claim is not None and all(r.passed for r in results):
            with trace.span("textual") as span:
                result = await evaluate_textual(
                    self._engine, self._textual_claim, scoring_context
                )
                span.charge(result.token_usage)
            results.append(result)

        if self._propositional is not None and all(r.passed for r in results):
            proposition, threshold = self._propositional
            with trace.span("propositional") as span:
                result = await evaluate_propositional(
                    self._engine, proposition, scoring_context, threshold
                )
                span.charge(result.token_usage)
            results.append(result)

        fired = all(r.passed for r in results)
        nudge_text = None
        if fired and self._effect is not None:
            effect_result = self._effect(context.targets)
            if isinstance(effect_result, str):
                nudge_text = effect_result

        result = InterventionResult(
            fired=fired,
            precondition_results=results,
            nudge_text=nudge_text,
            token_usage=trace.token_usage,
            duration_ms=round(trace.elapsed_ms, 2),
        )

        # Logged whether or not the intervention fired
        await self._log(result)

        logger.info(
            "intervention_evaluated",
            intervention_type=self._intervention_type,
            target_id=self.target_id,
            fired=fired,
            precondition_count=len(results),
            duration_ms=result.duration_ms,
        )
        return result

    async def _log(self, result: InterventionResult) -> None:
        if self._log_store is None:
            return
        agent = next((t for t in self._targets if t.kind == "agent"), None)
        if agent is None:
            return
        channel = next((t for t in self._targets if t.kind == "channel"), None)
        record = InterventionLog(
            agent_id=agent.id,
            channel_id=channel.id if channel else None,
            intervention_type=self._intervention_type,
            textual_precondition=self._textual_claim,
            textual_precondition_result=_result_of(result.precondition_results, "textual"),
            functional_precondition_result=_result_of(
                result.precondition_results, "functional"
            ),
            propositional_precondition_result=_result_of(
                result.precondition_results, "propositional"
            ),
            fired=result.fired,
            nudge_text=result.nudge_text,
            token_usage=result.token_usage,
        )
        try:
            await self._log_store.save(record)
        except Exception as e:
            logger.warning("intervention_log_failed", agent_id=agent.id, error=str(e))


class InterventionBatch:
    def __init__(self, interventions: list[Intervention]) -> None:
        self._interventions = interventions

    @classmethod
    def create_for_each(
        cls,
        agent_ids: list[str],
        engine: PropositionEngine,
        log_store: InterventionLogWriter | None = None,
    ) -> InterventionBatch:
        return cls(
            [
                Intervention(InterventionTarget(kind="agent", id=agent_id), engine, log_store)
                for agent_id in agent_ids
            ]
        )

    @property
    def interventions(self) -> list[Intervention]:
        return list(self._interventions)

    def set_intervention_type(self, intervention_type: InterventionType) -> InterventionBatch:
        for i in self._interventions:
            i.set_intervention_type(intervention_type)
        return self

    def set_functional_precondition(self, fn: FunctionalPrecondition) -> InterventionBatch:
        for i in self._interventions:
            i.set_functional_precondition(fn)
        return self

    def set_textual_precondition(self, claim: str) -> InterventionBatch:
        for i in self._interventions:
            i.set_textual_precondition(claim)
        return self

    def set_propositional_precondition(
        self, proposition: Proposition, threshold: int | None = None
    ) -> InterventionBatch:
        for i in self._interventions:
            i.set_propositional_precondition(proposition, threshold)
        return self

    def set_effect(self, fn: EffectFn) -> InterventionBatch:
        for i in self._interventions:
            i.set_effect(fn)
        return self

    def set_trajectory_window(self, first_n: int, last_n: int) -> InterventionBatch:
        for i in self._interventions:
            i.set_trajectory_window(first_n, last_n)
        return self

    async def evaluate_all(
        self, contexts: dict[str, InterventionContext]
    ) -> dict[str, InterventionResult]:
        runnable = []
        for intervention in self._interventions:
            if intervention.target_id in contexts:
                runnable.append(intervention)
            else:
                logger.info(
                    "intervention_batch_skipped",
                    target_id=intervention.target_id,
                    reason="no context provided",
                )

        outcomes = await asyncio.gather(
            *(i.evaluate(contexts[i.target_id]) for i in runnable)
        )
        results = {i.target_id: r for i, r in zip(runnable, outcomes)}

        logger.info(
            "intervention_batch_complete",
            total=len(self._interventions),
            evaluated=len(results),
            fired=sum(1 for r in results.values() if r.fired),
        )
        return results
