"""Gate statistics and judge cost rollups over historical audit logs."""

from __future__ import annotations

from datetime import datetime

import numpy as np

from agent_judge.config.constants import SIMILARITY_FAILURE_THRESHOLD, STATISTICS_LOG_LIMIT
from agent_judge.models.domain import (
    ALL_DIMENSIONS,
    ZERO_USAGE,
    CorrectionLog,
    CostSummary,
    GateStatistics,
    InterventionLog,
    TokenUsage,
)
from agent_judge.observability.logger import get_logger
from agent_judge.protocols.storage import CorrectionLogReader, InterventionLogReader

logger = get_logger("gate_statistics")


def _mean(values: list[float]) -> float:
    return float(np.mean(values)) if values else 0.0


def _sd(values: list[float]) -> float:
    # Sample SD; undefined below two values so reported as 0
    if len(values) < 2:
        return 0.0
    return float(np.std(values, ddof=1))


def _failure_rate(count: int, successes: int) -> float:
    return (count - successes) / count if count > 0 else 0.0


def compute_gate_statistics(logs: list[CorrectionLog]) -> GateStatistics:
    total = len(logs)

    original_passed = sum(1 for log in logs if log.outcome == "passed")
    regen_scores = [float(log.total_score) for log in logs if log.stage == "regeneration"]
    regen_successes = sum(1 for log in logs if log.outcome == "regeneration_success")
    dc_scores = [float(log.total_score) for log in logs if log.stage == "direct_correction"]
    dc_successes = sum(1 for log in logs if log.outcome == "direct_correction_success")
    forced = sum(1 for log in logs if log.outcome == "forced_through")
    similarity_failures = sum(
        1
        for log in logs
        if log.similarity_score is not None
        and log.similarity_score > SIMILARITY_FAILURE_THRESHOLD
    )

    failure_counts = {d: 0 for d in ALL_DIMENSIONS}
    dimension_scores: dict[str, list[float]] = {d: [] for d in ALL_DIMENSIONS}
    for log in logs:
        for entry in log.dimension_scores or []:
            dimension = entry.get("dimension")
            if dimension not in failure_counts:
                continue
            dimension_scores[dimension].append(float(entry.get("score", 0)))
            if not entry.get("passed", False):
                failure_counts[dimension] += 1

    return GateStatistics(
        total_actions=total,
        original_pass_count=original_passed,
        original_pass_rate=original_passed / total if total > 0 else 0.0,
        regeneration_count=len(regen_scores),
        regeneration_success_count=regen_successes,
        regeneration_failure_rate=_failure_rate(len(regen_scores), regen_successes),
        regeneration_mean_score=_mean(regen_scores),
        regeneration_sd_score=_sd(regen_scores),
        direct_correction_count=len(dc_scores),
        direct_correction_success_count=dc_successes,
        direct_correction_failure_rate=_failure_rate(len(dc_scores), dc_successes),
        direct_correction_mean_score=_mean(dc_scores),
        direct_correction_sd_score=_sd(dc_scores),
        forced_through_count=forced,
        similarity_failure_count=similarity_failures,
        per_dimension_failure_counts=failure_counts,
        per_dimension_mean_scores={d: _mean(s) for d, s in dimension_scores.items()},
    )


class GateStatisticsService:
    def __init__(self, reader: CorrectionLogReader) -> None:
        self._reader = reader

    async def get_statistics(
        self, agent_id: str, since: datetime | None = None
    ) -> GateStatistics:
        logs = await self._reader.list(
            agent_id=agent_id, since=since, limit=STATISTICS_LOG_LIMIT
        )
        stats = compute_gate_statistics(logs)
        logger.info(
            "gate_statistics_computed",
            agent_id=agent_id,
            total_actions=stats.total_actions,
            original_pass_rate=round(stats.original_pass_rate, 4),
            forced_through=stats.forced_through_count,
        )
        return stats


def sum_token_usage(logs: list[CorrectionLog] | list[InterventionLog]) -> TokenUsage:
    total = ZERO_USAGE
    for log in logs:
        if log.token_usage is not None:
            total = total + log.token_usage
    return total


def compute_cost_summary(
    correction_logs: list[CorrectionLog],
    intervention_logs: list[InterventionLog],
    input_cost_per_million: float,
    output_cost_per_million: float,
    agent_id: str | None = None,
) -> CostSummary:
    correction_usage = sum_token_usage(correction_logs)
    intervention_usage = sum_token_usage(intervention_logs)
    total = correction_usage + intervention_usage
    cost = (
        total.input_tokens * input_cost_per_million
        + total.output_tokens * output_cost_per_million
    ) / 1_000_000
    return CostSummary(
        agent_id=agent_id,
        correction_usage=correction_usage,
        intervention_usage=intervention_usage,
        total_usage=total,
        estimated_cost_usd=cost,
    )


class CostTrackingService:
    def __init__(
        self,
        corrections: CorrectionLogReader,
        interventions: InterventionLogReader,
        input_cost_per_million: float,
        output_cost_per_million: float,
    ) -> None:
        self._corrections = corrections
        self._interventions = interventions
        self._input_rate = input_cost_per_million
        self._output_rate = output_cost_per_million

    async def get_cost_summary(
        self,
        agent_id: str | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> CostSummary:
        corrections = await self._corrections.list(
            agent_id=agent_id, since=since, limit=STATISTICS_LOG_LIMIT
        )
        interventions = await self._interventions.list(
            agent_id=agent_id, since=since, limit=STATISTICS_LOG_LIMIT
        )
        if until is not None:
            corrections = [log for log in corrections if log.created_at <= until]
            interventions = [log for log in interventions if log.created_at <= until]

        summary = compute_cost_summary(
            corrections, interventions, self._input_rate, self._output_rate, agent_id
        )
        logger.info(
            "cost_summary_computed",
            agent_id=agent_id or "all",
            input_tokens=summary.total_usage.input_tokens,
            output_tokens=summary.total_usage.output_tokens,
            estimated_cost_usd=round(summary.estimated_cost_usd, 6),
        )
        return summary
