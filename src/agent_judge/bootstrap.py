"""Wires the judge, gate, pipeline, and stores from Settings."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from agent_judge.config.settings import Settings
from agent_judge.exceptions import ConfigurationError
from agent_judge.experiment.condition_comparison import compare_conditions
from agent_judge.gates.correction_pipeline import CorrectionPipeline
from agent_judge.gates.direct_correction import DirectCorrector
from agent_judge.gates.pipeline_state import PipelineStateStore
from agent_judge.gates.quality_gate import QualityGate
from agent_judge.gates.statistics import CostTrackingService, GateStatisticsService
from agent_judge.generation.gemini_judge import GeminiJudgeClient
from agent_judge.interventions.orchestrator import evaluate_interventions
from agent_judge.interventions.repetition import check_repetition_suppression
from agent_judge.models.domain import (
    ChannelMessage,
    ConditionComparison,
    RepetitionCheckResult,
    TokenUsage,
)
from agent_judge.observability.logger import get_logger, setup_logging
from agent_judge.protocols.judge import JudgeClient
from agent_judge.protocols.storage import MessageSource
from agent_judge.scoring.proposition_engine import PropositionEngine
from agent_judge.scoring.proposition_loader import PropositionLoader
from agent_judge.scoring.trajectory_scorer import TrajectoryScorer
from agent_judge.storage.sqlite_log_store import (
    SQLiteCorrectionLogStore,
    SQLiteInterventionLogStore,
)
from agent_judge.storage.sqlite_run_store import SQLiteEvaluationRunStore

logger = get_logger("bootstrap")


@dataclass
class Components:
    settings: Settings
    engine: PropositionEngine
    gate: QualityGate
    corrector: DirectCorrector
    pipeline: CorrectionPipeline
    pipeline_states: PipelineStateStore
    correction_logs: SQLiteCorrectionLogStore
    intervention_logs: SQLiteInterventionLogStore
    runs: SQLiteEvaluationRunStore
    statistics: GateStatisticsService
    costs: CostTrackingService
    trajectory_scorer: TrajectoryScorer
    message_source: MessageSource | None = None

    async def interventions_for_turn(
        self,
        agent_id: str,
        channel_id: str | None,
        recent_messages: list[ChannelMessage],
    ) -> tuple[str | None, TokenUsage]:
        return await evaluate_interventions(
            agent_id,
            channel_id,
            recent_messages,
            self.engine,
            self.intervention_logs,
            message_threshold=self.settings.variety_message_threshold,
        )

    async def repetition_check(self, agent_id: str) -> RepetitionCheckResult:
        if self.message_source is None:
            raise ConfigurationError("Repetition checks need a message source")
        return await check_repetition_suppression(
            agent_id, self.message_source, threshold=self.settings.repetition_threshold
        )

    def compare_conditions(
        self,
        treatment_scores: dict[str, list[float]],
        control_scores: dict[str, list[float]],
    ) -> list[ConditionComparison]:
        return compare_conditions(
            treatment_scores, control_scores, alpha=self.settings.significance_alpha
        )


async def build_components(
    settings: Settings | None = None,
    judge: JudgeClient | None = None,
    message_source: MessageSource | None = None,
) -> Components:
    settings = settings or Settings()
    setup_logging(settings.log_level, json=settings.log_json)

    if judge is None and not settings.google_api_key:
        raise ConfigurationError(
            "AGENT_JUDGE_GOOGLE_API_KEY is required when no judge client is supplied"
        )

    Path(settings.sqlite_log_db_path).parent.mkdir(parents=True, exist_ok=True)

    correction_logs = SQLiteCorrectionLogStore(settings.sqlite_log_db_path)
    await correction_logs.initialize()
    intervention_logs = SQLiteInterventionLogStore(settings.sqlite_log_db_path)
    await intervention_logs.initialize()
    runs = SQLiteEvaluationRunStore(settings.sqlite_log_db_path)
    await runs.initialize()

    judge = judge or GeminiJudgeClient(
        api_key=settings.google_api_key, model=settings.judge_model
    )
    engine = PropositionEngine(judge, settings)
    gate = QualityGate(engine)
    corrector = DirectCorrector(judge, settings)
    states = PipelineStateStore()

    logger.info(
        "components_ready",
        judge=type(judge).__name__,
        db_path=settings.sqlite_log_db_path,
    )
    return Components(
        settings=settings,
        engine=engine,
        gate=gate,
        corrector=corrector,
        pipeline=CorrectionPipeline(gate, corrector, states, correction_logs, settings),
        pipeline_states=states,
        correction_logs=correction_logs,
        intervention_logs=intervention_logs,
        runs=runs,
        statistics=GateStatisticsService(correction_logs),
        costs=CostTrackingService(
            correction_logs,
            intervention_logs,
            settings.judge_input_cost_per_million,
            settings.judge_output_cost_per_million,
        ),
        trajectory_scorer=TrajectoryScorer(
            engine, runs, PropositionLoader(settings.propositions_dir)
        ),
        message_source=message_source,
    )
