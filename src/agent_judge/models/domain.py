"""Core domain objects used throughout the system."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal
from uuid import uuid4

TrajectoryKind = Literal["action", "stimulus"]

QualityDimension = Literal[
    "persona_adherence", "self_consistency", "fluency", "suitability"
]

ALL_DIMENSIONS: tuple[QualityDimension, ...] = (
    "persona_adherence",
    "self_consistency",
    "fluency",
    "suitability",
)

CorrectionStage = Literal["original", "regeneration", "direct_correction"]

CorrectionOutcome = Literal[
    "passed",
    "regeneration_requested",
    "regeneration_success",
    "direct_correction_success",
    "forced_through",
]

InterventionTargetKind = Literal["agent", "channel"]
PreconditionKind = Literal["functional", "textual", "propositional"]
InterventionType = Literal["anti_convergence", "variety", "custom"]
NudgeType = Literal[
    "devils_advocate",
    "change_subject",
    "personal_story",
    "challenging_question",
    "new_ideas",
]

RunStatus = Literal["running", "completed", "failed"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TokenUsage:
    input_tokens: int = 0
    output_tokens: int = 0

    def __add__(self, other: TokenUsage) -> TokenUsage:
        return TokenUsage(
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
        )

    def to_dict(self) -> dict:
        return {"input_tokens": self.input_tokens, "output_tokens": self.output_tokens}


ZERO_USAGE = TokenUsage()


@dataclass(frozen=True)
class TrajectoryEntry:
    kind: TrajectoryKind
    agent_name: str
    text: str


@dataclass(frozen=True)
class ScoringContext:
    trajectory: list[TrajectoryEntry]
    persona: str | None = None


@dataclass
class Proposition:
    id: str
    claim: str
    weight: float = 1.0
    inverted: bool = False
    # Receives the scoring context; returning False makes the proposition trivially true.
    precondition: Callable[[ScoringContext], bool] | None = None
    recommendation: str | None = None


@dataclass
class ScoreResult:
    score: int
    reasoning: str
    confidence: float
    token_usage: TokenUsage = ZERO_USAGE


@dataclass
class CheckResult:
    result: bool
    reasoning: str
    confidence: float
    token_usage: TokenUsage = ZERO_USAGE


@dataclass
class BatchScoreResult:
    results: list[ScoreResult]
    token_usage: TokenUsage


@dataclass
class JudgeResponse:
    text: str
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def token_usage(self) -> TokenUsage:
        return TokenUsage(self.input_tokens, self.output_tokens)


# ---------------------------------------------------------------------------
# Quality gate
# ---------------------------------------------------------------------------


@dataclass
class DimensionResult:
    dimension: QualityDimension
    score: int
    reasoning: str
    passed: bool
    threshold: int


@dataclass
class SimilarityResult:
    score: float
    passed: bool
    threshold: float
    most_similar_message: str | None = None


@dataclass
class GateResult:
    passed: bool
    dimension_results: list[DimensionResult]
    similarity_result: SimilarityResult | None
    total_score: int
    token_usage: TokenUsage = ZERO_USAGE

    @classmethod
    def trivial_pass(cls) -> GateResult:
        return cls(passed=True, dimension_results=[], similarity_result=None, total_score=0)

    @property
    def failed_dimensions(self) -> list[DimensionResult]:
        return [d for d in self.dimension_results if not d.passed]


# ---------------------------------------------------------------------------
# Correction pipeline
# ---------------------------------------------------------------------------


@dataclass
class CorrectionAttempt:
    stage: CorrectionStage
    attempt_number: int
    text: str
    gate_result: GateResult


@dataclass
class FailedDimension:
    dimension: QualityDimension
    score: int
    threshold: int
    reasoning: str
    recommendation: str


@dataclass
class RegenerationFeedback:
    tentative_action: str
    failed_dimensions: list[FailedDimension]
    attempt_number: int
    max_attempts: int


@dataclass
class CorrectionPipelineResult:
    final_text: str
    outcome: CorrectionOutcome
    attempts: list[CorrectionAttempt]
    best_attempt: CorrectionAttempt
    feedback: RegenerationFeedback | None
    total_duration_ms: float


@dataclass
class DirectCorrectionResult:
    corrected_text: str
    token_usage: TokenUsage


@dataclass
class PipelineState:
    attempts: list[CorrectionAttempt] = field(default_factory=list)
    regeneration_count: int = 0
    direct_correction_count: int = 0


@dataclass
class CorrectionLog:
    agent_id: str
    original_text: str
    final_text: str
    stage: CorrectionStage
    attempt_number: int
    outcome: CorrectionOutcome
    dimension_scores: list[dict]
    total_score: int
    run_id: str | None = None
    channel_id: str | None = None
    similarity_score: float | None = None
    token_usage: TokenUsage | None = None
    duration_ms: float | None = None
    log_id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=_utcnow)


@dataclass
class GateStatistics:
    total_actions: int
    original_pass_count: int
    original_pass_rate: float
    regeneration_count: int
    regeneration_success_count: int
    regeneration_failure_rate: float
    regeneration_mean_score: float
    regeneration_sd_score: float
    direct_correction_count: int
    direct_correction_success_count: int
    direct_correction_failure_rate: float
    direct_correction_mean_score: float
    direct_correction_sd_score: float
    forced_through_count: int
    similarity_failure_count: int
    per_dimension_failure_counts: dict[str, int]
    per_dimension_mean_scores: dict[str, float]


@dataclass
class CostSummary:
    agent_id: str | None
    correction_usage: TokenUsage
    intervention_usage: TokenUsage
    total_usage: TokenUsage
    estimated_cost_usd: float


# ---------------------------------------------------------------------------
# Interventions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InterventionTarget:
    kind: InterventionTargetKind
    id: str


@dataclass
class PreconditionResult:
    kind: PreconditionKind
    passed: bool
    reasoning: str | None = None
    score: int | None = None
    token_usage: TokenUsage | None = None


@dataclass
class InterventionContext:
    trajectory: list[TrajectoryEntry]
    scoring_context: ScoringContext
    targets: list[InterventionTarget]


@dataclass
class InterventionResult:
    fired: bool
    precondition_results: list[PreconditionResult]
    nudge_text: str | None
    token_usage: TokenUsage
    duration_ms: float


@dataclass
class InterventionLog:
    agent_id: str
    intervention_type: InterventionType
    fired: bool
    channel_id: str | None = None
    textual_precondition: str | None = None
    textual_precondition_result: bool | None = None
    functional_precondition_result: bool | None = None
    propositional_precondition_result: bool | None = None
    nudge_text: str | None = None
    token_usage: TokenUsage = ZERO_USAGE
    log_id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=_utcnow)


@dataclass
class ChannelMessage:
    user_id: str
    text: str
    created_at: datetime = field(default_factory=_utcnow)


@dataclass
class RepetitionCheckResult:
    detected: bool
    overlap_score: float
    repeated_ngrams: list[str]
    context: str | None


# ---------------------------------------------------------------------------
# Evaluation runs & statistics
# ---------------------------------------------------------------------------


@dataclass
class EvaluationRun:
    run_id: str
    agent_id: str
    status: RunStatus
    dimensions: list[str]
    sample_size: int = 0
    overall_score: float | None = None
    token_usage: TokenUsage | None = None
    created_at: datetime = field(default_factory=_utcnow)


@dataclass
class PropositionScore:
    proposition_id: str
    score: float
    reasoning: str
    # Set only when the proposition scored below the maximum
    recommendation: str | None = None


@dataclass
class DimensionScoreResult:
    evaluation_run_id: str
    dimension: str
    overall_score: float
    proposition_scores: list[PropositionScore]
    sample_size: int
    token_usage: TokenUsage
    ngram_stats: dict[str, float] | None = None


@dataclass(frozen=True)
class TTestResult:
    t_statistic: float
    degrees_of_freedom: float
    p_value: float
    significant: bool
    mean_a: float
    mean_b: float
    sd_a: float
    sd_b: float


@dataclass(frozen=True)
class ConditionComparison:
    dimension: str
    t_test: TTestResult
    effect_size: float
    n_treatment: int
    n_control: int

    @property
    def delta(self) -> float:
        return self.t_test.mean_a - self.t_test.mean_b
