"""Pydantic models for judge output schemas, runtime configuration, and agent envelopes."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from agent_judge.config.settings import Settings
from agent_judge.models.domain import QualityDimension

# ---------------------------------------------------------------------------
# Strict output schemas requested from the judge. Parsing never trusts them;
# see scoring.response_parser.
# ---------------------------------------------------------------------------


class ScoreResponse(BaseModel):
    score: int
    reasoning: str
    confidence: float


class CheckResponse(BaseModel):
    result: bool
    reasoning: str
    confidence: float


class BatchScoreResponse(BaseModel):
    results: list[ScoreResponse]


class CorrectionResponse(BaseModel):
    corrected_text: str


# ---------------------------------------------------------------------------
# Proposition files (YAML, one directory per dimension)
# ---------------------------------------------------------------------------


class PropositionEntry(BaseModel):
    id: str = Field(min_length=1)
    claim: str = Field(min_length=1)
    weight: float = Field(default=1.0, gt=0)
    inverted: bool = False
    recommendations_for_improvement: str | None = None


class PropositionFileSchema(BaseModel):
    dimension: str = Field(min_length=1)
    agent_id: str | None = None
    include_personas: bool = True
    hard: bool = False
    target_type: Literal["agent", "environment"] = "agent"
    first_n: int | None = Field(default=None, ge=0)
    last_n: int | None = Field(default=None, ge=0)
    propositions: list[PropositionEntry]


# ---------------------------------------------------------------------------
# Gate and pipeline configuration
# ---------------------------------------------------------------------------


class DimensionConfig(BaseModel):
    enabled: bool = False
    threshold: int = Field(default=7, ge=0, le=9)


class SimilarityConfig(BaseModel):
    enabled: bool = False
    threshold: float = Field(default=0.6, ge=0.0, le=1.0)


class GateConfig(BaseModel):
    persona_adherence: DimensionConfig = Field(default_factory=DimensionConfig)
    self_consistency: DimensionConfig = Field(default_factory=DimensionConfig)
    fluency: DimensionConfig = Field(default_factory=DimensionConfig)
    suitability: DimensionConfig = Field(default_factory=DimensionConfig)
    similarity: SimilarityConfig = Field(default_factory=SimilarityConfig)

    def dimension(self, name: QualityDimension) -> DimensionConfig:
        return getattr(self, name)

    @classmethod
    def all_enabled(cls, threshold: int = 7, similarity_threshold: float = 0.6) -> GateConfig:
        dim = DimensionConfig(enabled=True, threshold=threshold)
        return cls(
            persona_adherence=dim,
            self_consistency=dim,
            fluency=dim,
            suitability=dim,
            similarity=SimilarityConfig(enabled=True, threshold=similarity_threshold),
        )


class CorrectionPipelineConfig(GateConfig):
    enable_regeneration: bool = True
    enable_direct_correction: bool = False
    max_correction_attempts: int = Field(default=2, ge=0)
    continue_on_failure: bool = True
    minimum_required_actions: int = Field(default=0, ge=0)

    @classmethod
    def from_settings(cls, settings: Settings, **overrides) -> CorrectionPipelineConfig:
        """Pipeline defaults from settings; gate dimensions stay disabled unless overridden."""
        dim = DimensionConfig(enabled=False, threshold=settings.gate_dimension_threshold)
        values = {
            "persona_adherence": dim,
            "self_consistency": dim,
            "fluency": dim,
            "suitability": dim,
            "similarity": SimilarityConfig(
                enabled=False, threshold=settings.similarity_threshold
            ),
            "enable_regeneration": settings.enable_regeneration,
            "enable_direct_correction": settings.enable_direct_correction,
            "max_correction_attempts": settings.max_correction_attempts,
            "continue_on_failure": settings.continue_on_failure,
            "minimum_required_actions": settings.minimum_required_actions,
        }
        values.update(overrides)
        return cls(**values)


# ---------------------------------------------------------------------------
# Envelope handed back to the acting agent on regeneration_requested
# ---------------------------------------------------------------------------


class FailedDimensionPayload(BaseModel):
    dimension: QualityDimension
    score: int
    threshold: int
    reasoning: str
    recommendation: str


class QualityCheckFailedMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["quality_check_failed"] = "quality_check_failed"
    tentative_action: str = Field(alias="tentativeAction")
    failed_dimensions: list[FailedDimensionPayload] = Field(alias="failedDimensions")
    instruction: str
