"""Tests for settings, gate configuration, and the agent feedback envelope."""

import pytest
from pydantic import ValidationError

from agent_judge.config.settings import Settings
from agent_judge.models.schemas import (
    CorrectionPipelineConfig,
    DimensionConfig,
    GateConfig,
    QualityCheckFailedMessage,
)


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("AGENT_JUDGE_MAX_CORRECTION_ATTEMPTS", raising=False)
    settings = Settings(_env_file=None)
    assert settings.max_correction_attempts == 2
    assert settings.enable_regeneration is True
    assert settings.enable_direct_correction is False
    assert settings.direct_correction_timeout_s == 5.0
    assert settings.gate_dimension_threshold == 7


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("AGENT_JUDGE_MAX_CORRECTION_ATTEMPTS", "4")
    monkeypatch.setenv("AGENT_JUDGE_ENABLE_DIRECT_CORRECTION", "true")
    settings = Settings(_env_file=None)
    assert settings.max_correction_attempts == 4
    assert settings.enable_direct_correction is True


def test_gate_config_defaults_disabled():
    config = GateConfig()
    for name in ("persona_adherence", "self_consistency", "fluency", "suitability"):
        assert config.dimension(name).enabled is False
        assert config.dimension(name).threshold == 7
    assert config.similarity.enabled is False
    assert config.similarity.threshold == 0.6


def test_gate_config_all_enabled():
    config = GateConfig.all_enabled(threshold=6, similarity_threshold=0.5)
    assert config.fluency.enabled is True
    assert config.fluency.threshold == 6
    assert config.similarity.enabled is True
    assert config.similarity.threshold == 0.5


@pytest.mark.parametrize("threshold", [-1, 10])
def test_dimension_threshold_range(threshold):
    with pytest.raises(ValidationError):
        DimensionConfig(enabled=True, threshold=threshold)


def test_pipeline_config_defaults():
    config = CorrectionPipelineConfig()
    assert config.enable_regeneration is True
    assert config.enable_direct_correction is False
    assert config.max_correction_attempts == 2
    assert config.continue_on_failure is True
    assert config.minimum_required_actions == 0


def test_pipeline_config_from_settings_with_overrides(settings):
    settings.max_correction_attempts = 3
    settings.gate_dimension_threshold = 8
    config = CorrectionPipelineConfig.from_settings(
        settings, fluency=DimensionConfig(enabled=True, threshold=5)
    )
    assert config.max_correction_attempts == 3
    assert config.persona_adherence.threshold == 8
    assert config.persona_adherence.enabled is False
    assert config.fluency.enabled is True
    assert config.fluency.threshold == 5


def test_feedback_envelope_uses_camel_case_aliases():
    message = QualityCheckFailedMessage(
        tentative_action="draft", failed_dimensions=[], instruction="rewrite"
    )
    data = message.model_dump(by_alias=True)
    assert data == {
        "type": "quality_check_failed",
        "tentativeAction": "draft",
        "failedDimensions": [],
        "instruction": "rewrite",
    }
