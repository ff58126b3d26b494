"""Central configuration via Pydantic Settings. All values driven by env vars."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # API Keys
    google_api_key: str = ""

    # Judge / Gemini
    judge_model: str = "gemini-2.0-flash"
    judge_max_tokens: int = 1024
    judge_temperature: float = 0.0

    # Direct correction
    direct_correction_timeout_s: float = 5.0
    direct_correction_max_tokens: int = 1024

    # Quality gate defaults
    gate_dimension_threshold: int = 7
    similarity_threshold: float = 0.6

    # Correction pipeline defaults
    enable_regeneration: bool = True
    enable_direct_correction: bool = False
    max_correction_attempts: int = 2
    continue_on_failure: bool = True
    minimum_required_actions: int = 0

    # Interventions
    variety_message_threshold: int = 7

    # Statistics
    significance_alpha: float = 0.05

    # Judge pricing, USD per million tokens
    judge_input_cost_per_million: float = 0.10
    judge_output_cost_per_million: float = 0.40

    # Proposition files and repetition suppression
    propositions_dir: str = "propositions"
    repetition_threshold: float = 0.3

    # Storage paths
    sqlite_log_db_path: str = "data/agent_judge.db"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    model_config = {"env_file": ".env", "env_prefix": "AGENT_JUDGE_"}
