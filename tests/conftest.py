"""Shared test fixtures."""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from agent_judge.config.settings import Settings
from agent_judge.gates.pipeline_state import PipelineStateStore
from agent_judge.models.domain import ScoringContext, TrajectoryEntry
from agent_judge.scoring.proposition_engine import PropositionEngine
from fakes import InMemoryCorrectionLogStore, InMemoryInterventionLogStore, InMemoryRunStore


@pytest.fixture
def settings():
    """Test settings with temp paths."""
    tmp = tempfile.mkdtemp()
    return Settings(
        google_api_key="test-key",
        sqlite_log_db_path=str(Path(tmp) / "test_agent_judge.db"),
    )


@pytest.fixture
def make_engine(settings):
    def _make(judge) -> PropositionEngine:
        return PropositionEngine(judge, settings)

    return _make


@pytest.fixture
def sample_context():
    """Short office exchange: one stimulus, one action."""
    return ScoringContext(
        trajectory=[
            TrajectoryEntry(kind="stimulus", agent_name="jim", text="Who ate my yogurt?"),
            TrajectoryEntry(kind="action", agent_name="dwight", text="Not me. I only eat beets."),
        ]
    )


@pytest.fixture
def correction_log_store():
    return InMemoryCorrectionLogStore()


@pytest.fixture
def intervention_log_store():
    return InMemoryInterventionLogStore()


@pytest.fixture
def run_store():
    return InMemoryRunStore()


@pytest.fixture
def pipeline_states():
    states = PipelineStateStore()
    yield states
    states.clear_all()
