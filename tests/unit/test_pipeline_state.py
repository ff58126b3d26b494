"""Tests for the in-process pipeline state store."""

from agent_judge.gates.pipeline_state import PipelineStateStore


def test_get_or_create_returns_same_state():
    states = PipelineStateStore()
    first = states.get_or_create("run-1", "michael")
    first.regeneration_count = 2
    assert states.get_or_create("run-1", "michael") is first
    assert len(states) == 1


def test_keys_are_isolated():
    states = PipelineStateStore()
    states.get_or_create("run-1", "michael").regeneration_count = 1
    assert states.get_or_create("run-2", "michael").regeneration_count == 0
    assert states.get_or_create("run-1", "dwight").regeneration_count == 0
    assert len(states) == 3


def test_get_missing_is_none():
    assert PipelineStateStore().get("run-1", "nobody") is None


def test_clear_removes_single_key():
    states = PipelineStateStore()
    states.get_or_create("run-1", "michael")
    states.get_or_create("run-1", "dwight")
    states.clear("run-1", "michael")
    assert states.get("run-1", "michael") is None
    assert states.get("run-1", "dwight") is not None


def test_clear_missing_key_is_noop():
    states = PipelineStateStore()
    states.clear("run-1", "michael")
    assert len(states) == 0


def test_clear_all():
    states = PipelineStateStore()
    states.get_or_create("run-1", "michael")
    states.get_or_create("run-2", "dwight")
    states.clear_all()
    assert len(states) == 0
