"""In-process retry state for the correction pipeline, keyed by (run_id, agent_id)."""

from __future__ import annotations

from agent_judge.models.domain import PipelineState


class PipelineStateStore:
    """Not safe for concurrent mutation of the same key; one agent speaks at a time per run."""

    def __init__(self) -> None:
        self._states: dict[tuple[str, str], PipelineState] = {}

    def get_or_create(self, run_id: str, agent_id: str) -> PipelineState:
        key = (run_id, agent_id)
        state = self._states.get(key)
        if state is None:
            state = PipelineState()
            self._states[key] = state
        return state

    def get(self, run_id: str, agent_id: str) -> PipelineState | None:
        return self._states.get((run_id, agent_id))

    def clear(self, run_id: str, agent_id: str) -> None:
        self._states.pop((run_id, agent_id), None)

    def clear_all(self) -> None:
        self._states.clear()

    def __len__(self) -> int:
        return len(self._states)
