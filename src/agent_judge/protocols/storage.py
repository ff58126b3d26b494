"""Protocols for audit log and evaluation run stores."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from agent_judge.models.domain import (
    ChannelMessage,
    CorrectionLog,
    EvaluationRun,
    InterventionLog,
    RunStatus,
    TokenUsage,
)


class CorrectionLogWriter(Protocol):
    async def save(self, record: CorrectionLog) -> None: ...


class CorrectionLogReader(Protocol):
    async def list(
        self,
        agent_id: str | None = None,
        since: datetime | None = None,
        limit: int = 50,
    ) -> list[CorrectionLog]: ...


class InterventionLogWriter(Protocol):
    async def save(self, record: InterventionLog) -> None: ...


class InterventionLogReader(Protocol):
    async def list(
        self,
        agent_id: str | None = None,
        since: datetime | None = None,
        limit: int = 50,
    ) -> list[InterventionLog]: ...


class EvaluationRunStore(Protocol):
    async def create_run(self, agent_id: str, dimensions: list[str]) -> EvaluationRun: ...

    async def update_status(
        self,
        run_id: str,
        status: RunStatus,
        overall_score: float | None = None,
        token_usage: TokenUsage | None = None,
        sample_size: int | None = None,
    ) -> None: ...

    async def record_score(
        self,
        run_id: str,
        dimension: str,
        proposition_id: str,
        score: float,
        reasoning: str,
    ) -> None: ...


class MessageSource(Protocol):
    async def recent_agent_messages(self, agent_id: str, limit: int) -> list[ChannelMessage]: ...
