"""Protocol for judge model providers."""

from __future__ import annotations

from typing import Protocol

from pydantic import BaseModel

from agent_judge.models.domain import JudgeResponse


class JudgeClient(Protocol):
    async def invoke(
        self,
        system: str | None,
        messages: list[dict[str, str]],
        output_schema: type[BaseModel],
        max_tokens: int = 1024,
        temperature: float = 0.0,
    ) -> JudgeResponse: ...
