"""Per-evaluation stage timing and judge token accounting."""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from uuid import uuid4

from agent_judge.models.domain import ZERO_USAGE, TokenUsage


@dataclass
class Span:
    """One stage of an evaluation: a gate check, a rewrite, a precondition."""

    name: str
    started_at: float
    finished_at: float | None = None
    token_usage: TokenUsage = ZERO_USAGE
    metadata: dict = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        end = self.finished_at if self.finished_at is not None else time.monotonic()
        return (end - self.started_at) * 1000

    def charge(self, usage: TokenUsage | None) -> None:
        if usage is not None:
            self.token_usage = self.token_usage + usage


class TraceContext:
    def __init__(self, trace_id: str | None = None) -> None:
        self.trace_id = trace_id or str(uuid4())
        self.spans: list[Span] = []
        self._started_at = time.monotonic()

    @contextmanager
    def span(self, name: str, **metadata):
        # Recorded on entry so a stage that raises still shows up
        s = Span(name=name, started_at=time.monotonic(), metadata=metadata)
        self.spans.append(s)
        try:
            yield s
        finally:
            s.finished_at = time.monotonic()

    @property
    def elapsed_ms(self) -> float:
        return (time.monotonic() - self._started_at) * 1000

    @property
    def token_usage(self) -> TokenUsage:
        total = ZERO_USAGE
        for s in self.spans:
            total = total + s.token_usage
        return total

    def stage_count(self, name: str) -> int:
        return sum(1 for s in self.spans if s.name == name)

    def span_summary(self) -> list[dict]:
        return [
            {
                "name": s.name,
                "duration_ms": round(s.duration_ms, 2),
                "input_tokens": s.token_usage.input_tokens,
                "output_tokens": s.token_usage.output_tokens,
                **s.metadata,
            }
            for s in self.spans
        ]
