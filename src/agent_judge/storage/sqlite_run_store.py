"""SQLite-backed evaluation runs and their per-proposition scores."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from uuid import uuid4

import aiosqlite

from agent_judge.exceptions import StorageError
from agent_judge.models.domain import EvaluationRun, PropositionScore, RunStatus, TokenUsage
from agent_judge.storage.migrations import initialize_run_db


class SQLiteEvaluationRunStore:
    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    async def initialize(self) -> None:
        await initialize_run_db(self._db_path)

    async def create_run(self, agent_id: str, dimensions: list[str]) -> EvaluationRun:
        run = EvaluationRun(
            run_id=str(uuid4()), agent_id=agent_id, status="running", dimensions=dimensions
        )
        try:
            async with aiosqlite.connect(self._db_path) as db:
                await db.execute(
                    "INSERT INTO evaluation_runs "
                    "(run_id, agent_id, status, dimensions, sample_size, created_at) "
                    "VALUES (?, ?, ?, ?, ?, ?)",
                    (
                        run.run_id,
                        run.agent_id,
                        run.status,
                        json.dumps(run.dimensions),
                        run.sample_size,
                        run.created_at.isoformat(),
                    ),
                )
                await db.commit()
        except aiosqlite.Error as e:
            raise StorageError(f"Failed to create evaluation run: {e}") from e
        return run

    async def update_status(
        self,
        run_id: str,
        status: RunStatus,
        overall_score: float | None = None,
        token_usage: TokenUsage | None = None,
        sample_size: int | None = None,
    ) -> None:
        """Set the status; other columns change only when a value is given."""
        assignments, params = ["status = ?"], [status]
        if overall_score is not None:
            assignments.append("overall_score = ?")
            params.append(overall_score)
        if token_usage is not None:
            assignments.append("token_usage = ?")
            params.append(json.dumps(token_usage.to_dict()))
        if sample_size is not None:
            assignments.append("sample_size = ?")
            params.append(sample_size)

        try:
            async with aiosqlite.connect(self._db_path) as db:
                await db.execute(
                    f"UPDATE evaluation_runs SET {', '.join(assignments)} WHERE run_id = ?",
                    (*params, run_id),
                )
                await db.commit()
        except aiosqlite.Error as e:
            raise StorageError(f"Failed to update evaluation run {run_id}: {e}") from e

    async def record_score(
        self,
        run_id: str,
        dimension: str,
        proposition_id: str,
        score: float,
        reasoning: str,
    ) -> None:
        try:
            async with aiosqlite.connect(self._db_path) as db:
                await db.execute(
                    "INSERT INTO evaluation_scores "
                    "(run_id, dimension, proposition_id, score, reasoning) "
                    "VALUES (?, ?, ?, ?, ?)",
                    (run_id, dimension, proposition_id, score, reasoning),
                )
                await db.commit()
        except aiosqlite.Error as e:
            raise StorageError(f"Failed to record score for run {run_id}: {e}") from e

    async def get_run(self, run_id: str) -> EvaluationRun | None:
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT * FROM evaluation_runs WHERE run_id = ?", (run_id,)
            ) as cursor:
                row = await cursor.fetchone()
                if row is None:
                    return None
                return EvaluationRun(
                    run_id=row["run_id"],
                    agent_id=row["agent_id"],
                    status=row["status"],
                    dimensions=json.loads(row["dimensions"]),
                    sample_size=row["sample_size"],
                    overall_score=row["overall_score"],
                    token_usage=(
                        TokenUsage(**json.loads(row["token_usage"]))
                        if row["token_usage"]
                        else None
                    ),
                    created_at=datetime.fromisoformat(row["created_at"]).astimezone(
                        timezone.utc
                    ),
                )

    async def get_scores(self, run_id: str) -> list[PropositionScore]:
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT proposition_id, score, reasoning FROM evaluation_scores "
                "WHERE run_id = ? ORDER BY score_id",
                (run_id,),
            ) as cursor:
                rows = await cursor.fetchall()
                return [
                    PropositionScore(
                        proposition_id=row["proposition_id"],
                        score=row["score"],
                        reasoning=row["reasoning"],
                    )
                    for row in rows
                ]
