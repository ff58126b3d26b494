"""SQLite-backed audit logs for correction attempts and intervention evaluations."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import aiosqlite

from agent_judge.exceptions import StorageError
from agent_judge.models.domain import CorrectionLog, InterventionLog, TokenUsage
from agent_judge.storage.migrations import initialize_log_db


def _iso(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat()


def _parse_ts(value: str) -> datetime:
    return datetime.fromisoformat(value).astimezone(timezone.utc)


def _dump_usage(usage: TokenUsage | None) -> str | None:
    return json.dumps(usage.to_dict()) if usage is not None else None


def _load_usage(value: str | None) -> TokenUsage | None:
    if not value:
        return None
    return TokenUsage(**json.loads(value))


def _opt_bool(value: int | None) -> bool | None:
    return None if value is None else bool(value)


class SQLiteCorrectionLogStore:
    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    async def initialize(self) -> None:
        await initialize_log_db(self._db_path)

    async def save(self, record: CorrectionLog) -> None:
        try:
            async with aiosqlite.connect(self._db_path) as db:
                await db.execute(
                    "INSERT OR REPLACE INTO correction_logs "
                    "(log_id, agent_id, run_id, channel_id, original_text, final_text, stage, "
                    "attempt_number, outcome, dimension_scores, similarity_score, total_score, "
                    "token_usage, duration_ms, created_at) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        record.log_id,
                        record.agent_id,
                        record.run_id,
                        record.channel_id,
                        record.original_text,
                        record.final_text,
                        record.stage,
                        record.attempt_number,
                        record.outcome,
                        json.dumps(record.dimension_scores),
                        record.similarity_score,
                        record.total_score,
                        _dump_usage(record.token_usage),
                        record.duration_ms,
                        _iso(record.created_at),
                    ),
                )
                await db.commit()
        except aiosqlite.Error as e:
            raise StorageError(f"Failed to save correction log: {e}") from e

    async def list(
        self,
        agent_id: str | None = None,
        since: datetime | None = None,
        limit: int = 50,
    ) -> list[CorrectionLog]:
        """Newest first."""
        clauses, params = [], []
        if agent_id is not None:
            clauses.append("agent_id = ?")
            params.append(agent_id)
        if since is not None:
            clauses.append("created_at >= ?")
            params.append(_iso(since))
        where = f"WHERE {' AND '.join(clauses)} " if clauses else ""

        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                f"SELECT * FROM correction_logs {where}ORDER BY created_at DESC LIMIT ?",
                (*params, limit),
            ) as cursor:
                rows = await cursor.fetchall()
                return [self._row_to_log(row) for row in rows]

    @staticmethod
    def _row_to_log(row: aiosqlite.Row) -> CorrectionLog:
        return CorrectionLog(
            log_id=row["log_id"],
            agent_id=row["agent_id"],
            run_id=row["run_id"],
            channel_id=row["channel_id"],
            original_text=row["original_text"],
            final_text=row["final_text"],
            stage=row["stage"],
            attempt_number=row["attempt_number"],
            outcome=row["outcome"],
            dimension_scores=json.loads(row["dimension_scores"]),
            similarity_score=row["similarity_score"],
            total_score=row["total_score"],
            token_usage=_load_usage(row["token_usage"]),
            duration_ms=row["duration_ms"],
            created_at=_parse_ts(row["created_at"]),
        )


class SQLiteInterventionLogStore:
    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    async def initialize(self) -> None:
        await initialize_log_db(self._db_path)

    async def save(self, record: InterventionLog) -> None:
        try:
            async with aiosqlite.connect(self._db_path) as db:
                await db.execute(
                    "INSERT OR REPLACE INTO intervention_logs "
                    "(log_id, agent_id, channel_id, intervention_type, textual_precondition, "
                    "textual_precondition_result, functional_precondition_result, "
                    "propositional_precondition_result, fired, nudge_text, token_usage, created_at) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        record.log_id,
                        record.agent_id,
                        record.channel_id,
                        record.intervention_type,
                        record.textual_precondition,
                        record.textual_precondition_result,
                        record.functional_precondition_result,
                        record.propositional_precondition_result,
                        record.fired,
                        record.nudge_text,
                        _dump_usage(record.token_usage),
                        _iso(record.created_at),
                    ),
                )
                await db.commit()
        except aiosqlite.Error as e:
            raise StorageError(f"Failed to save intervention log: {e}") from e

    async def list(
        self,
        agent_id: str | None = None,
        channel_id: str | None = None,
        intervention_type: str | None = None,
        fired: bool | None = None,
        since: datetime | None = None,
        limit: int = 50,
    ) -> list[InterventionLog]:
        clauses, params = [], []
        for column, value in (
            ("agent_id", agent_id),
            ("channel_id", channel_id),
            ("intervention_type", intervention_type),
        ):
            if value is not None:
                clauses.append(f"{column} = ?")
                params.append(value)
        if fired is not None:
            clauses.append("fired = ?")
            params.append(int(fired))
        if since is not None:
            clauses.append("created_at >= ?")
            params.append(_iso(since))
        where = f"WHERE {' AND '.join(clauses)} " if clauses else ""

        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                f"SELECT * FROM intervention_logs {where}ORDER BY created_at DESC LIMIT ?",
                (*params, limit),
            ) as cursor:
                rows = await cursor.fetchall()
                return [self._row_to_log(row) for row in rows]

    @staticmethod
    def _row_to_log(row: aiosqlite.Row) -> InterventionLog:
        return InterventionLog(
            log_id=row["log_id"],
            agent_id=row["agent_id"],
            channel_id=row["channel_id"],
            intervention_type=row["intervention_type"],
            textual_precondition=row["textual_precondition"],
            textual_precondition_result=_opt_bool(row["textual_precondition_result"]),
            functional_precondition_result=_opt_bool(row["functional_precondition_result"]),
            propositional_precondition_result=_opt_bool(
                row["propositional_precondition_result"]
            ),
            fired=bool(row["fired"]),
            nudge_text=row["nudge_text"],
            token_usage=_load_usage(row["token_usage"]) or TokenUsage(),
            created_at=_parse_ts(row["created_at"]),
        )
