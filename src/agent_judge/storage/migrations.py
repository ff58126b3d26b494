"""Idempotent database schema creation."""

from __future__ import annotations

import aiosqlite

CORRECTION_LOGS_TABLE = """
CREATE TABLE IF NOT EXISTS correction_logs (
    log_id TEXT PRIMARY KEY,
    agent_id TEXT NOT NULL,
    run_id TEXT,
    channel_id TEXT,
    original_text TEXT NOT NULL,
    final_text TEXT NOT NULL,
    stage TEXT NOT NULL,
    attempt_number INTEGER NOT NULL,
    outcome TEXT NOT NULL,
    dimension_scores TEXT NOT NULL DEFAULT '[]',
    similarity_score REAL,
    total_score INTEGER NOT NULL,
    token_usage TEXT,
    duration_ms REAL,
    created_at TEXT NOT NULL
)
"""

CORRECTION_LOGS_AGENT_INDEX = """
CREATE INDEX IF NOT EXISTS idx_correction_logs_agent ON correction_logs(agent_id, created_at)
"""

INTERVENTION_LOGS_TABLE = """
CREATE TABLE IF NOT EXISTS intervention_logs (
    log_id TEXT PRIMARY KEY,
    agent_id TEXT NOT NULL,
    channel_id TEXT,
    intervention_type TEXT NOT NULL,
    textual_precondition TEXT,
    textual_precondition_result INTEGER,
    functional_precondition_result INTEGER,
    propositional_precondition_result INTEGER,
    fired INTEGER NOT NULL,
    nudge_text TEXT,
    token_usage TEXT NOT NULL DEFAULT '{}',
    created_at TEXT NOT NULL
)
"""

INTERVENTION_LOGS_AGENT_INDEX = """
CREATE INDEX IF NOT EXISTS idx_intervention_logs_agent ON intervention_logs(agent_id, created_at)
"""

EVALUATION_RUNS_TABLE = """
CREATE TABLE IF NOT EXISTS evaluation_runs (
    run_id TEXT PRIMARY KEY,
    agent_id TEXT NOT NULL,
    status TEXT NOT NULL,
    dimensions TEXT NOT NULL DEFAULT '[]',
    sample_size INTEGER NOT NULL DEFAULT 0,
    overall_score REAL,
    token_usage TEXT,
    created_at TEXT NOT NULL
)
"""

EVALUATION_SCORES_TABLE = """
CREATE TABLE IF NOT EXISTS evaluation_scores (
    score_id INTEGER PRIMARY KEY AUTOINCREMENT,
    run_id TEXT NOT NULL,
    dimension TEXT NOT NULL,
    proposition_id TEXT NOT NULL,
    score REAL NOT NULL,
    reasoning TEXT NOT NULL,
    FOREIGN KEY (run_id) REFERENCES evaluation_runs(run_id)
)
"""

EVALUATION_SCORES_RUN_INDEX = """
CREATE INDEX IF NOT EXISTS idx_evaluation_scores_run ON evaluation_scores(run_id)
"""


async def initialize_log_db(db_path: str) -> None:
    async with aiosqlite.connect(db_path) as db:
        await db.execute(CORRECTION_LOGS_TABLE)
        await db.execute(CORRECTION_LOGS_AGENT_INDEX)
        await db.execute(INTERVENTION_LOGS_TABLE)
        await db.execute(INTERVENTION_LOGS_AGENT_INDEX)
        await db.commit()


async def initialize_run_db(db_path: str) -> None:
    async with aiosqlite.connect(db_path) as db:
        await db.execute(EVALUATION_RUNS_TABLE)
        await db.execute(EVALUATION_SCORES_TABLE)
        await db.execute(EVALUATION_SCORES_RUN_INDEX)
        await db.commit()
