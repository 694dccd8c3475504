import sqlite3
from pathlib import Path
from typing import Any

from data.models import DecisionResult


def ensure_db(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(path) as conn:
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS decisions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
                level TEXT NOT NULL,
                correct INTEGER NOT NULL,
                frustration REAL NOT NULL,
                action TEXT NOT NULL,
                suggested_level TEXT NOT NULL
            );
            """
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_decisions_action ON decisions(action);"
        )


def write_decision(db_path: Path, level: str, correct: bool, result: DecisionResult) -> None:
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            """
            INSERT INTO decisions (level, correct, frustration, action, suggested_level)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                level,
                int(correct),
                result.frustration_value,
                result.action.value,
                result.suggested_level.value,
            ),
        )
        conn.commit()


def summarize_decisions(db_path: Path, limit: int = 1000) -> dict[str, Any]:
    safe_limit = max(1, int(limit))
    empty = {"count": 0, "actions": {}, "mean_frustration": 0.0}
    if not db_path.exists():
        return empty

    with sqlite3.connect(f"file:{db_path}?mode=ro", uri=True) as conn:
        rows = conn.execute(
            """
            SELECT action, frustration
            FROM decisions
            ORDER BY id DESC
            LIMIT ?
            """,
            (safe_limit,),
        ).fetchall()

    if not rows:
        return empty
    actions: dict[str, int] = {}
    for action, _ in rows:
        actions[action] = actions.get(action, 0) + 1
    mean_f = sum(f for _, f in rows) / len(rows)
    return {"count": len(rows), "actions": actions, "mean_frustration": round(mean_f, 2)}
