"""SQLite-backed usage log storage."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path

from arete.logging.models import UsageLog

DEFAULT_DB_PATH = Path.home() / ".arete" / "usage.db"

_COLUMNS = (
    "id, session_id, timestamp, mode, elapsed_seconds, total_input_tokens, "
    "total_output_tokens, estimated_cost_usd, gap_count, overall_match, "
    "success, error_kind, error_message"
)


class UsageStore:
    """SQLite store for analysis usage logs, in WAL mode."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS usage_logs (
                    id TEXT PRIMARY KEY,
                    session_id TEXT NOT NULL,
                    timestamp TEXT NOT NULL,
                    mode TEXT NOT NULL,
                    elapsed_seconds REAL NOT NULL DEFAULT 0.0,
                    total_input_tokens INTEGER NOT NULL DEFAULT 0,
                    total_output_tokens INTEGER NOT NULL DEFAULT 0,
                    estimated_cost_usd REAL NOT NULL DEFAULT 0.0,
                    gap_count INTEGER,
                    overall_match INTEGER,
                    success INTEGER NOT NULL DEFAULT 1,
                    error_kind TEXT,
                    error_message TEXT
                )
            """)

    def save_log(self, log: UsageLog) -> None:
        """Persist a usage log entry."""
        with self._connect() as conn:
            conn.execute(
                f"INSERT OR REPLACE INTO usage_logs ({_COLUMNS}) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    log.id,
                    log.session_id,
                    log.timestamp.isoformat(),
                    log.mode,
                    log.elapsed_seconds,
                    log.total_input_tokens,
                    log.total_output_tokens,
                    log.estimated_cost_usd,
                    log.gap_count,
                    log.overall_match,
                    1 if log.success else 0,
                    log.error_kind,
                    log.error_message,
                ),
            )

    def get_logs(self, session_id: str | None = None, limit: int = 50) -> list[UsageLog]:
        """Retrieve usage logs, newest first, optionally filtered by session_id."""
        with self._connect() as conn:
            if session_id is not None:
                rows = conn.execute(
                    f"SELECT {_COLUMNS} FROM usage_logs WHERE session_id = ? "
                    "ORDER BY timestamp DESC LIMIT ?",
                    (session_id, limit),
                ).fetchall()
            else:
                rows = conn.execute(
                    f"SELECT {_COLUMNS} FROM usage_logs ORDER BY timestamp DESC LIMIT ?",
                    (limit,),
                ).fetchall()
        return [self._row_to_log(row) for row in rows]

    def get_stats(self) -> dict:
        """Aggregate run counts, failure kinds and cost across all logs."""
        with self._connect() as conn:
            row = conn.execute(
                """SELECT
                       COUNT(*),
                       SUM(total_input_tokens),
                       SUM(total_output_tokens),
                       SUM(estimated_cost_usd),
                       AVG(overall_match),
                       SUM(CASE WHEN success = 1 THEN 1 ELSE 0 END)
                   FROM usage_logs"""
            ).fetchone()
            kinds = conn.execute(
                "SELECT error_kind, COUNT(*) FROM usage_logs "
                "WHERE error_kind IS NOT NULL GROUP BY error_kind"
            ).fetchall()
        total = row[0] or 0
        return {
            "total_runs": total,
            "total_input_tokens": row[1] or 0,
            "total_output_tokens": row[2] or 0,
            "total_cost_usd": row[3] or 0.0,
            "avg_overall_match": round(row[4], 1) if row[4] is not None else None,
            "success_rate": (row[5] / total * 100) if total else 0.0,
            "failures": {kind: count for kind, count in kinds},
        }

    @staticmethod
    def _row_to_log(row: tuple) -> UsageLog:
        return UsageLog(
            id=row[0],
            session_id=row[1],
            timestamp=datetime.fromisoformat(row[2]),
            mode=row[3],
            elapsed_seconds=row[4],
            total_input_tokens=row[5],
            total_output_tokens=row[6],
            estimated_cost_usd=row[7],
            gap_count=row[8],
            overall_match=row[9],
            success=bool(row[10]),
            error_kind=row[11],
            error_message=row[12],
        )
