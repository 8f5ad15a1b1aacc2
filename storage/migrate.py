"""SQLite schema migrations."""
from __future__ import annotations

from typing import Iterable, Optional

from .sqlite import get_conn

SCHEMA: Iterable[str] = [
    """
CREATE TABLE IF NOT EXISTS kv_store (
  key TEXT PRIMARY KEY,
  value TEXT NOT NULL,
  updated_at TEXT NOT NULL
);
""",
]


def migrate(db_path: Optional[str] = None) -> None:
    """Apply schema migrations to the SQLite database."""

    with get_conn(db_path) as conn:
        cur = conn.cursor()
        for stmt in SCHEMA:
            cur.execute(stmt)


if __name__ == "__main__":
    migrate()
