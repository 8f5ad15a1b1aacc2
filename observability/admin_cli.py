"""Lightweight CLI helpers for inspecting interview history."""
from __future__ import annotations

import argparse
from typing import List, Optional

from config.settings import settings
from storage.history import HistoryStore
from storage.migrate import migrate


def tail_history(limit: int = 20, db_path: Optional[str] = None) -> List[str]:
    path = db_path or settings.DB_PATH
    migrate(path)
    entries = HistoryStore(path).read()
    lines = []
    for entry in reversed(entries[-limit:]):
        lines.append(
            f"[{entry.date}] {entry.id} {entry.type}/{entry.role} "
            f"overall={entry.overall_score} technical={entry.technical_score} "
            f"communication={entry.communication_score}"
        )
    for line in lines:
        print(line)
    return lines


def show_summary(db_path: Optional[str] = None) -> None:
    path = db_path or settings.DB_PATH
    migrate(path)
    summary = HistoryStore(path).summary()
    print(
        f"sessions={summary.total} average={summary.average_score} best={summary.best_score} "
        f"high_scores={summary.high_scores}"
    )


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--tail-history", type=int, help="Show the latest history entries, newest first")
    parser.add_argument("--summary", action="store_true", help="Show dashboard statistics")
    parser.add_argument("--db", help="SQLite database path (defaults to DB_PATH)")
    args = parser.parse_args(argv)

    if args.tail_history:
        tail_history(args.tail_history, args.db)
    if args.summary:
        show_summary(args.db)


if __name__ == "__main__":
    main()
