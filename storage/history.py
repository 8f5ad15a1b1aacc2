"""Append-only interview history kept as one JSON document in ``kv_store``."""
from __future__ import annotations

import datetime as dt
import json
import logging
import sqlite3
import threading
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from config.settings import settings
from interview_setup import InterviewConfig
from services.scoring import round_half_up
from session_reports import InterviewReport

from .sqlite import get_conn

logger = logging.getLogger(__name__)

HIGH_SCORE_THRESHOLD = 80

_WRITE_LOCK = threading.Lock()  # Serialises read-modify-write within one process


class HistoryEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    date: str
    type: str
    role: str
    overall_score: int = Field(alias="overallScore")
    technical_score: int = Field(alias="technicalScore")
    communication_score: int = Field(alias="communicationScore")

    @field_validator("overall_score", "technical_score", "communication_score", mode="before")
    @classmethod
    def _whole_score(cls, value: Any) -> Any:  # Fractional scores round half-up
        if isinstance(value, float):
            return round_half_up(value)
        return value


class HistorySummary(BaseModel):  # Dashboard statistics
    model_config = ConfigDict(populate_by_name=True)

    total: int = 0
    average_score: int = Field(default=0, alias="averageScore")
    best_score: int = Field(default=0, alias="bestScore")
    high_scores: int = Field(default=0, alias="highScores")
    average_technical: int = Field(default=0, alias="averageTechnical")
    average_communication: int = Field(default=0, alias="averageCommunication")
    entries: List[HistoryEntry] = Field(default_factory=list)


class HistoryStore:
    """Read and append completed-session summaries.

    Writes keep every stored item verbatim, including ones that no longer
    validate, and add the new entry at the end. A document that cannot be
    parsed at all is copied to a side key before a fresh log is started.
    """

    def __init__(self, db_path: Optional[str] = None, key: Optional[str] = None) -> None:
        self.db_path = db_path
        self.key = key or settings.HISTORY_KEY

    def read(self) -> List[HistoryEntry]:
        with get_conn(self.db_path) as conn:
            items, _ = self._load(conn)
        return self._validate(items)

    def append(self, entry: HistoryEntry) -> List[HistoryEntry]:
        _, items = self._mutate(lambda _: entry)
        logger.info("History entry appended id=%s total=%d", entry.id, len(items))
        return self._validate(items)

    def record_report(
        self,
        report: InterviewReport,
        config: InterviewConfig,
        now: Optional[dt.datetime] = None,
    ) -> HistoryEntry:
        """Append one entry for a finished report and return it."""

        stamp = now or dt.datetime.now(dt.timezone.utc)

        def build(items: List[Any]) -> HistoryEntry:
            entry_id = int(stamp.timestamp() * 1000)
            taken = [
                int(item["id"])
                for item in items
                if isinstance(item, dict) and str(item.get("id", "")).isdigit()
            ]
            if taken and entry_id <= max(taken):
                entry_id = max(taken) + 1
            return HistoryEntry(
                id=str(entry_id),
                date=stamp.isoformat(),
                type=config.interview_type,
                role=config.role,
                overall_score=report.overall_score,
                technical_score=report.technical_score,
                communication_score=report.communication_score,
            )

        entry, _ = self._mutate(build)
        logger.info("History entry recorded id=%s kind=%s overall=%d", entry.id, report.kind, entry.overall_score)
        return entry

    def summary(self) -> HistorySummary:
        entries = self.read()
        if not entries:
            return HistorySummary()
        count = len(entries)
        overall = [entry.overall_score for entry in entries]
        return HistorySummary(
            total=count,
            average_score=round_half_up(sum(overall) / count),
            best_score=max(overall),
            high_scores=sum(1 for score in overall if score >= HIGH_SCORE_THRESHOLD),
            average_technical=round_half_up(sum(entry.technical_score for entry in entries) / count),
            average_communication=round_half_up(sum(entry.communication_score for entry in entries) / count),
            entries=list(reversed(entries)),
        )

    def _mutate(self, build) -> Tuple[HistoryEntry, List[Any]]:  # One locked transaction: load, append build(items), write back
        with _WRITE_LOCK, get_conn(self.db_path) as conn:
            conn.execute("BEGIN IMMEDIATE")
            items, unreadable = self._load(conn)
            if unreadable is not None:
                backup = f"{self.key}.unreadable.{dt.datetime.now(dt.timezone.utc).strftime('%Y%m%dT%H%M%S%f')}"
                self._upsert(conn, backup, unreadable)
                logger.warning("Unreadable history under key=%s preserved as key=%s", self.key, backup)
            entry = build(items)
            items.append(entry.model_dump(by_alias=True))
            self._upsert(conn, self.key, json.dumps(items))
        return entry, items

    def _load(self, conn: sqlite3.Connection) -> Tuple[List[Any], Optional[str]]:
        """Return the stored items and, when the document cannot be parsed, its raw text."""

        row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (self.key,)).fetchone()
        if row is None:
            return [], None
        try:
            raw = json.loads(row[0])
        except ValueError as exc:
            logger.warning("Ignoring malformed history under key=%s: %s", self.key, exc)
            return [], row[0]
        if not isinstance(raw, list):
            logger.warning("Ignoring history under key=%s: document is not a list", self.key)
            return [], row[0]
        return raw, None

    def _validate(self, items: List[Any]) -> List[HistoryEntry]:
        entries: List[HistoryEntry] = []
        for index, item in enumerate(items):
            try:
                entries.append(HistoryEntry.model_validate(item))
            except ValidationError as exc:
                logger.warning("Skipping history item %d under key=%s: %s", index, self.key, exc)
        return entries

    @staticmethod
    def _upsert(conn: sqlite3.Connection, key: str, value: str) -> None:
        conn.execute(
            """INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
               ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at""",
            (key, value, dt.datetime.now(dt.timezone.utc).isoformat()),
        )


__all__ = ["HIGH_SCORE_THRESHOLD", "HistoryEntry", "HistoryStore", "HistorySummary"]
