from __future__ import annotations

import json
import threading
from datetime import datetime, timezone

from config.settings import settings
from session_reports import early_exit_report
from storage.history import HistoryEntry, HistoryStore
from storage.sqlite import get_conn

NOW = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


def _entry(entry_id: str, overall: int, technical: int = 70, communication: int = 65) -> HistoryEntry:
    return HistoryEntry(
        id=entry_id,
        date=NOW.isoformat(),
        type="technical",
        role="SDE",
        overall_score=overall,
        technical_score=technical,
        communication_score=communication,
    )


def test_empty_store_reads_empty():
    assert HistoryStore().read() == []


def test_append_keeps_creation_order():
    store = HistoryStore()
    for index in range(5):
        store.append(_entry(str(index), 60 + index))
    assert [e.id for e in store.read()] == ["0", "1", "2", "3", "4"]


def test_record_report_builds_entry_with_unique_ids(config):
    store = HistoryStore()
    report = early_exit_report()

    first = store.record_report(report, config, NOW)
    second = store.record_report(report, config, NOW)

    assert first.id == str(int(NOW.timestamp() * 1000))
    assert int(second.id) == int(first.id) + 1
    assert first.type == "technical"
    assert first.role == "Backend Engineer"
    assert first.overall_score == 50
    assert len(store.read()) == 2


def test_stored_document_uses_camel_case_under_history_key():
    HistoryStore().append(_entry("1", 80))
    with get_conn() as conn:
        raw = conn.execute("SELECT value FROM kv_store WHERE key = ?", (settings.HISTORY_KEY,)).fetchone()[0]
    assert '"overallScore": 80' in raw


def test_malformed_document_reads_empty():
    with get_conn() as conn:
        conn.execute(
            "INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)",
            (settings.HISTORY_KEY, "{not json", NOW.isoformat()),
        )
    store = HistoryStore()
    assert store.read() == []
    store.append(_entry("1", 70))
    assert len(store.read()) == 1
    with get_conn() as conn:
        kept = conn.execute("SELECT value FROM kv_store WHERE key LIKE ?", (settings.HISTORY_KEY + ".unreadable.%",)).fetchall()
    assert [row[0] for row in kept] == ["{not json"]


def test_summary_statistics():
    store = HistoryStore()
    assert store.summary().total == 0
    assert store.summary().best_score == 0
    store.append(_entry("1", 50, technical=50, communication=50))
    store.append(_entry("2", 85, technical=90, communication=80))
    store.append(_entry("3", 80, technical=75, communication=71))

    summary = store.summary()

    assert summary.total == 3
    assert summary.average_score == 72
    assert summary.best_score == 85
    assert summary.high_scores == 2
    assert summary.average_technical == 72
    assert summary.average_communication == 67
    assert [e.id for e in summary.entries] == ["3", "2", "1"]


def _stored_items() -> list:
    with get_conn() as conn:
        raw = conn.execute("SELECT value FROM kv_store WHERE key = ?", (settings.HISTORY_KEY,)).fetchone()[0]
    return json.loads(raw)


def _store_items(items: list) -> None:
    with get_conn() as conn:
        conn.execute("UPDATE kv_store SET value = ? WHERE key = ?", (json.dumps(items), settings.HISTORY_KEY))


def test_record_report_keeps_entries_that_fail_validation(config):
    store = HistoryStore()
    report = early_exit_report()
    store.record_report(report, config, NOW)
    store.record_report(report, config, NOW)
    items = _stored_items()
    items[0]["overallScore"] = 72.5
    items[1]["technicalScore"] = "n/a"
    _store_items(items)

    store.record_report(report, config, NOW)

    stored = _stored_items()
    assert len(stored) == 3
    assert stored[1]["technicalScore"] == "n/a"
    entries = store.read()
    assert [entry.id for entry in entries] == [stored[0]["id"], stored[2]["id"]]
    assert entries[0].overall_score == 73


def test_concurrent_record_report_keeps_every_entry(config):
    store = HistoryStore()
    report = early_exit_report()
    workers = 20
    barrier = threading.Barrier(workers)
    errors = []

    def finish_session():
        try:
            barrier.wait()
            store.record_report(report, config, NOW)
        except Exception as exc:  # noqa: BLE001
            errors.append(exc)

    threads = [threading.Thread(target=finish_session) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    entries = store.read()
    assert len(entries) == workers
    assert len({entry.id for entry in entries}) == workers
