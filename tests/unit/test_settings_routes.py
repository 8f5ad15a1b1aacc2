from __future__ import annotations

import json
from pathlib import Path

import pytest

from coding_round import GENERATE_QUESTIONS_KEY
from config import Settings, load_config, load_route, resolve_route
from interview_session import CHAT_AGENT_KEY
from resume_analysis import ANALYZE_RESUME_KEY
from roadmap import GENERATE_ROADMAP_KEY

ROOT = Path(__file__).resolve().parents[2]


def test_settings_defaults():
    settings = Settings()
    assert settings.MAX_ROUND_TRIPS == 6
    assert settings.COMPLETION_PHRASE == "interview is now complete"
    assert settings.REPORT_DELAY_SECONDS == 3.0
    assert settings.HISTORY_KEY == "interview_history"
    assert settings.DB_PATH.endswith(".db")


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("MAX_ROUND_TRIPS", "4")
    monkeypatch.setenv("REPORT_SEED", "11")
    settings = Settings()
    assert settings.MAX_ROUND_TRIPS == 4
    assert settings.REPORT_SEED == 11


def test_bundled_config_resolves_every_registry_key():
    cfg = load_config(ROOT / "app_config.json")
    for key in (CHAT_AGENT_KEY, ANALYZE_RESUME_KEY, GENERATE_QUESTIONS_KEY, GENERATE_ROADMAP_KEY):
        route = resolve_route(cfg, key)
        assert route.base_url.startswith("https://")
        assert route.api_key_env


def test_missing_registry_entry(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"llm_routes": {}, "registry": {"a": "missing"}}), encoding="utf-8")
    with pytest.raises(KeyError):
        load_route(path, "b")
    with pytest.raises(KeyError):
        load_route(path, "a")
