# FILE: tests/test_telemetry.py

import json

import pytest
from certquiz.config import reload_settings
from certquiz.services.telemetry import (
    get_telemetry_summary, init_telemetry, record_event, reset_telemetry
)


@pytest.fixture
def telemetry_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("LOGS_DIR", str(tmp_path))
    monkeypatch.setenv("TELEMETRY_ENABLED", "true")
    reload_settings()
    reset_telemetry()
    yield tmp_path / "telemetry"
    monkeypatch.undo()
    reload_settings()
    reset_telemetry()


def test_events_are_counted_and_written(telemetry_dir):
    init_telemetry()
    record_event("session_started", session_id="s1", total_questions=3)
    record_event("answer_graded", session_id="s1", is_correct=True)
    record_event("answer_graded", session_id="s1", is_correct=False)

    summary = get_telemetry_summary()
    assert summary["counters_in_memory"] == {"session_started": 1, "answer_graded": 2}
    assert summary["recent_events"][-1]["is_correct"] is False

    files = list(telemetry_dir.glob("events-*.jsonl"))
    assert len(files) == 1
    lines = files[0].read_text(encoding="utf-8").splitlines()
    assert json.loads(lines[0])["event"] == "session_started"


def test_disabled_telemetry_records_nothing(telemetry_dir, monkeypatch):
    monkeypatch.setenv("TELEMETRY_ENABLED", "false")
    reload_settings()

    record_event("session_started", session_id="s2")

    assert get_telemetry_summary()["total_events_in_memory"] == 0
    assert not telemetry_dir.exists()
