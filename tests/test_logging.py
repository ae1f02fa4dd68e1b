"""Tests for logging configuration."""

from sqlfixture.config import settings
from sqlfixture.config.logging import truncate_sql


def test_truncate_long_sql(monkeypatch):
    monkeypatch.setattr(settings.logging, "sql_preview_length", 10)

    event = truncate_sql(None, "info", {"event": "Statement executed", "sql": "\nSELECT * FROM users"})

    assert event["sql"] == "SELECT * F... (19 chars)"


def test_short_sql_is_stripped_only():
    event = truncate_sql(None, "info", {"event": "x", "sql": "\nSELECT 1"})
    assert event["sql"] == "SELECT 1"


def test_events_without_sql_are_untouched():
    event = {"event": "x", "rows": 3}
    assert truncate_sql(None, "info", event) == {"event": "x", "rows": 3}
