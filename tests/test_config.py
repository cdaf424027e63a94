"""Tests for Config env overrides/validation and time helpers."""

from datetime import datetime, timedelta, timezone

import pytest

from notifier.config import Config
from notifier.utils.timeutil import parse_timestamp


def test_defaults():
    cfg = Config()
    assert cfg.DELIVERY_INTERVAL == 60
    assert cfg.SCHEDULING_INTERVAL == 900


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("DELIVERY_INTERVAL", "5")
    monkeypatch.setenv("DELIVERY_CHANNEL", "WEBHOOK")
    monkeypatch.setenv("NOTIFIER_DB_PATH", str(tmp_path / "env.duckdb"))
    cfg = Config()
    assert cfg.DELIVERY_INTERVAL == 5
    assert cfg.DELIVERY_CHANNEL == "webhook"
    assert cfg.DB_PATH == tmp_path / "env.duckdb"


def test_validate_rejects_webhook_without_url():
    cfg = Config()
    cfg.DELIVERY_CHANNEL = "webhook"
    cfg.WEBHOOK_URL = ""
    with pytest.raises(ValueError):
        cfg.validate()


def test_validate_rejects_non_positive_interval():
    cfg = Config()
    cfg.DELIVERY_INTERVAL = 0
    with pytest.raises(ValueError):
        cfg.validate()


def test_parse_timestamp_normalizes_to_naive_utc():
    assert parse_timestamp("2025-03-10T14:00:00+02:00") == datetime(2025, 3, 10, 12, 0)
    assert parse_timestamp("2025-03-10T12:00:00Z") == datetime(2025, 3, 10, 12, 0)
    aware = datetime(2025, 3, 10, 7, 0, tzinfo=timezone(timedelta(hours=-5)))
    assert parse_timestamp(aware) == datetime(2025, 3, 10, 12, 0)
    assert parse_timestamp(None) is None
