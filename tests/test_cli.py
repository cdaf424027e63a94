"""Tests for the click CLI: init-db, enqueue, status, run --once."""

import pytest
from click.testing import CliRunner

from notifier import cli as cli_module
from notifier.config import config


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "DB_PATH", tmp_path / "cli.duckdb")
    monkeypatch.setattr(config, "DELIVERY_CHANNEL", "log")
    monkeypatch.setattr(cli_module, "setup_logging", lambda **kwargs: None)
    return CliRunner()


def test_init_db(runner, tmp_path):
    result = runner.invoke(cli_module.cli, ["init-db"])
    assert result.exit_code == 0, result.output
    assert (tmp_path / "cli.duckdb").exists()


def test_enqueue_then_status(runner):
    result = runner.invoke(
        cli_module.cli,
        ["enqueue", "--user", "u1", "--title", "Hi", "--message", "Body", "--metadata", '{"a": 1}'],
    )
    assert result.exit_code == 0, result.output
    assert "Queued notification" in result.output

    result = runner.invoke(cli_module.cli, ["status"])
    assert result.exit_code == 0, result.output
    assert "Pending notifications: 1" in result.output


def test_enqueue_rejects_bad_metadata(runner):
    result = runner.invoke(
        cli_module.cli,
        ["enqueue", "--user", "u1", "--title", "Hi", "--message", "Body", "--metadata", "{bad"],
    )
    assert result.exit_code != 0
    assert "--metadata" in result.output


def test_run_once_delivers_due_notifications(runner):
    runner.invoke(cli_module.cli, ["enqueue", "--user", "u1", "--title", "Hi", "--message", "Body"])

    result = runner.invoke(cli_module.cli, ["run", "--once"])
    assert result.exit_code == 0, result.output
    assert "Delivered: 1" in result.output

    result = runner.invoke(cli_module.cli, ["status"])
    assert "Pending notifications: 0" in result.output


def test_run_rejects_invalid_config(runner, monkeypatch):
    monkeypatch.setattr(config, "DELIVERY_CHANNEL", "webhook")
    monkeypatch.setattr(config, "WEBHOOK_URL", "")
    result = runner.invoke(cli_module.cli, ["run", "--once"])
    assert result.exit_code == 2


def test_run_builds_worker_inside_the_event_loop(runner, monkeypatch):
    import asyncio

    from notifier.worker import service

    seen = {}

    class _Worker:
        async def run_forever(self):
            return 0

    def _build_worker(db, cfg=None, channel=None):
        seen["loop"] = asyncio.get_running_loop()
        return _Worker()

    monkeypatch.setattr(service, "build_worker", _build_worker)
    monkeypatch.setattr(config, "STATUS_PORT", 0)

    result = runner.invoke(cli_module.cli, ["run"])
    assert result.exit_code == 0, result.output
    assert seen["loop"] is not None
