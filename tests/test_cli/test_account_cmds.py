"""Tests for the account, market and coach CLI commands."""

from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from trademind.cli.app import app
from trademind.core.models import JournalProfile
from trademind.market.models import PriceEstimate, VixReading
from trademind.storage.journal_store import JournalStore

runner = CliRunner()


@pytest.fixture
def store(tmp_path, monkeypatch):
    path = tmp_path / "journal.json"
    monkeypatch.setenv("TRADEMIND_DATA_PATH", str(path))
    monkeypatch.setenv("TRADEMIND_EXPORT_DIR", str(tmp_path / "out"))
    monkeypatch.setenv("TRADEMIND_OFFLINE_MODE", "true")
    monkeypatch.setenv("TRADEMIND_ANTHROPIC_API_KEY", "")
    return JournalStore(path)


@pytest.fixture
def seeded(store, make_trade, make_closed_trade):
    store.save(
        JournalProfile(
            trades=[
                make_closed_trade(3.0, pnl=50.0, id="a", setup="ORB"),
                make_trade(id="b"),
            ]
        )
    )
    return store


class TestStats:
    def test_table(self, seeded):
        result = runner.invoke(app, ["account", "stats"])
        assert result.exit_code == 0, result.output
        assert "Win Rate" in result.output
        assert "ORB" in result.output

    def test_json(self, seeded):
        result = runner.invoke(app, ["account", "stats", "--output", "json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["metrics"]["total_pnl"] == 50.0
        assert data["by_setup"] == {"ORB": 50.0}
        assert data["equity_curve"][-1]["balance"] == 10_050.0

    def test_calendar(self, seeded):
        result = runner.invoke(app, ["account", "calendar", "--month", "2024-05"])
        assert result.exit_code == 0, result.output
        assert "2024-05-15" in result.output

    def test_calendar_bad_month(self, seeded):
        result = runner.invoke(app, ["account", "calendar", "--month", "May"])
        assert result.exit_code == 1


class TestSettings:
    def test_show(self, store):
        result = runner.invoke(app, ["account", "settings", "show"])
        assert result.exit_code == 0
        assert "Max Trades / Day" in result.output

    def test_set(self, store):
        result = runner.invoke(app, ["account", "settings", "set", "--max-trades", "5", "--stop", "15"])
        assert result.exit_code == 0, result.output
        settings = store.load().settings
        assert settings.max_trades_per_day == 5
        assert settings.default_stop_loss_percent == 15
        assert settings.default_target_percent == 40

    def test_set_invalid(self, store):
        result = runner.invoke(app, ["account", "settings", "set", "--max-risk", "0"])
        assert result.exit_code == 1
        assert store.load().settings.max_risk_per_trade_percent == 4


class TestSessions:
    def test_reset(self, seeded):
        result = runner.invoke(app, ["account", "reset", "--capital", "20000", "--yes"])
        assert result.exit_code == 0, result.output
        profile = seeded.load()
        assert profile.trades == []
        assert profile.initial_capital == 20_000
        assert profile.archives[0].total_pnl == 50.0

        history = runner.invoke(app, ["account", "history"])
        assert history.exit_code == 0
        assert "Archived Sessions" in history.output

    def test_reset_rejects_bad_capital(self, seeded):
        result = runner.invoke(app, ["account", "reset", "--capital", "0", "--yes"])
        assert result.exit_code == 1
        assert len(seeded.list_trades()) == 2


class TestExportBackup:
    def test_export_csv(self, seeded, tmp_path):
        target = tmp_path / "trades.csv"
        result = runner.invoke(app, ["account", "export", "--path", str(target)])
        assert result.exit_code == 0, result.output
        assert target.read_text().startswith("Date,Ticker,Direction")

    def test_export_empty(self, store):
        result = runner.invoke(app, ["account", "export"])
        assert result.exit_code == 1
        assert "No trades" in result.output

    def test_backup_and_restore(self, seeded, tmp_path):
        target = tmp_path / "backup.json"
        assert runner.invoke(app, ["account", "backup", "--path", str(target)]).exit_code == 0

        seeded.save(JournalProfile())
        result = runner.invoke(app, ["account", "restore", str(target), "--yes"])
        assert result.exit_code == 0, result.output
        assert len(seeded.list_trades()) == 2

    def test_restore_missing(self, store, tmp_path):
        result = runner.invoke(app, ["account", "restore", str(tmp_path / "nope.json"), "--yes"])
        assert result.exit_code == 1


class TestMarket:
    @pytest.fixture
    def online(self, store, monkeypatch):
        monkeypatch.setenv("TRADEMIND_OFFLINE_MODE", "false")
        return store

    def test_vix(self, online):
        with patch("trademind.cli.market_cmds.fetch_vix", return_value=VixReading(value=31.5)):
            result = runner.invoke(app, ["market", "vix"])
        assert result.exit_code == 0, result.output
        assert "31.50" in result.output
        assert "high volatility" in result.output

    def test_vix_unavailable(self, online):
        with patch("trademind.cli.market_cmds.fetch_vix", return_value=None):
            result = runner.invoke(app, ["market", "vix"])
        assert result.exit_code == 1

    def test_vix_skipped_offline(self, store):
        with patch("trademind.cli.market_cmds.fetch_vix") as mock_fetch:
            result = runner.invoke(app, ["market", "vix"])
        assert result.exit_code == 1
        assert "Offline mode" in result.output
        mock_fetch.assert_not_called()

    def test_price_skipped_offline(self, seeded):
        with patch("trademind.cli.market_cmds.estimate_price") as mock_estimate:
            result = runner.invoke(app, ["market", "price", "b"])
        assert result.exit_code == 1
        assert "Offline mode" in result.output
        mock_estimate.assert_not_called()

    def test_price(self, seeded, monkeypatch):
        monkeypatch.setenv("TRADEMIND_OFFLINE_MODE", "false")
        estimate = PriceEstimate(text="Option last price: $3.00", price=3.0)
        with patch("trademind.cli.market_cmds.estimate_price", return_value=estimate):
            result = runner.invoke(app, ["market", "price", "b"])
        assert result.exit_code == 0, result.output
        assert "$3.00" in result.output

    def test_price_unknown_trade(self, online):
        result = runner.invoke(app, ["market", "price", "zz"])
        assert result.exit_code == 1
        assert "not found" in result.output


class TestUnreadableJournal:
    @pytest.fixture
    def corrupt(self, store):
        store.path.write_text("{not json")
        return store

    @pytest.mark.parametrize(
        "args",
        [
            ["account", "stats"],
            ["account", "history"],
            ["account", "settings", "show"],
            ["account", "reset", "--capital", "5000", "--yes"],
            ["account", "export"],
            ["account", "backup"],
        ],
    )
    def test_reports_and_exits(self, corrupt, args):
        result = runner.invoke(app, args)
        assert result.exit_code == 1
        assert "not valid JSON" in " ".join(result.output.split())
        assert corrupt.path.read_text() == "{not json"

    def test_restore_replaces_corrupt_file(self, corrupt, tmp_path, make_trade):
        backup = tmp_path / "backup.json"
        backup.write_text(JournalProfile(trades=[make_trade(id="a")]).model_dump_json())
        result = runner.invoke(app, ["account", "restore", str(backup), "--yes"])
        assert result.exit_code == 0, result.output
        assert [t.id for t in corrupt.list_trades()] == ["a"]


class TestCoach:
    def test_without_key(self, seeded):
        result = runner.invoke(app, ["coach"])
        assert result.exit_code == 1
        assert "Coach unavailable" in result.output

    @patch("trademind.coach.llm.TradingCoach.coaching_insight", return_value="**Size down.**")
    @patch("trademind.coach.llm.anthropic.Anthropic")
    def test_insight(self, MockAnthropic, mock_insight, seeded, monkeypatch):
        monkeypatch.setenv("TRADEMIND_ANTHROPIC_API_KEY", "test-key")
        monkeypatch.setenv("TRADEMIND_OFFLINE_MODE", "false")
        MockAnthropic.return_value = MagicMock()
        result = runner.invoke(app, ["coach"])
        assert result.exit_code == 0, result.output
        assert "Size down." in result.output
