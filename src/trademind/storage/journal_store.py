"""JSON file storage for the journal profile: trades, settings, archives."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from trademind.analytics.metrics import compute_metrics, trades_frame
from trademind.core.models import ArchivedSession, JournalProfile, Trade, UserSettings

logger = logging.getLogger(__name__)

DEFAULT_JOURNAL_PATH = Path("data/journal.json")

CSV_COLUMNS = {
    "entry_date": "Date",
    "ticker": "Ticker",
    "direction": "Direction",
    "option_type": "Type",
    "strike_price": "Strike",
    "expiration_date": "Expiration",
    "setup": "Setup",
    "entry_price": "Entry Price",
    "exit_price": "Exit Price",
    "quantity": "Quantity",
    "fees": "Fees",
    "pnl": "P&L",
    "status": "Status",
    "notes": "Notes",
    "entry_emotion": "Entry Emotion",
    "discipline_score": "Discipline Score",
}


class JournalLoadError(Exception):
    """The journal file exists but cannot be read as a profile."""


def _valid_trades(raw_trades: list, where: str) -> list[Trade]:
    trades = []
    for raw in raw_trades:
        try:
            trades.append(Trade.model_validate(raw))
        except ValidationError as e:
            trade_id = raw.get("id", "?") if isinstance(raw, dict) else "?"
            logger.warning(f"Skipping invalid trade {trade_id} in {where}: {e}")
    return trades


class JournalStore:
    """Persists one journal profile as a JSON document."""

    def __init__(self, path: Path | str = DEFAULT_JOURNAL_PATH):
        self.path = Path(path)

    def load(self) -> JournalProfile:
        """Load the profile. A missing file yields a fresh default profile.

        Trade records that fail validation, in the journal or in an archived
        session, are skipped with a warning so one bad record does not hide
        the rest. A file that is not JSON, or whose profile fields are
        invalid, raises JournalLoadError.
        """
        if not self.path.exists():
            return JournalProfile()

        try:
            data = json.loads(self.path.read_text())
            if not isinstance(data, dict):
                logger.error(f"Journal file {self.path} does not hold a profile object")
                raise JournalLoadError(f"Journal file {self.path} does not hold a profile object")
            raw_trades = data.pop("trades", None) or []
            raw_archives = data.pop("archives", None) or []
            profile = JournalProfile.model_validate(data)
        except json.JSONDecodeError as e:
            logger.error(f"Journal file {self.path} is not valid JSON: {e}")
            raise JournalLoadError(f"Journal file {self.path} is not valid JSON: {e}") from e
        except ValidationError as e:
            logger.error(f"Journal file {self.path} has an invalid profile: {e}")
            raise JournalLoadError(
                f"Journal file {self.path} has an invalid profile ({e.error_count()} errors)"
            ) from e

        profile.trades = _valid_trades(raw_trades, "journal")
        for raw in raw_archives:
            if not isinstance(raw, dict):
                logger.warning(f"Skipping malformed archived session: {raw!r}")
                continue
            raw = dict(raw, trades=_valid_trades(raw.get("trades") or [], f"archive {raw.get('id', '?')}"))
            try:
                profile.archives.append(ArchivedSession.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"Skipping invalid archived session {raw.get('id', '?')}: {e}")
        return profile

    def save(self, profile: JournalProfile) -> Path:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(profile.model_dump_json(indent=2))
        logger.info(f"Saved journal: {self.path} ({len(profile.trades)} trades)")
        return self.path

    # ── Trades ───────────────────────────────────────────────────────────

    def list_trades(self) -> list[Trade]:
        return self.load().trades

    def get_trade(self, trade_id: str) -> Trade | None:
        return next((t for t in self.load().trades if t.id == trade_id), None)

    # ── Settings & sessions ──────────────────────────────────────────────

    def update_settings(self, settings: UserSettings) -> None:
        profile = self.load()
        profile.settings = settings
        self.save(profile)

    def archive_session(self, new_capital: float) -> ArchivedSession:
        """Move the current trades into history and restart with new capital."""
        profile = self.load()
        total_pnl = compute_metrics(profile.trades).total_pnl
        archive = ArchivedSession(
            start_date=profile.start_date,
            end_date=datetime.now(),
            initial_capital=profile.initial_capital,
            final_balance=profile.initial_capital + total_pnl,
            total_pnl=total_pnl,
            trade_count=len(profile.trades),
            trades=list(profile.trades),
        )
        profile.archives.insert(0, archive)
        profile.trades = []
        profile.initial_capital = new_capital
        profile.start_date = archive.end_date
        self.save(profile)
        logger.info(f"Archived session {archive.id} ({archive.trade_count} trades)")
        return archive

    # ── Export / backup ──────────────────────────────────────────────────

    def export_csv(self, path: Path | str) -> Path:
        """Write the current trade history as CSV."""
        trades = self.load().trades
        if not trades:
            raise ValueError("No trades to export")
        df = trades_frame(trades)
        df["entry_date"] = df["entry_date"].dt.strftime("%Y-%m-%d")
        df["fees"] = df["fees"].fillna(0)
        out = df[list(CSV_COLUMNS)].rename(columns=CSV_COLUMNS)

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        out.to_csv(path, index=False)
        logger.info(f"Exported {len(out)} trades to {path}")
        return path

    def export_backup(self, path: Path | str) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.load().model_dump_json(indent=2))
        return path

    def import_backup(self, path: Path | str) -> JournalProfile:
        """Replace the journal with a previously exported backup."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Backup not found: {path}")
        profile = JournalProfile.model_validate_json(path.read_text())
        self.save(profile)
        return profile
