"""Anthropic Claude trading coach: short psychology/discipline feedback."""

from __future__ import annotations

import json
import logging

import anthropic
from tenacity import RetryError, retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from trademind.config import JournalConfig
from trademind.core.models import Trade

logger = logging.getLogger(__name__)


class TradingCoach:
    """Claude-backed coach. Every failure degrades to ``None``."""

    def __init__(self, config: JournalConfig) -> None:
        self._config = config
        self._client = (
            anthropic.Anthropic(
                api_key=config.anthropic_api_key,
                timeout=config.llm_timeout_seconds,
            )
            if config.anthropic_api_key
            else None
        )

    @property
    def available(self) -> bool:
        return self._client is not None and not self._config.offline_mode

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(min=1, max=10),
        retry=retry_if_exception_type(anthropic.APIError),
    )
    def _complete(self, system_prompt: str, user_prompt: str) -> str:
        message = self._client.messages.create(
            model=self._config.llm_model,
            max_tokens=self._config.llm_max_tokens,
            temperature=self._config.llm_temperature,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
        )
        return message.content[0].text

    def coaching_insight(self, trades: list[Trade]) -> str | None:
        """Coaching on the most recent trades, or None if the coach is unreachable."""
        if not self.available:
            return None
        if not trades:
            return None

        recent = sorted(trades, key=lambda t: t.entry_date, reverse=True)
        summary = summarize_trades(recent[: self._config.coach_trade_window])
        prompt = f"Analyze these recent trades:\n{summary}"
        try:
            text = self._complete(COACH_SYSTEM_PROMPT, prompt)
        except (anthropic.APIError, RetryError) as e:
            logger.warning(f"Coach unavailable: {e}")
            return None
        return text.strip() or None


def summarize_trades(trades: list[Trade]) -> str:
    """Compact JSON of the fields the coach reasons about."""
    rows = [
        {
            "ticker": t.ticker,
            "type": f"{t.direction.value} {t.option_type.value if t.option_type else 'Shares'}",
            "pnl": t.pnl,
            "emotion": t.entry_emotion.value,
            "discipline": t.discipline_score,
            "notes": t.notes,
        }
        for t in trades
    ]
    return json.dumps(rows)


# ── Prompt templates ─────────────────────────────────────────────────────────

COACH_SYSTEM_PROMPT = """\
You are an elite trading performance psychologist and risk manager reviewing an \
options trader's journal.

Provide a concise (max 150 words) coaching insight. Focus on:
1. Correlation between emotions and P/L.
2. Discipline breaches and their impact.
3. One actionable tip for the next trading session.

Do not format as a letter. Give the insight directly using Markdown."""
