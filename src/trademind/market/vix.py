"""CBOE Volatility Index lookup via yfinance."""

from __future__ import annotations

import logging
from datetime import datetime

import yfinance as yf

from trademind.market.models import VixReading

logger = logging.getLogger(__name__)

VIX_SYMBOL = "^VIX"


def fetch_vix() -> VixReading | None:
    """Latest VIX close, or None when Yahoo cannot be reached."""
    try:
        df = yf.Ticker(VIX_SYMBOL).history(period="5d", interval="1d")
    except Exception as e:
        logger.warning(f"VIX lookup failed: {e}")
        return None

    if df is None or df.empty or "Close" not in df.columns:
        logger.warning("VIX lookup returned no data")
        return None

    last = df["Close"].dropna()
    if last.empty:
        return None

    timestamp = last.index[-1]
    if hasattr(timestamp, "to_pydatetime"):
        timestamp = timestamp.to_pydatetime()
    if not isinstance(timestamp, datetime):
        timestamp = datetime.now()
    return VixReading(value=round(float(last.iloc[-1]), 2), timestamp=timestamp)


def is_high_volatility(reading: VixReading | None, threshold: float) -> bool:
    return reading is not None and reading.value > threshold
