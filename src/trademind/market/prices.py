"""Current price estimate for a journaled trade via yfinance."""

from __future__ import annotations

import logging

import yfinance as yf

from trademind.core.enums import OptionType
from trademind.core.models import Trade
from trademind.market.models import PriceEstimate, PriceSource

logger = logging.getLogger(__name__)


def _yahoo_source(symbol: str) -> PriceSource:
    return PriceSource(title="Yahoo Finance", uri=f"https://finance.yahoo.com/quote/{symbol}")


def _option_last_price(ticker: yf.Ticker, trade: Trade) -> float | None:
    chain = ticker.option_chain(trade.expiration_date.isoformat())
    table = chain.calls if trade.option_type == OptionType.CALL else chain.puts
    match = table[(table["strike"] - trade.strike_price).abs() < 1e-6]
    if match.empty:
        return None
    price = float(match["lastPrice"].iloc[0])
    return price if price > 0 else None


def _underlying_close(ticker: yf.Ticker) -> float | None:
    df = ticker.history(period="5d", interval="1d")
    if df is None or df.empty:
        return None
    closes = df["Close"].dropna()
    return float(closes.iloc[-1]) if not closes.empty else None


def estimate_price(trade: Trade) -> PriceEstimate | None:
    """Option last price when the contract is fully specified, else the underlying close.

    Returns None when nothing could be fetched. The caller decides whether
    to use the price; nothing is written back to the trade here.
    """
    ticker = yf.Ticker(trade.ticker)
    is_contract = bool(trade.option_type and trade.strike_price and trade.expiration_date)

    if is_contract:
        try:
            price = _option_last_price(ticker, trade)
        except Exception as e:
            logger.warning(f"Option chain lookup failed for {trade.contract_name}: {e}")
            price = None
        if price is not None:
            return PriceEstimate(
                text=f"Option last price for {trade.contract_name}: ${price:,.2f}",
                price=round(price, 2),
                sources=[_yahoo_source(trade.ticker)],
            )

    try:
        close = _underlying_close(ticker)
    except Exception as e:
        logger.warning(f"Price lookup failed for {trade.ticker}: {e}")
        return None
    if close is None:
        return None

    text = f"Underlying close for {trade.ticker}: ${close:,.2f}"
    if is_contract:
        text += " (option quote unavailable, this is the underlying price)"
    return PriceEstimate(text=text, price=round(close, 2), sources=[_yahoo_source(trade.ticker)])
