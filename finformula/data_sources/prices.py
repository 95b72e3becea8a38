"""
Historical price downloads.

This module downloads closing prices from yfinance and converts them into
PriceSeries objects.
"""

import logging
from datetime import datetime, date, timedelta
from typing import Union
import pandas as pd
import yfinance as yf
from finformula.entities import PriceSeries
from finformula.errors import FetchError, InvalidArgumentError, NotFoundError

logger = logging.getLogger(__name__)

# Granularity in seconds -> yfinance interval
GRANULARITY_INTERVALS = {
    60: "1m",
    300: "5m",
    900: "15m",
    1800: "30m",
    3600: "1h",
    86400: "1d",
    604800: "1wk",
}

CALENDAR_INTERVALS = {"1d", "1wk"}


def granularity_to_interval(granularity: Union[int, float, str]) -> str:
    """
    Map a granularity in seconds to a yfinance interval string.

    Raises:
        InvalidArgumentError: If the granularity has no matching interval
    """
    try:
        seconds = int(float(granularity))
    except (TypeError, ValueError):
        raise InvalidArgumentError(f"invalid granularity: {granularity!r}") from None

    if seconds not in GRANULARITY_INTERVALS:
        supported = ", ".join(str(s) for s in GRANULARITY_INTERVALS)
        raise InvalidArgumentError(f"unsupported granularity {seconds}s (supported: {supported})")
    return GRANULARITY_INTERVALS[seconds]


def _to_date_str(value: Union[str, date, datetime]) -> str:
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    return pd.Timestamp(value).strftime("%Y-%m-%d")


def _http_status_of(exc: Exception):
    response = getattr(exc, "response", None)
    return getattr(response, "status_code", None)


def fetch_historical_series(
    ticker: str,
    start: Union[str, date, datetime],
    end: Union[str, date, datetime],
    granularity: Union[int, float, str] = 86400
) -> PriceSeries:
    """
    Download the closing-price series of one ticker.

    Preconditions:
        - ticker is a non-empty string
        - start <= end
        - granularity is a supported interval in seconds

    Postconditions:
        - Returns PriceSeries sorted by date ascending, tz-naive
        - Daily and weekly bars carry the exchange-local date at midnight;
          intraday bars carry their UTC time
        - Both start and end dates are included

    Args:
        ticker: Ticker symbol
        start: First date (string "YYYY-MM-DD" or date/datetime)
        end: Last date, inclusive
        granularity: Bar size in seconds (86400 for daily)

    Returns:
        PriceSeries of closing prices

    Raises:
        InvalidArgumentError: If ticker is empty or granularity is unsupported
        FetchError: If the download fails
        NotFoundError: If the provider returns no rows
    """
    if not ticker or not str(ticker).strip():
        raise InvalidArgumentError("ticker cannot be empty")
    ticker = str(ticker).strip().upper()

    interval = granularity_to_interval(granularity)
    start_str = _to_date_str(start)
    # yfinance treats end as exclusive
    end_str = (pd.Timestamp(_to_date_str(end)) + timedelta(days=1)).strftime("%Y-%m-%d")

    logger.debug(f"Downloading {ticker} {interval} closes {start_str}..{end_str}")
    try:
        data = yf.Ticker(ticker).history(start=start_str, end=end_str, interval=interval)
    except Exception as e:
        status = _http_status_of(e)
        logger.warning(f"Price download failed for {ticker}: {e}")
        raise FetchError(f"Failed to download price data for {ticker}: {e}", http_status=status) from e

    if data is None or data.empty:
        raise NotFoundError(f"No data returned for {ticker}")

    data.columns = [col.replace(" ", "") for col in data.columns]
    if "Close" not in data.columns:
        raise NotFoundError(f"No close prices returned for {ticker}")

    closes = data["Close"].dropna().sort_index()
    index = pd.DatetimeIndex(closes.index)
    if interval in CALENDAR_INTERVALS:
        # Daily and weekly bars are keyed by the exchange's own calendar date
        if index.tz is not None:
            index = index.tz_localize(None)
        index = index.normalize()
    return PriceSeries(index, closes, ticker=ticker)
