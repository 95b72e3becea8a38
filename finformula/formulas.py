"""
Spreadsheet formula functions.

Each formula takes positional cell arguments (strings or numbers) and
returns a scalar. Library errors propagate as exceptions; evaluate() is the
cell boundary that turns them into FormulaResult values whose render()
gives the text shown in the cell.
"""

import inspect
import logging
from typing import Any, Callable, Dict, Optional, Union
from finformula.analytics.correlation import correlate, join_by_date
from finformula.data_sources.client import DataClient, default_client
from finformula.data_sources.quotes import FIELD_EBITDA, FIELD_LAST_TRADE, FIELD_PEG
from finformula.data_sources.worldbank import INDICATOR_GDP, INDICATOR_UNEMPLOYMENT
from finformula.entities import FormulaResult
from finformula.errors import FetchError, FormulaError, InvalidNumberFormatError
from finformula.parsers import parse_date, parse_magnitude

logger = logging.getLogger(__name__)

Number = Union[int, float]


def _as_year(year: Union[str, Number]) -> int:
    """Coerce a cell value such as 2015, 2015.0 or "2015" to an int year."""
    try:
        value = float(str(year).strip())
    except ValueError:
        raise InvalidNumberFormatError(f"'{year}' is not a year") from None
    if not value.is_integer():
        raise InvalidNumberFormatError(f"'{year}' is not a whole year")
    return int(value)


def corr(
    ticker_a: str,
    ticker_b: str,
    start: str,
    end: str,
    granularity: Union[str, Number] = 86400,
    *,
    client: Optional[DataClient] = None
) -> float:
    """
    Correlation of two tickers' closing prices between start and end.

    Both series are fetched, joined on their common dates, then correlated.
    """
    client = client or default_client()
    start_date = parse_date(start)
    end_date = parse_date(end)

    series_a = client.fetch_historical_series(ticker_a, start_date, end_date, granularity)
    series_b = client.fetch_historical_series(ticker_b, start_date, end_date, granularity)
    aligned_a, aligned_b = join_by_date(series_a, series_b)

    logger.debug(
        f"Correlating {ticker_a}/{ticker_b}: {len(series_a)} and {len(series_b)} points, "
        f"{len(aligned_a)} in common"
    )
    return correlate(aligned_a, aligned_b)


def ebitda(ticker: str, *, client: Optional[DataClient] = None) -> float:
    """EBITDA of ticker, expanded from its B/M suffix."""
    client = client or default_client()
    return parse_magnitude(client.fetch_scalar_field(ticker, FIELD_EBITDA))


def peg(ticker: str, *, client: Optional[DataClient] = None) -> float:
    """Price/earnings-to-growth ratio of ticker."""
    client = client or default_client()
    return parse_magnitude(client.fetch_scalar_field(ticker, FIELD_PEG))


def rfr10(*, client: Optional[DataClient] = None) -> float:
    """10-year risk-free rate as a decimal (4.25% -> 0.0425)."""
    client = client or default_client()
    quoted = client.fetch_scalar_field(client.settings.risk_free_ticker, FIELD_LAST_TRADE)
    return parse_magnitude(quoted) / 100.0


def worldbank(
    country: str,
    indicator: str,
    year: Union[str, Number],
    *,
    client: Optional[DataClient] = None
) -> float:
    client = client or default_client()
    return client.fetch_indicator(country, indicator, _as_year(year))


def gdp(country: str, year: Union[str, Number], *, client: Optional[DataClient] = None) -> float:
    """GDP in current US$ of country for year."""
    return worldbank(country, INDICATOR_GDP, year, client=client)


def unemployment(country: str, year: Union[str, Number], *, client: Optional[DataClient] = None) -> float:
    """Unemployment rate (% of labor force) of country for year."""
    return worldbank(country, INDICATOR_UNEMPLOYMENT, year, client=client)


def yahoo_finance(ticker: str, field: str, *, client: Optional[DataClient] = None) -> str:
    """Raw quote field of ticker."""
    client = client or default_client()
    return client.fetch_scalar_field(ticker, field)


FORMULAS: Dict[str, Callable[..., Any]] = {
    "Corr": corr,
    "EBITDA": ebitda,
    "PEG": peg,
    "RFR10": rfr10,
    "GDP": gdp,
    "Unemployment": unemployment,
    "Worldbank": worldbank,
    "YahooFinance": yahoo_finance,
}


def evaluate(name: str, *args: Any, client: Optional[DataClient] = None) -> FormulaResult:
    """
    Run a formula by its spreadsheet name and capture its outcome.

    Args:
        name: Spreadsheet name (see FORMULAS)
        *args: Positional cell arguments
        client: DataClient to use (the shared default client if omitted)

    Returns:
        FormulaResult.ok(value) or FormulaResult.err(kind, detail)

    Raises:
        KeyError: If name is not a known formula
    """
    if name not in FORMULAS:
        raise KeyError(name)
    func = FORMULAS[name]

    try:
        inspect.signature(func).bind(*args)
    except TypeError as e:
        return FormulaResult.err("InvalidArgument", f"{name}: {e}")

    try:
        value = func(*args, client=client)
    except FetchError as e:
        logger.warning(f"{name} failed: {e}")
        return FormulaResult.err(e.kind, str(e), http_status=e.http_status)
    except FormulaError as e:
        logger.info(f"{name} returned {e.kind}: {e}")
        return FormulaResult.err(e.kind, str(e))

    return FormulaResult.ok(value)
