"""
Single-field quote lookups.

The quote service answers GET {quote_url}?s=<ticker>&f=<field codes> with a
one-line CSV. Field codes used by the formulas:

    j4  EBITDA
    r5  PEG ratio
    l1  last trade price
"""

import io
import logging
from typing import Optional
import pandas as pd
import requests
from pandas.errors import EmptyDataError, ParserError
from finformula.errors import FetchError, InvalidArgumentError, NotFoundError

logger = logging.getLogger(__name__)

DEFAULT_QUOTE_URL = "https://download.finance.yahoo.com/d/quotes.csv"

FIELD_EBITDA = "j4"
FIELD_PEG = "r5"
FIELD_LAST_TRADE = "l1"


def _first_cell(text: str) -> Optional[str]:
    """Return the first CSV cell of the body, unquoted and stripped."""
    try:
        df = pd.read_csv(
            io.StringIO(text),
            header=None,
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
        )
    except EmptyDataError:
        return None
    except ParserError:
        # Not CSV; fall back to the raw first line
        line = text.strip().splitlines()[0] if text.strip() else ""
        return line.strip().strip('"') or None

    if df.empty:
        return None
    return str(df.iat[0, 0]).strip() or None


def fetch_scalar_field(
    ticker: str,
    field_code: str,
    session: Optional[requests.Session] = None,
    base_url: str = DEFAULT_QUOTE_URL,
    timeout: float = 30.0
) -> str:
    """
    Fetch one quote field for one ticker.

    Preconditions:
        - ticker and field_code are non-empty

    Postconditions:
        - Returns the raw field text (e.g. "12.5B", "N/A")

    Args:
        ticker: Ticker symbol
        field_code: Quote field code (see module docstring)
        session: Optional requests session
        base_url: Quote service endpoint
        timeout: Request timeout in seconds

    Returns:
        Field value as a string

    Raises:
        InvalidArgumentError: If ticker or field_code is empty
        FetchError: On a non-200 response or transport failure
        NotFoundError: If the response body is empty
    """
    if not ticker or not str(ticker).strip():
        raise InvalidArgumentError("ticker cannot be empty")
    if not field_code or not str(field_code).strip():
        raise InvalidArgumentError("field_code cannot be empty")

    http = session or requests
    params = {"s": str(ticker).strip().upper(), "f": str(field_code).strip()}

    logger.debug(f"GET {base_url} {params}")
    try:
        response = http.get(base_url, params=params, timeout=timeout)
    except requests.exceptions.RequestException as e:
        logger.error(f"HTTP error fetching quote field {field_code} for {ticker}: {e}")
        raise FetchError(f"Failed to fetch quote for {ticker}: {e}") from e

    if response.status_code != 200:
        logger.warning(f"Quote service returned HTTP {response.status_code} for {ticker}")
        raise FetchError(
            f"Quote service returned HTTP {response.status_code} for {ticker}",
            http_status=response.status_code
        )

    value = _first_cell(response.text)
    if value is None:
        raise NotFoundError(f"Empty quote response for {ticker} field {field_code}")
    return value
