"""
World Bank indicator lookups.

The v2 API returns JSON shaped as [metadata, [{"date": "2015", "value": ...},
...]] for GET {base}/country/<cc>/indicator/<code>?format=json.
"""

import logging
from typing import Any, Optional, Union
import requests
from finformula.errors import FetchError, InvalidArgumentError, InvalidNumberFormatError, NotFoundError

logger = logging.getLogger(__name__)

DEFAULT_WORLDBANK_URL = "https://api.worldbank.org/v2"

INDICATOR_GDP = "NY.GDP.MKTP.CD"
INDICATOR_UNEMPLOYMENT = "SL.UEM.TOTL.ZS"


def _error_message(metadata: Any) -> Optional[str]:
    """Extract the message of a World Bank error payload, if any."""
    if not isinstance(metadata, dict) or "message" not in metadata:
        return None
    messages = metadata["message"]
    if isinstance(messages, list):
        parts = [m.get("value", "") for m in messages if isinstance(m, dict)]
        return "; ".join(p for p in parts if p) or "unknown error"
    return str(messages)


def find_indicator_value(payload: Any, year: Union[int, str]) -> float:
    """
    Scan a World Bank payload for the value of one year.

    Args:
        payload: Decoded JSON body
        year: Year to look for

    Returns:
        The indicator value as float

    Raises:
        NotFoundError: If the payload has no data page, an entry is
            malformed, the year is absent, or its value is null
        InvalidNumberFormatError: If the reported value is not numeric
    """
    year_str = str(year)

    if not isinstance(payload, list) or not payload:
        raise NotFoundError("Unexpected World Bank response")

    message = _error_message(payload[0])
    if message is not None:
        raise NotFoundError(f"World Bank error: {message}")

    if len(payload) < 2 or not payload[1]:
        raise NotFoundError("World Bank returned no data")

    for entry in payload[1]:
        if not isinstance(entry, dict):
            raise NotFoundError(f"Unexpected World Bank entry: {entry!r}")
        if str(entry.get("date")) != year_str:
            continue
        value = entry.get("value")
        if value is None:
            raise NotFoundError(f"No value reported for {year_str}")
        try:
            return float(value)
        except (TypeError, ValueError):
            raise InvalidNumberFormatError(
                f"World Bank value for {year_str} is not a number: {value!r}"
            ) from None

    raise NotFoundError(f"No entry for {year_str}")


def fetch_indicator(
    country_code: str,
    indicator_code: str,
    year: Union[int, str],
    session: Optional[requests.Session] = None,
    base_url: str = DEFAULT_WORLDBANK_URL,
    per_page: int = 1000,
    timeout: float = 30.0
) -> float:
    """
    Fetch one World Bank indicator value for a country and year.

    Preconditions:
        - country_code is an ISO2/ISO3 code (e.g. "US", "USA")
        - indicator_code is a World Bank indicator id

    Postconditions:
        - Returns the numeric value reported for that year

    Args:
        country_code: Country code
        indicator_code: Indicator id (e.g. "NY.GDP.MKTP.CD")
        year: Year to look up
        session: Optional requests session
        base_url: World Bank API base URL
        per_page: Page size (must cover the year range of the series)
        timeout: Request timeout in seconds

    Returns:
        Indicator value

    Raises:
        InvalidArgumentError: If country_code or indicator_code is empty
        FetchError: On a non-200 response, transport failure or invalid JSON
        NotFoundError: If no value exists for the year
    """
    if not country_code or not str(country_code).strip():
        raise InvalidArgumentError("country_code cannot be empty")
    if not indicator_code or not str(indicator_code).strip():
        raise InvalidArgumentError("indicator_code cannot be empty")

    http = session or requests
    url = f"{base_url}/country/{str(country_code).strip()}/indicator/{str(indicator_code).strip()}"
    params = {"format": "json", "per_page": per_page}

    logger.debug(f"GET {url} {params}")
    try:
        response = http.get(url, params=params, timeout=timeout)
    except requests.exceptions.RequestException as e:
        logger.error(f"HTTP error fetching World Bank indicator {indicator_code}: {e}")
        raise FetchError(f"Failed to fetch indicator {indicator_code}: {e}") from e

    if response.status_code != 200:
        logger.warning(f"World Bank returned HTTP {response.status_code} for {url}")
        raise FetchError(
            f"World Bank returned HTTP {response.status_code}",
            http_status=response.status_code
        )

    try:
        payload = response.json()
    except ValueError as e:
        raise FetchError(f"Invalid JSON from World Bank: {e}", http_status=response.status_code) from e

    return find_indicator_value(payload, year)
