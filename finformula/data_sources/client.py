"""
Data client used by the formulas.

Bundles settings, an HTTP session and a pacer, and paces every network call
before delegating to the data source functions.
"""

import threading
from datetime import date, datetime
from typing import Optional, Union
import requests
from finformula.config import Settings, load_settings
from finformula.entities import PriceSeries
from finformula.pacing import Pacer, pacer_from_settings
from finformula.data_sources.prices import fetch_historical_series
from finformula.data_sources.quotes import fetch_scalar_field
from finformula.data_sources.worldbank import fetch_indicator


class DataClient:
    """
    Fetches price series, quote fields and indicators.

    Attributes:
        settings: Settings in effect
        pacer: Pacer waited on before each network call
        session: HTTP session for the quote and World Bank services
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        pacer: Optional[Pacer] = None,
        session: Optional[requests.Session] = None
    ):
        self.settings = settings if settings is not None else load_settings()
        self.pacer = pacer if pacer is not None else pacer_from_settings(self.settings)
        self.session = session or requests.Session()

    def fetch_historical_series(
        self,
        ticker: str,
        start: Union[str, date, datetime],
        end: Union[str, date, datetime],
        granularity: Union[int, float, str] = 86400
    ) -> PriceSeries:
        """Download closing prices for ticker between start and end (inclusive)."""
        self.pacer.wait()
        return fetch_historical_series(ticker, start, end, granularity)

    def fetch_scalar_field(self, ticker: str, field_code: str) -> str:
        """Fetch one quote field for ticker."""
        self.pacer.wait()
        return fetch_scalar_field(
            ticker,
            field_code,
            session=self.session,
            base_url=self.settings.quote_url,
            timeout=self.settings.http_timeout
        )

    def fetch_indicator(self, country_code: str, indicator_code: str, year: Union[int, str]) -> float:
        """Fetch one World Bank indicator value."""
        self.pacer.wait()
        return fetch_indicator(
            country_code,
            indicator_code,
            year,
            session=self.session,
            base_url=self.settings.worldbank_url,
            per_page=self.settings.worldbank_per_page,
            timeout=self.settings.http_timeout
        )


_default_client: Optional[DataClient] = None
_default_client_lock = threading.Lock()


def default_client() -> DataClient:
    """
    Shared DataClient used when a formula is called without one.

    Built on first use from load_settings(), so the config file and
    FINFORMULA_* variables apply.

    Raises:
        ConfigError: If the settings cannot be loaded
    """
    global _default_client
    with _default_client_lock:
        if _default_client is None:
            _default_client = DataClient()
        return _default_client
