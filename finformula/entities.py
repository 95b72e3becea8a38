"""
Core entity classes (ADTs) for the formula library.

These classes represent the price data passed from the data sources to the
correlation engine, and the tagged result returned at the formula boundary.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, Optional, Union
import pandas as pd
import numpy as np


@dataclass(frozen=True)
class PricePoint:
    """
    Closing price of one ticker for one trading day.

    Attributes:
        date: Bar time (pd.Timestamp, tz-naive UTC if given with a timezone)
        close: Closing price

    Representation Invariants:
        - date is a tz-naive pd.Timestamp
        - close is a float
    """
    date: pd.Timestamp
    close: float

    def __post_init__(self):
        """Normalize date and close to their canonical types."""
        ts = pd.Timestamp(self.date)
        if ts.tz is not None:
            ts = ts.tz_convert("UTC").tz_localize(None)
        object.__setattr__(self, "date", ts)
        object.__setattr__(self, "close", float(self.close))


class PriceSeries:
    """
    An ordered series of closing prices for one ticker.

    Attributes:
        dates: Sorted array of dates (pd.DatetimeIndex, tz-naive)
        closes: Closing prices (pd.Series), indexed by dates
        ticker: Optional ticker symbol this series belongs to

    Representation Invariants:
        - len(dates) == len(closes)
        - dates are sorted in ascending order
        - dates contain no duplicates
        - dates contain no NaT values
    """

    def __init__(
        self,
        dates: Union[pd.DatetimeIndex, Iterable],
        closes: Union[pd.Series, Iterable[float]],
        ticker: Optional[str] = None
    ):
        """
        Initialize a PriceSeries.

        Preconditions:
            - dates and closes have the same length

        Postconditions:
            - self.dates is sorted, deduplicated (first wins) and tz-naive;
          tz-aware input is converted to UTC first so that series from
          different exchanges compare by instant
            - self.closes is aligned with self.dates

        Raises:
            ValueError: If lengths differ or dates contain NaT
        """
        if not isinstance(dates, pd.DatetimeIndex):
            dates = pd.DatetimeIndex(list(dates))
        if dates.tz is not None:
            dates = dates.tz_convert("UTC").tz_localize(None)

        values = closes.to_numpy() if isinstance(closes, pd.Series) else list(closes)
        if len(values) != len(dates):
            raise ValueError(
                f"length mismatch: dates has {len(dates)} elements, closes has {len(values)}"
            )
        if dates.isna().any():
            raise ValueError("dates must not contain NaT values")

        df = pd.DataFrame({"close": np.asarray(values, dtype=float)}, index=dates)
        df = df.sort_index(kind="stable")
        df = df[~df.index.duplicated(keep="first")]

        self._dates = pd.DatetimeIndex(df.index)
        self._closes = df["close"]
        self._ticker = ticker

        self._check_invariants()

    @classmethod
    def from_points(cls, points: Iterable[PricePoint], ticker: Optional[str] = None) -> "PriceSeries":
        """Build a series from PricePoint objects."""
        points = list(points)
        return cls([p.date for p in points], [p.close for p in points], ticker=ticker)

    def _check_invariants(self):
        """Check representation invariants."""
        if len(self._dates) != len(self._closes):
            raise ValueError("dates and closes must have equal length")
        if not self._dates.is_monotonic_increasing:
            raise ValueError("dates must be sorted in ascending order")
        if self._dates.has_duplicates:
            raise ValueError("dates must not contain duplicates")

    @property
    def dates(self) -> pd.DatetimeIndex:
        """Return the dates (read-only)."""
        return self._dates

    @property
    def closes(self) -> pd.Series:
        """Return the closing prices (read-only)."""
        return self._closes

    @property
    def ticker(self) -> Optional[str]:
        """Return the associated ticker (read-only)."""
        return self._ticker

    @property
    def points(self) -> List[PricePoint]:
        return list(self)

    def head(self, n: int) -> "PriceSeries":
        """Return the first n points as a new series."""
        return PriceSeries(self._dates[:n], self._closes.iloc[:n], ticker=self._ticker)

    def __len__(self) -> int:
        """Return the number of observations."""
        return len(self._dates)

    def __getitem__(self, i: int) -> PricePoint:
        return PricePoint(self._dates[i], self._closes.iloc[i])

    def __iter__(self) -> Iterator[PricePoint]:
        for ts, close in zip(self._dates, self._closes.to_numpy()):
            yield PricePoint(ts, close)

    def __repr__(self) -> str:
        """String representation."""
        ticker_str = f" ({self._ticker})" if self._ticker else ""
        return f"PriceSeries({len(self)} obs{ticker_str})"


@dataclass(frozen=True)
class FormulaResult:
    """
    Tagged result of a formula evaluation: Ok(value) or Err(kind, detail).

    Attributes:
        value: Scalar result when ok, None otherwise
        error_kind: Error tag (see FormulaError.kind) when not ok
        detail: Human-readable error detail
        http_status: Status code carried by FetchError results

    Representation Invariants:
        - exactly one of value / error_kind describes the outcome
    """
    value: Any = None
    error_kind: Optional[str] = None
    detail: str = ""
    http_status: Optional[int] = None

    @classmethod
    def ok(cls, value: Any) -> "FormulaResult":
        return cls(value=value)

    @classmethod
    def err(cls, kind: str, detail: str = "", http_status: Optional[int] = None) -> "FormulaResult":
        return cls(error_kind=kind, detail=detail, http_status=http_status)

    @property
    def is_ok(self) -> bool:
        return self.error_kind is None

    def render(self) -> Any:
        """
        Render the result for a spreadsheet cell.

        Ok results render as their value. Missing data renders as the
        literal "Not Found"; fetch failures as "Error: HTTP <status>";
        every other error as "Error: <detail>".
        """
        if self.is_ok:
            return self.value
        if self.error_kind == "NotFound":
            return "Not Found"
        if self.error_kind == "FetchError" and self.http_status is not None:
            return f"Error: HTTP {self.http_status}"
        return f"Error: {self.detail or self.error_kind}"

    def __repr__(self) -> str:
        if self.is_ok:
            return f"FormulaResult.ok({self.value!r})"
        return f"FormulaResult.err({self.error_kind}, {self.detail!r})"
