"""
Pearson correlation of two closing-price series.

The coefficient is computed with the sum-of-products form over plain
double-precision sums. Series are compared point by point, so they must
cover the same dates; join_by_date produces such a pair from two
independently fetched series.
"""

from typing import Tuple
import numpy as np
from finformula.entities import PriceSeries
from finformula.errors import (
    DegenerateSeriesError,
    SeriesAlignmentError,
    SeriesLengthMismatchError,
)


def join_by_date(series_a: PriceSeries, series_b: PriceSeries) -> Tuple[PriceSeries, PriceSeries]:
    """
    Restrict two price series to the dates they have in common.

    Preconditions:
        - series_a and series_b are valid PriceSeries

    Postconditions:
        - Both returned series have the same date index (ascending)
        - Date index is the intersection of both input indices
        - Tickers are preserved; inputs are not modified

    Args:
        series_a: First price series
        series_b: Second price series

    Returns:
        Tuple of aligned (series_a, series_b); both empty if no dates overlap
    """
    common_dates = series_a.dates.intersection(series_b.dates).sort_values()

    aligned = []
    for series in (series_a, series_b):
        closes = series.closes.reindex(common_dates)
        aligned.append(PriceSeries(common_dates, closes, ticker=series.ticker))

    return aligned[0], aligned[1]


def correlate(series_a: PriceSeries, series_b: PriceSeries, strict: bool = False) -> float:
    """
    Compute the Pearson correlation of two series' closing prices.

    The window is the first n = min(len(series_a), len(series_b)) points of
    each series. With strict=True, series of different lengths are rejected
    instead of truncated.

    Preconditions:
        - The first n dates of both series are identical

    Postconditions:
        - Returns a finite float (not clamped to [-1, 1])
        - correlate(a, b) == correlate(b, a) up to rounding

    Args:
        series_a: First price series
        series_b: Second price series
        strict: Reject series of unequal length

    Returns:
        Correlation coefficient

    Raises:
        SeriesLengthMismatchError: If strict and lengths differ
        SeriesAlignmentError: If the truncated date sequences differ
        DegenerateSeriesError: If the window is empty, either series is
            constant over it, or the result is not finite
    """
    if strict and len(series_a) != len(series_b):
        raise SeriesLengthMismatchError(
            f"series lengths differ: {len(series_a)} vs {len(series_b)}"
        )

    n = min(len(series_a), len(series_b))
    if n == 0:
        raise DegenerateSeriesError("cannot correlate empty series")

    window_a = series_a.head(n)
    window_b = series_b.head(n)
    if not window_a.dates.equals(window_b.dates):
        raise SeriesAlignmentError(
            f"series dates disagree within the first {n} points"
        )

    a = window_a.closes.to_numpy(dtype=float)
    b = window_b.closes.to_numpy(dtype=float)

    if a.min() == a.max() or b.min() == b.max():
        raise DegenerateSeriesError("cannot correlate a constant series")

    sum_a = a.sum()
    sum_b = b.sum()
    sum_ab = (a * b).sum()
    sum_a2 = (a * a).sum()
    sum_b2 = (b * b).sum()

    numerator = n * sum_ab - sum_a * sum_b
    variance_product = (n * sum_a2 - sum_a ** 2) * (n * sum_b2 - sum_b ** 2)
    if not np.isfinite(variance_product) or variance_product <= 0:
        raise DegenerateSeriesError("correlation denominator is zero or undefined")

    result = numerator / np.sqrt(variance_product)
    if not np.isfinite(result):
        raise DegenerateSeriesError("correlation is not finite")

    return float(result)
