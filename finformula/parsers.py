"""
Parsers for loosely formatted spreadsheet input.

Dates arrive as whatever the user typed into a cell, year first
("2020-01-15", "2020/1/15"), and quote fields arrive as suffixed strings
such as "12.5B".
"""

import math
import re
from datetime import date, datetime
from typing import Union
from finformula.errors import InvalidDateFormatError, InvalidNumberFormatError

_DIGIT_RUN = re.compile(r"\d+")

MAGNITUDE_SUFFIXES = {
    "B": 1_000_000_000,
    "M": 1_000_000,
}


def parse_date(text: Union[str, date]) -> date:
    """
    Extract a calendar date from a loosely formatted string.

    The first three maximal runs of digits are read as year, month
    (1-based) and day. Any separators are accepted.

    Preconditions:
        - text contains at least three digit runs

    Postconditions:
        - Returns a valid Gregorian date

    Args:
        text: Date string, or a date/datetime passed through from a cell

    Returns:
        datetime.date

    Raises:
        InvalidDateFormatError: If fewer than three digit runs are present
            or they do not form a valid date
    """
    if isinstance(text, datetime):
        return text.date()
    if isinstance(text, date):
        return text
    if not isinstance(text, str):
        raise InvalidDateFormatError(f"expected a date string, got {type(text).__name__}")

    groups = _DIGIT_RUN.findall(text)
    if len(groups) < 3:
        raise InvalidDateFormatError(
            f"'{text}' does not contain year, month and day"
        )

    year, month, day = (int(g) for g in groups[:3])
    try:
        return date(year, month, day)
    except ValueError as e:
        raise InvalidDateFormatError(f"'{text}' is not a valid date: {e}") from e


def _to_finite_float(text: str, original: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise InvalidNumberFormatError(f"'{original}' is not a number") from None
    if not math.isfinite(value):
        raise InvalidNumberFormatError(f"'{original}' is not a finite number")
    return value


def parse_magnitude(text: Union[str, int, float]) -> float:
    """
    Convert a magnitude-suffixed number ("12B", "4.5M") to a plain float.

    Only the last character is inspected. "B" multiplies the prefix by one
    billion and "M" by one million. A trailing digit or decimal point means
    the string has no suffix and is parsed whole. Any other trailing
    character (lower-case "b"/"m", "%", ...) is dropped and the rest parsed.

    Args:
        text: Suffixed numeric string, or a number passed through

    Returns:
        The plain number

    Raises:
        InvalidNumberFormatError: If the numeric part is not a finite number
    """
    if isinstance(text, bool):
        raise InvalidNumberFormatError(f"'{text}' is not a number")
    if isinstance(text, (int, float)):
        return _to_finite_float(str(text), str(text))

    original = text
    text = text.strip()
    if not text:
        raise InvalidNumberFormatError("empty string is not a number")

    suffix = text[-1]
    if suffix.isdigit() or suffix == ".":
        return _to_finite_float(text, original)

    value = _to_finite_float(text[:-1], original)
    return value * MAGNITUDE_SUFFIXES.get(suffix, 1)
