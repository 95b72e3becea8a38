"""Custom exceptions for the formula library."""

from typing import Optional


class FormulaError(Exception):
    """Base exception for formula errors."""
    kind = "FormulaError"


class DataError(FormulaError):
    """Raised when remote data is missing, invalid, or unavailable."""
    kind = "DataError"


class FetchError(DataError):
    """
    Raised when a remote endpoint cannot be fetched.

    Attributes:
        http_status: Status code of the failed response, or None when the
            request never produced a response (connection error, timeout)
    """
    kind = "FetchError"

    def __init__(self, message: str, http_status: Optional[int] = None):
        super().__init__(message)
        self.http_status = http_status


class NotFoundError(DataError):
    """Raised when the requested field, series, or indicator year is absent."""
    kind = "NotFound"


class InvalidArgumentError(FormulaError, ValueError):
    """Raised when a formula argument is empty or out of the supported range."""
    kind = "InvalidArgument"


class InvalidDateFormatError(FormulaError, ValueError):
    """Raised when a date string does not hold a valid year, month and day."""
    kind = "InvalidDateFormat"


class InvalidNumberFormatError(FormulaError, ValueError):
    """Raised when a string cannot be parsed as a finite number."""
    kind = "InvalidNumberFormat"


class DegenerateSeriesError(FormulaError):
    """Raised when a correlation is undefined (empty or zero-variance input)."""
    kind = "DegenerateSeries"


class SeriesLengthMismatchError(FormulaError):
    """Raised by strict correlation when the two series differ in length."""
    kind = "SeriesLengthMismatch"


class SeriesAlignmentError(FormulaError):
    """Raised when two series do not cover the same dates in the same order."""
    kind = "SeriesAlignment"


class ConfigError(FormulaError):
    """Raised when configuration cannot be read or fails validation."""
    kind = "ConfigError"
