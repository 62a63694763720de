"""Exception types raised by the output-characteristic analysis."""

from __future__ import annotations


class BJTAnalysisError(Exception):
    """Base class for analysis failures that are reported per dataset."""


class MalformedRecordError(BJTAnalysisError, ValueError):
    """A data row could not be parsed as four finite numbers.

    Attributes:
        line_number: 1-based line number in the source, if known.
        line: Raw line content.
    """

    def __init__(self, message: str, line_number: int | None = None, line: str = ""):
        super().__init__(message)
        self.line_number = line_number
        self.line = line


class InsufficientDataError(BJTAnalysisError, ValueError):
    """Fewer than two usable points are available for a linear fit."""


class DivideByZeroError(BJTAnalysisError, ZeroDivisionError):
    """A ratio-based derived quantity has a zero denominator or zero term."""
