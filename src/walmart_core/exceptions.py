"""Domain-specific exceptions for walmart-core.

This module defines custom exceptions that are part of the public API.
All exceptions inherit from WalmartCoreError for easy catching.
"""

from __future__ import annotations


class WalmartCoreError(Exception):
    """Base exception for all walmart-core errors.

    Users can catch this exception to handle any error raised by the
    loader, the store or the aggregation engine.
    """

    pass


class ConfigError(WalmartCoreError):
    """Raised when there is a configuration error.

    This exception is raised when:
    - Required configuration is missing
    - A configured path does not exist
    """

    pass


class DataFormatError(WalmartCoreError):
    """Raised when the transactions source cannot be typed.

    Loading is all-or-nothing: this error aborts the load and no partial
    dataset is returned.

    Attributes:
        row: 0-based index of the offending source row, or None when the
            problem is not tied to a row (e.g. a missing column).
        column: Name of the offending column.
    """

    def __init__(self, message: str, row: int | None = None, column: str | None = None) -> None:
        self.row = row
        self.column = column
        location = []
        if row is not None:
            location.append(f"row {row}")
        if column is not None:
            location.append(f"column '{column}'")
        if location:
            message = f"{message} ({', '.join(location)})"
        super().__init__(message)


class ComputationError(WalmartCoreError):
    """Raised when a computation cannot produce a result.

    This exception is raised when:
    - A referenced field contains nulls
    - A referenced year or key has no matching rows
    - A ratio would divide by zero
    - A single winner is required but there are no groups
    """

    pass


class ParameterError(WalmartCoreError):
    """Raised for an unknown computation name or an invalid parameter."""

    pass
