"""Typed errors for the outer layers of the query engine.

The parser and the station resolver never raise for string input: a
weak or ambiguous result is reported as data. These errors cover the
layers around them, namely dataset loading and configuration.

All errors inherit from QueryEngineError and can optionally wrap a
root cause exception for debugging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class QueryEngineError(Exception):
    """Base error for the query engine.

    Attributes:
        message: Human-readable error description
        cause: Optional underlying exception that caused this error
    """

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class StationDataError(QueryEngineError):
    """Station dataset could not be loaded.

    Attributes:
        file_path: Path to the dataset file if relevant
    """

    file_path: Optional[str] = None


@dataclass
class ConfigurationError(QueryEngineError):
    """Invalid or missing configuration.

    Attributes:
        setting_name: Name of the problematic setting
        expected_type: Expected type or format
    """

    setting_name: str = ""
    expected_type: Optional[str] = None
