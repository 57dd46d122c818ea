"""Domain layer - Core models and errors.

This module contains immutable domain models and typed errors
used throughout the application. No external dependencies.
"""

from .errors import ConfigurationError, QueryEngineError, StationDataError
from .models import (
    MIN_SEARCH_CONFIDENCE,
    ParsedQuery,
    Preferences,
    ResolvedQuery,
    Station,
    StationMatch,
    StationSearchResult,
)

__all__ = [
    # Models
    "MIN_SEARCH_CONFIDENCE",
    "Preferences",
    "ParsedQuery",
    "Station",
    "StationMatch",
    "StationSearchResult",
    "ResolvedQuery",
    # Errors
    "QueryEngineError",
    "StationDataError",
    "ConfigurationError",
]
