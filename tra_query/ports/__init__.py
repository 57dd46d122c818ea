"""Ports layer - Abstract interfaces (Protocols) for the application.

Ports define the contracts between the application core and its
adapters. They enable dependency injection and make the system testable.
"""

from .nlp import QueryParserPort
from .stations import StationRepositoryPort, StationResolverPort

__all__ = [
    # NLP
    "QueryParserPort",
    # Stations
    "StationRepositoryPort",
    "StationResolverPort",
]
