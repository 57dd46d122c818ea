"""Immutable domain models for the query understanding engine.

All models are frozen dataclasses with slots. They are created per call
(``ParsedQuery``, ``StationSearchResult``) or once per dataset snapshot
(``Station``) and carry no behaviour beyond a few derived properties.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Mapping, Optional

# Single threshold downstream tools rely on to decide whether a parsed
# query carries enough information to run a schedule search.
MIN_SEARCH_CONFIDENCE = 0.4


@dataclass(frozen=True, slots=True)
class Preferences:
    """Travel preferences extracted from a query.

    Attributes:
        train_type: Free-text train class token (e.g. '自強'), not validated
        fastest: The user asked for the fastest option
        cheapest: The user asked for the cheapest option
        direct_only: The user asked for trains without transfers
        time_window_hours: Search window in hours, always within [1, 24]
    """

    train_type: Optional[str] = None
    fastest: bool = False
    cheapest: bool = False
    direct_only: bool = False
    time_window_hours: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        """Check if no preference was expressed."""
        return (
            self.train_type is None
            and not self.fastest
            and not self.cheapest
            and not self.direct_only
            and self.time_window_hours is None
        )


@dataclass(frozen=True, slots=True)
class ParsedQuery:
    """Structured intent extracted from a natural-language query.

    Attributes:
        raw_query: The normalized query text the result was derived from
        origin_raw: Origin name as written in the query (unresolved)
        destination_raw: Destination name as written in the query (unresolved)
        date: ISO calendar date; None means "today" by caller convention
        time: 24-hour ``HH:MM`` string
        preferences: Extracted travel preferences
        train_number: Train number for train-number queries
        is_partial_train_number: True for 1-2 digit numbers
        train_number_query: True if a train-number rule fired
        confidence: Heuristic score in [0, 1]
        matched_patterns: Identifiers of the rules that fired, in evaluation order
    """

    raw_query: str = ""
    origin_raw: Optional[str] = None
    destination_raw: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    preferences: Preferences = field(default_factory=Preferences)
    train_number: Optional[str] = None
    is_partial_train_number: bool = False
    train_number_query: bool = False
    confidence: float = 0.0
    matched_patterns: tuple[str, ...] = field(default_factory=tuple)

    @property
    def has_route(self) -> bool:
        """Check if both origin and destination were extracted."""
        return self.origin_raw is not None and self.destination_raw is not None

    @property
    def is_valid_for_search(self) -> bool:
        """Check if the query is confident enough to run a search."""
        return self.confidence >= MIN_SEARCH_CONFIDENCE

    @property
    def is_train_number_query(self) -> bool:
        """Check if the query only asks about a train number."""
        return (
            self.train_number_query
            and self.train_number is not None
            and not self.has_route
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        data = asdict(self)
        data["matched_patterns"] = list(self.matched_patterns)
        data["is_valid_for_search"] = self.is_valid_for_search
        return data


@dataclass(frozen=True, slots=True)
class Station:
    """A canonical station record.

    Attributes:
        id: Unique, opaque station identifier (e.g. '1000')
        primary_name: Main display name (e.g. '臺北')
        alternate_name: Name in a second script or language (e.g. 'Taipei')
        attributes: Any other descriptive fields, passed through unexamined
    """

    id: str
    primary_name: Optional[str] = None
    alternate_name: Optional[str] = None
    attributes: Mapping[str, Any] = field(
        default_factory=dict, compare=False, hash=False, repr=False
    )

    @property
    def display_name(self) -> str:
        """Return the name shown to users."""
        return self.primary_name or self.alternate_name or self.id


@dataclass(frozen=True, slots=True)
class StationMatch:
    """A single candidate station for a searched name."""

    name: str
    confidence: float
    station_id: str


@dataclass(frozen=True, slots=True)
class StationSearchResult:
    """Ranked outcome of resolving a place name to stations.

    Attributes:
        query: The name that was searched, after normalization
        main: Best candidate, absent when nothing matched
        alternatives: Remaining candidates by descending confidence
        needs_confirmation: True if the caller should ask the user to confirm
    """

    query: str = ""
    main: Optional[StationMatch] = None
    alternatives: tuple[StationMatch, ...] = field(default_factory=tuple)
    needs_confirmation: bool = True

    @property
    def is_empty(self) -> bool:
        """Check if no station matched."""
        return self.main is None

    @property
    def candidates(self) -> tuple[StationMatch, ...]:
        """Return main followed by the alternatives."""
        if self.main is None:
            return ()
        return (self.main, *self.alternatives)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "query": self.query,
            "main": asdict(self.main) if self.main else None,
            "alternatives": [asdict(match) for match in self.alternatives],
            "needs_confirmation": self.needs_confirmation,
        }


@dataclass(frozen=True, slots=True)
class ResolvedQuery:
    """A parsed query whose origin and destination went through resolution.

    Attributes:
        parsed: The parser output
        origin: Station candidates for ``parsed.origin_raw``, if present
        destination: Station candidates for ``parsed.destination_raw``, if present
    """

    parsed: ParsedQuery
    origin: Optional[StationSearchResult] = None
    destination: Optional[StationSearchResult] = None

    @property
    def is_ready(self) -> bool:
        """Check if both stations are confirmed and the query is searchable."""
        return (
            self.parsed.is_valid_for_search
            and self.origin is not None
            and self.destination is not None
            and not self.origin.needs_confirmation
            and not self.destination.needs_confirmation
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "parsed": self.parsed.to_dict(),
            "origin": self.origin.to_dict() if self.origin else None,
            "destination": self.destination.to_dict() if self.destination else None,
            "is_ready": self.is_ready,
        }
