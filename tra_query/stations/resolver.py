"""Station resolution: map a free-text place name to ranked stations.

Candidates are collected tier by tier into a capped, de-duplicated list:

1. exact primary name                    -> 1.0
2. prefix of a primary name              -> max(0.7, len(query) / len(name))
3. exact alternate name                  -> 0.8
4. substring either way (primary names)  -> max(0.5, length similarity)
5. spelling similarity (rapidfuzz), only when tiers 1-4 found nothing,
   always scored below the substring floor

An abbreviation table is consulted first: a query equal to a known
short form ("北車") is replaced by the canonical name it stands for.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, NamedTuple, Optional

from rapidfuzz import fuzz, process

from ..domain.models import StationMatch, StationSearchResult
from ..nlp.normalize import MAX_QUERY_LENGTH, normalize
from .abbreviations import DEFAULT_ABBREVIATIONS
from .index import StationIndex

EXACT_CONFIDENCE = 1.0
PREFIX_FLOOR = 0.7
ALTERNATE_CONFIDENCE = 0.8
FUZZY_FLOOR = 0.5
SPELLING_WEIGHT = 0.45

DEFAULT_MAX_RESULTS = 10
DEFAULT_AMBIGUITY_MARGIN = 0.05
DEFAULT_SPELLING_CUTOFF = 80.0


class _Candidate(NamedTuple):
    match: StationMatch
    matched_length: int


@dataclass
class StationResolver:
    """Multi-tier station name resolver.

    The resolver holds no dataset: every call receives the index
    snapshot to search, so concurrent calls never share mutable state.

    Attributes:
        abbreviations: Short form to canonical primary name
        max_results: Maximum number of candidates returned
        ambiguity_margin: Candidates this close to the best one make the
            result ambiguous
        spelling_cutoff: Minimum rapidfuzz ratio (0-100) for the
            spelling tier
        max_query_length: Queries are truncated to this length
    """

    abbreviations: Mapping[str, str] = field(
        default_factory=lambda: dict(DEFAULT_ABBREVIATIONS)
    )
    max_results: int = DEFAULT_MAX_RESULTS
    ambiguity_margin: float = DEFAULT_AMBIGUITY_MARGIN
    spelling_cutoff: float = DEFAULT_SPELLING_CUTOFF
    max_query_length: int = MAX_QUERY_LENGTH

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def search(self, query: Any, index: StationIndex) -> List[StationMatch]:
        """Return ranked candidates for a place name.

        Args:
            query: Place name as written by the user. Non-string values
                count as empty.
            index: Snapshot to search.

        Returns:
            At most ``max_results`` matches, best first, without
            duplicate station ids. Empty when nothing matched.
        """
        text = normalize(query, self.max_query_length)
        if not text:
            return []

        key = index.key(text)
        canonical = self._expand(key, index)
        if canonical is not None:
            candidates = self._collect(index.key(canonical), index)
            if candidates:
                floored = [
                    _Candidate(
                        StationMatch(
                            c.match.name,
                            max(c.match.confidence, PREFIX_FLOOR),
                            c.match.station_id,
                        ),
                        c.matched_length,
                    )
                    for c in candidates
                ]
                return self._rank(floored, index)

        return self._rank(self._collect(key, index), index)

    def resolve(self, query: Any, index: StationIndex) -> StationSearchResult:
        """Resolve a place name to a main candidate and alternatives.

        Args:
            query: Place name as written by the user.
            index: Snapshot to search.

        Returns:
            StationSearchResult. ``needs_confirmation`` is False only for
            a single exact match with no close runner-up.
        """
        text = normalize(query, self.max_query_length)
        matches = self.search(text, index)

        if not matches:
            self._logger.debug("No station matched", extra={"query_length": len(text)})
            return StationSearchResult(query=text)

        main, *alternatives = matches
        ambiguous = any(
            main.confidence - other.confidence <= self.ambiguity_margin
            for other in alternatives
        )
        result = StationSearchResult(
            query=text,
            main=main,
            alternatives=tuple(alternatives),
            needs_confirmation=main.confidence < EXACT_CONFIDENCE or ambiguous,
        )

        self._logger.debug(
            "Station resolved",
            extra={
                "matches": len(matches),
                "top_confidence": main.confidence,
                "needs_confirmation": result.needs_confirmation,
            },
        )
        return result

    def _expand(self, key: str, index: StationIndex) -> Optional[str]:
        for short, canonical in self.abbreviations.items():
            if index.key(short) == key:
                return canonical
        return None

    def _collect(self, key: str, index: StationIndex) -> List[_Candidate]:
        results: List[_Candidate] = []
        seen: set[str] = set()

        def add(station, confidence: float, matched: str) -> None:
            if station.id in seen or len(results) >= self.max_results:
                return
            seen.add(station.id)
            results.append(
                _Candidate(
                    StationMatch(station.display_name, confidence, station.id),
                    len(matched),
                )
            )

        for station in index.by_name.get(key, ()):
            add(station, EXACT_CONFIDENCE, key)

        for station in index.by_prefix.get(key, ()):
            name = index.key(station.primary_name)
            add(station, max(PREFIX_FLOOR, len(key) / len(name)), name)

        for station in index.by_alternate.get(key, ()):
            add(station, ALTERNATE_CONFIDENCE, key)

        if len(results) < self.max_results:
            for name, station in index.primary_keys:
                if key in name or name in key:
                    distance = abs(len(name) - len(key)) / max(len(name), len(key))
                    add(station, max(FUZZY_FLOOR, 1 - distance), name)

        if not results:
            self._spelling(key, index, add)

        return results

    def _spelling(
        self,
        key: str,
        index: StationIndex,
        add: Callable[..., None],
    ) -> None:
        candidates = (*index.primary_keys, *index.alternate_keys)
        if not candidates:
            return

        hits = process.extract(
            key,
            [name for name, _ in candidates],
            scorer=fuzz.ratio,
            score_cutoff=self.spelling_cutoff,
            limit=None,
        )
        for name, similarity, position in hits:
            add(
                candidates[position][1],
                round(SPELLING_WEIGHT * similarity / 100, 6),
                name,
            )

    def _rank(
        self, candidates: List[_Candidate], index: StationIndex
    ) -> List[StationMatch]:
        # Ties go to the shorter matched name (alternate names included),
        # then to dataset order
        ordered = sorted(
            candidates,
            key=lambda c: (
                -c.match.confidence,
                c.matched_length,
                index.order.get(c.match.station_id, len(index)),
            ),
        )
        return [c.match for c in ordered[: self.max_results]]
