"""Query understanding service - Main orchestrator.

This service ties the parser, the station resolver and the published
station index together. It is what the CLI and any other caller use:

- ``parse``: text to ParsedQuery, no station lookup
- ``resolve_station``: place name to StationSearchResult
- ``understand``: parse, then resolve the extracted origin and destination
- ``refresh_index``: load a dataset snapshot, build an index, publish it
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from ..domain.errors import QueryEngineError
from ..domain.models import ParsedQuery, ResolvedQuery, StationSearchResult
from ..ports.nlp import QueryParserPort
from ..ports.stations import StationRepositoryPort, StationResolverPort
from ..stations.index import StationIndex, StationIndexHolder


@dataclass
class QueryUnderstandingService:
    """Parse railway queries and resolve their stations.

    Attributes:
        parser: Natural-language query parser
        resolver: Station name resolver
        index_holder: Publication point of the current station index
        repository: Dataset loader used by ``refresh_index``
        variants: Character folding table used when building indexes
    """

    parser: QueryParserPort
    resolver: StationResolverPort
    index_holder: StationIndexHolder = field(default_factory=StationIndexHolder)
    repository: Optional[StationRepositoryPort] = None
    variants: Optional[Mapping[str, str]] = None

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @property
    def index(self) -> StationIndex:
        """Return the currently published station index."""
        return self.index_holder.current

    def parse(
        self,
        query: Any,
        context: Any = None,
        now: Optional[datetime] = None,
    ) -> ParsedQuery:
        """Parse a query without resolving stations.

        Args:
            query: The user query.
            context: Optional supplementary text.
            now: Optional reference instant for relative dates.

        Returns:
            ParsedQuery.
        """
        return self.parser.parse(query, context=context, now=now)

    def resolve_station(self, name: Any) -> StationSearchResult:
        """Resolve one place name against the current index.

        Args:
            name: Place name as written by the user.

        Returns:
            StationSearchResult; empty when nothing matched or no
            dataset has been loaded yet.
        """
        return self.resolver.resolve(name, self.index_holder.current)

    def understand(
        self,
        query: Any,
        context: Any = None,
        now: Optional[datetime] = None,
    ) -> ResolvedQuery:
        """Parse a query and resolve its origin and destination.

        Both names are resolved against the same index snapshot, even if
        a refresh publishes a new one in the middle of the call.

        Args:
            query: The user query.
            context: Optional supplementary text.
            now: Optional reference instant for relative dates.

        Returns:
            ResolvedQuery with station candidates for each extracted name.
        """
        index = self.index_holder.current
        parsed = self.parser.parse(query, context=context, now=now)

        origin = (
            self.resolver.resolve(parsed.origin_raw, index)
            if parsed.origin_raw is not None
            else None
        )
        destination = (
            self.resolver.resolve(parsed.destination_raw, index)
            if parsed.destination_raw is not None
            else None
        )

        resolved = ResolvedQuery(parsed=parsed, origin=origin, destination=destination)
        self._logger.debug(
            "Query understood",
            extra={
                "confidence": parsed.confidence,
                "origin_found": bool(origin and origin.main),
                "destination_found": bool(destination and destination.main),
                "ready": resolved.is_ready,
            },
        )
        return resolved

    def refresh_index(self) -> StationIndex:
        """Reload the station dataset and publish a new index.

        The new index is fully built before it replaces the current one;
        calls already running keep the snapshot they started with.

        Returns:
            The newly published index.

        Raises:
            QueryEngineError: If no repository is configured.
            StationDataError: If the dataset cannot be loaded.
        """
        if self.repository is None:
            raise QueryEngineError("No station repository configured")

        stations = self.repository.load()
        index = self.index_holder.rebuild(stations, self.variants)
        self._logger.info("Station index refreshed", extra={"stations": len(index)})
        return index
