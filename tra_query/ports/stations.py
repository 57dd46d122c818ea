"""Station ports - Abstractions for station data and resolution.

These protocols define the contracts for loading a station dataset
snapshot and resolving place names against an index built from it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Protocol, Sequence

if TYPE_CHECKING:
    from ..domain.models import Station, StationMatch, StationSearchResult
    from ..stations.index import StationIndex


class StationRepositoryPort(Protocol):
    """Port for loading the station dataset.

    Implementations:
    - adapters/stations/csv_repository.py (CSVStationRepository)
    - adapters/stations/json_repository.py (JSONStationRepository)
    """

    def load(self) -> Sequence[Station]:
        """Load every station record, in dataset order.

        Returns:
            The dataset snapshot.

        Raises:
            StationDataError: If the dataset cannot be read or decoded.
        """
        ...


class StationResolverPort(Protocol):
    """Port for place name resolution.

    Implementation: stations/resolver.py (StationResolver)
    """

    def search(self, query: Any, index: StationIndex) -> List[StationMatch]:
        """Return ranked candidates for a place name.

        Args:
            query: Place name as written by the user.
            index: Snapshot to search.

        Returns:
            Matches, best first.
        """
        ...

    def resolve(self, query: Any, index: StationIndex) -> StationSearchResult:
        """Resolve a place name to a main candidate and alternatives.

        Args:
            query: Place name as written by the user.
            index: Snapshot to search.

        Returns:
            StationSearchResult. Must not raise for any input.
        """
        ...
