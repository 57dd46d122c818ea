"""In-memory station index.

A ``StationIndex`` is an immutable snapshot derived from one station
dataset. It is built once, in isolation, and then published through a
``StationIndexHolder``. Readers capture ``holder.current`` once per call
and keep using that snapshot even if a newer one is published meanwhile.

Keys are lower-cased and folded through a character-variant table, so
"台北", "臺北" and "TAIPEI"/"taipei" each share a key.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

from ..domain.models import Station

logger = logging.getLogger(__name__)


def _empty() -> Mapping:
    return MappingProxyType({})


def _freeze(groups: Dict[str, List[Station]]) -> Mapping[str, tuple[Station, ...]]:
    return MappingProxyType({key: tuple(value) for key, value in groups.items()})


@dataclass(frozen=True)
class StationIndex:
    """Lookup tables over one station dataset snapshot.

    Attributes:
        stations: Indexed stations, in dataset order
        by_id: Station id to station
        by_name: Primary-name key to stations
        by_prefix: Every non-empty prefix of every primary-name key to stations
        by_alternate: Alternate-name key to stations
        primary_keys: (primary-name key, station) pairs in dataset order
        alternate_keys: (alternate-name key, station) pairs in dataset order
        order: Station id to its position in the dataset
        variants: Character folding table, as used by ``str.translate``
    """

    stations: tuple[Station, ...] = ()
    by_id: Mapping[str, Station] = field(default_factory=_empty)
    by_name: Mapping[str, tuple[Station, ...]] = field(default_factory=_empty)
    by_prefix: Mapping[str, tuple[Station, ...]] = field(default_factory=_empty)
    by_alternate: Mapping[str, tuple[Station, ...]] = field(default_factory=_empty)
    primary_keys: tuple[tuple[str, Station], ...] = ()
    alternate_keys: tuple[tuple[str, Station], ...] = ()
    order: Mapping[str, int] = field(default_factory=_empty)
    variants: Mapping[int, str] = field(default_factory=_empty, repr=False)

    def __len__(self) -> int:
        return len(self.stations)

    def key(self, text: str) -> str:
        """Return the lookup key for a name or query."""
        return text.lower().translate(self.variants)

    def get(self, station_id: str) -> Optional[Station]:
        """Get a station by id."""
        return self.by_id.get(station_id)

    @classmethod
    def empty(cls) -> StationIndex:
        """Return an index over no station at all."""
        return cls()

    @classmethod
    def build(
        cls,
        stations: Iterable[Station],
        variants: Optional[Mapping[str, str]] = None,
    ) -> StationIndex:
        """Build a fresh index from a dataset snapshot.

        Stations with a duplicate id, or with neither a primary nor an
        alternate name, are skipped with a warning.

        Args:
            stations: Station records in dataset order.
            variants: Characters to fold together, e.g. ``{"臺": "台"}``.

        Returns:
            A new, fully built index. No state is shared with any
            previously built index.
        """
        table = {ord(source): target for source, target in (variants or {}).items()}

        def key(text: str) -> str:
            return text.lower().translate(table)

        kept: List[Station] = []
        by_id: Dict[str, Station] = {}
        by_name: Dict[str, List[Station]] = defaultdict(list)
        by_prefix: Dict[str, List[Station]] = defaultdict(list)
        by_alternate: Dict[str, List[Station]] = defaultdict(list)
        primary_keys: List[tuple[str, Station]] = []
        alternate_keys: List[tuple[str, Station]] = []

        for station in stations:
            if not station.id or station.id in by_id:
                logger.warning(
                    "Skipping station with missing or duplicate id",
                    extra={"station_id": station.id},
                )
                continue
            if not station.primary_name and not station.alternate_name:
                logger.warning(
                    "Skipping station without a name",
                    extra={"station_id": station.id},
                )
                continue

            by_id[station.id] = station
            kept.append(station)

            if station.primary_name:
                name = key(station.primary_name)
                by_name[name].append(station)
                for end in range(1, len(name) + 1):
                    by_prefix[name[:end]].append(station)
                primary_keys.append((name, station))

            if station.alternate_name:
                alternate = key(station.alternate_name)
                by_alternate[alternate].append(station)
                alternate_keys.append((alternate, station))

        index = cls(
            stations=tuple(kept),
            by_id=MappingProxyType(by_id),
            by_name=_freeze(by_name),
            by_prefix=_freeze(by_prefix),
            by_alternate=_freeze(by_alternate),
            primary_keys=tuple(primary_keys),
            alternate_keys=tuple(alternate_keys),
            order=MappingProxyType({station.id: i for i, station in enumerate(kept)}),
            variants=MappingProxyType(table),
        )
        logger.info(
            "Station index built",
            extra={
                "stations": len(kept),
                "names": len(by_name),
                "prefixes": len(by_prefix),
                "alternates": len(by_alternate),
            },
        )
        return index


@dataclass
class StationIndexHolder:
    """Publication point for the current station index.

    Reads are lock-free: ``current`` returns whatever snapshot was last
    published. Writers build a complete index first and then replace the
    reference in one assignment.

    Attributes:
        index: Initial snapshot; an empty index until a dataset is loaded
    """

    index: StationIndex = field(default_factory=StationIndex.empty)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def current(self) -> StationIndex:
        """Return the snapshot new calls should use."""
        return self.index

    def swap(self, index: StationIndex) -> StationIndex:
        """Publish a fully built index.

        Args:
            index: The new snapshot.

        Returns:
            The snapshot it replaces.
        """
        with self._lock:
            previous, self.index = self.index, index
        logger.info(
            "Station index published",
            extra={"stations": len(index), "previous_stations": len(previous)},
        )
        return previous

    def rebuild(
        self,
        stations: Iterable[Station],
        variants: Optional[Mapping[str, str]] = None,
    ) -> StationIndex:
        """Build an index from ``stations`` and publish it.

        Returns:
            The newly published index.
        """
        index = StationIndex.build(stations, variants)
        self.swap(index)
        return index
