"""CSV station repository adapter.

Reads a station dataset with one row per station. Recognized columns
are ``station_id``, ``station_name`` (primary name) and
``station_name_en`` (alternate name); every other column is kept as an
opaque attribute of the station.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ...config import StationConfig, get_config
from ...domain.errors import StationDataError
from ...domain.models import Station

_KNOWN_COLUMNS = {"station_id", "station_name", "station_name_en"}


@dataclass
class CSVStationRepository:
    """Station repository that loads from a CSV file.

    This adapter implements StationRepositoryPort.

    Attributes:
        config: Station configuration (data directory, file name)
        path: Explicit file to read instead of ``config.stations_path``
    """

    config: StationConfig = field(default_factory=lambda: get_config().station)
    path: Optional[Path] = None
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @property
    def source(self) -> Path:
        """File the repository reads from."""
        return self.path or self.config.stations_path

    def load(self) -> Sequence[Station]:
        """Load all stations from the CSV file.

        Returns:
            Stations in file order. Rows without an id are skipped.

        Raises:
            StationDataError: If the file cannot be read or parsed.
        """
        self._logger.debug("Loading stations", extra={"path": str(self.source)})

        try:
            with self.source.open(encoding="utf-8-sig", newline="") as f:
                stations = self._read_rows(csv.DictReader(f))
        except (OSError, ValueError, csv.Error) as e:
            raise StationDataError(
                "Failed to load stations",
                file_path=str(self.source),
                cause=e,
            )

        self._logger.info("Stations loaded", extra={"stations": len(stations)})
        return stations

    def _read_rows(self, reader: csv.DictReader) -> List[Station]:
        stations: List[Station] = []
        skipped = 0

        for row in reader:
            station_id = (row.get("station_id") or "").strip()
            if not station_id:
                skipped += 1
                continue

            attributes: Dict[str, str] = {
                key: (value or "").strip()
                for key, value in row.items()
                if key is not None and key not in _KNOWN_COLUMNS
            }
            stations.append(
                Station(
                    id=station_id,
                    primary_name=(row.get("station_name") or "").strip() or None,
                    alternate_name=(row.get("station_name_en") or "").strip() or None,
                    attributes=attributes,
                )
            )

        if skipped:
            self._logger.warning("Rows without station id skipped", extra={"rows": skipped})
        return stations
