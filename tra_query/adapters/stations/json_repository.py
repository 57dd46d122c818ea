"""JSON station repository adapter.

Reads TDX-style station records::

    [{"StationID": "1000",
      "StationName": {"Zh_tw": "臺北", "En": "Taipei"},
      "StationAddress": "..."}]

The top level may be the list itself or an object holding it under
``Stations`` or ``data``. Keys other than ``StationID`` and
``StationName`` are kept as opaque attributes.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Sequence

from ...config import StationConfig, get_config
from ...domain.errors import StationDataError
from ...domain.models import Station

_LIST_KEYS = ("Stations", "data")


@dataclass
class JSONStationRepository:
    """Station repository that loads TDX-style JSON.

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
        """Load all stations from the JSON file.

        Returns:
            Stations in file order.

        Raises:
            StationDataError: If the file cannot be read, is not valid
                JSON, or holds malformed records.
        """
        self._logger.debug("Loading stations", extra={"path": str(self.source)})

        try:
            with self.source.open(encoding="utf-8-sig") as f:
                payload = json.load(f)
            stations = [self._to_station(record) for record in self._records(payload)]
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            # json.JSONDecodeError is a ValueError
            raise StationDataError(
                "Failed to load stations",
                file_path=str(self.source),
                cause=e,
            )

        self._logger.info("Stations loaded", extra={"stations": len(stations)})
        return stations

    @staticmethod
    def _records(payload: Any) -> List[Any]:
        if isinstance(payload, dict):
            for key in _LIST_KEYS:
                if isinstance(payload.get(key), list):
                    return payload[key]
            raise ValueError(f"Expected a list under one of {_LIST_KEYS}")
        if isinstance(payload, list):
            return payload
        raise ValueError("Expected a list of station records")

    @staticmethod
    def _to_station(record: Any) -> Station:
        if not isinstance(record, dict):
            raise TypeError(f"Station record must be an object, got {type(record).__name__}")

        station_id = str(record["StationID"]).strip()
        if not station_id:
            raise ValueError("Empty StationID")

        names = record.get("StationName") or {}
        if isinstance(names, str):
            names = {"Zh_tw": names}

        return Station(
            id=station_id,
            primary_name=(names.get("Zh_tw") or "").strip() or None,
            alternate_name=(names.get("En") or "").strip() or None,
            attributes={
                key: value
                for key, value in record.items()
                if key not in ("StationID", "StationName")
            },
        )
