"""Station adapters - Implementations of StationRepositoryPort.

Available implementations:
- CSVStationRepository: Loads stations from a CSV file
- JSONStationRepository: Loads TDX-style station records from JSON
"""

from .csv_repository import CSVStationRepository
from .json_repository import JSONStationRepository

__all__ = ["CSVStationRepository", "JSONStationRepository"]
