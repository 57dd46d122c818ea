"""Centralized configuration using Pydantic Settings.

Every tunable of the engine lives here: input bounds, the home
timezone used to resolve "today", the station dataset location and the
resolver knobs (result cap, ambiguity margin, abbreviation table).

Configuration can be overridden via environment variables:
- TRQ_PARSER_HOME_TIMEZONE=Asia/Taipei
- TRQ_STATION_DATA_DIR=/path/to/data (defaults to the dataset bundled in tra_query/data)
- TRQ_STATION_STATIONS_FILE=stations.json
- TRQ_STATION_ABBREVIATIONS='{"北車": "臺北"}'
- TRQ_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

import importlib.resources as pkg_resources
from functools import lru_cache
from pathlib import Path
from typing import Dict

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .nlp.normalize import MAX_CONTEXT_LENGTH, MAX_QUERY_LENGTH
from .stations.abbreviations import DEFAULT_ABBREVIATIONS, DEFAULT_VARIANTS


def bundled_data_dir() -> Path:
    """Return the directory of the station dataset shipped with the package."""
    return Path(str(pkg_resources.files("tra_query").joinpath("data")))


class ParserConfig(BaseSettings):
    """Query parser configuration.

    Environment variables prefixed with TRQ_PARSER_.
    """

    model_config = SettingsConfigDict(env_prefix="TRQ_PARSER_")

    max_query_length: int = Field(default=MAX_QUERY_LENGTH, gt=0)
    max_context_length: int = Field(default=MAX_CONTEXT_LENGTH, gt=0)
    home_timezone: str = "Asia/Taipei"


class StationConfig(BaseSettings):
    """Station dataset and resolver configuration.

    Environment variables prefixed with TRQ_STATION_.
    """

    model_config = SettingsConfigDict(env_prefix="TRQ_STATION_")

    data_dir: Path = Field(default_factory=bundled_data_dir)
    stations_file: str = "stations.csv"
    max_results: int = Field(default=10, gt=0)
    ambiguity_margin: float = Field(default=0.05, ge=0.0, le=1.0)
    spelling_cutoff: float = Field(default=80.0, ge=0.0, le=100.0)
    abbreviations: Dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_ABBREVIATIONS)
    )
    variants: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_VARIANTS))

    @field_validator("variants")
    @classmethod
    def _single_characters(cls, value: Dict[str, str]) -> Dict[str, str]:
        for source, target in value.items():
            if len(source) != 1 or len(target) != 1:
                raise ValueError(
                    f"Variant entries must map one character to one character: {source!r}"
                )
        return value

    @property
    def stations_path(self) -> Path:
        """Full path to the stations dataset file."""
        return self.data_dir / self.stations_file


class ObservabilityConfig(BaseSettings):
    """Logging configuration.

    Environment variables prefixed with TRQ_LOG_.
    """

    model_config = SettingsConfigDict(env_prefix="TRQ_LOG_")

    level: str = "WARNING"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class AppConfig(BaseSettings):
    """Main application configuration aggregating all sub-configs.

        config = get_config()
        print(config.parser.home_timezone)
        print(config.station.stations_path)

    Environment variables prefixed with TRQ_.
    """

    model_config = SettingsConfigDict(env_prefix="TRQ_")

    parser: ParserConfig = Field(default_factory=ParserConfig)
    station: StationConfig = Field(default_factory=StationConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get the singleton application configuration.

    Configuration is loaded once and cached. To reload configuration
    (e.g., in tests), use reset_config() first.

    Returns:
        The application configuration instance.
    """
    return AppConfig()


def reset_config() -> None:
    """Reset the configuration cache.

    Call this in tests to ensure a fresh configuration is loaded.
    """
    get_config.cache_clear()
