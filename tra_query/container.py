"""Dependency injection container.

This module provides a simple DI container without external frameworks.
It allows registering and resolving dependencies for the application.

Design principles:
1. No magic - explicit registration and resolution
2. Testable - easy to swap implementations
3. Lazy loading - adapters instantiated on first use
4. Thread-safe - resolution may happen from several threads
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from .config import AppConfig, get_config
from .domain.errors import ConfigurationError


def load_config() -> AppConfig:
    """Load the application configuration.

    Returns:
        The cached configuration.

    Raises:
        ConfigurationError: If a setting fails validation.
    """
    try:
        return get_config()
    except ValidationError as e:
        errors = e.errors()
        setting = ".".join(str(part) for part in errors[0]["loc"]) if errors else ""
        raise ConfigurationError(
            f"Invalid configuration for {e.title}",
            setting_name=setting,
            cause=e,
        )


@dataclass
class Container:
    """Dependency injection container.

    Usage:
        # Production
        container = Container.create_default()
        service = container.resolve(QueryUnderstandingService)

        # Testing
        container = Container(config=AppConfig())
        container.register(StationRepositoryPort, lambda: FakeRepository())
        repository = container.resolve(StationRepositoryPort)

    Attributes:
        config: Application configuration
    """

    config: AppConfig = field(default_factory=load_config)

    _factories: Dict[type[Any], Callable[[], Any]] = field(
        default_factory=dict, repr=False
    )
    _singletons: Dict[type[Any], Any] = field(default_factory=dict, repr=False)
    _singleton_types: set[type[Any]] = field(default_factory=set, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def register(
        self,
        port_type: type[Any],
        factory: Callable[[], Any],
        singleton: bool = True,
    ) -> None:
        """Register a factory for a port type.

        Args:
            port_type: The type (usually a Protocol) to register.
            factory: A callable that creates instances of the type.
            singleton: If True, only one instance is created.
        """
        with self._lock:
            self._factories[port_type] = factory
            if singleton:
                self._singleton_types.add(port_type)
            else:
                self._singleton_types.discard(port_type)
            self._singletons.pop(port_type, None)

    def resolve(self, port_type: type[Any]) -> Any:
        """Resolve an instance of a port type.

        Args:
            port_type: The type to resolve.

        Returns:
            An instance of the requested type.

        Raises:
            KeyError: If the type is not registered.
        """
        with self._lock:
            if port_type not in self._factories:
                raise KeyError(f"Type not registered: {port_type}")

            if port_type in self._singleton_types:
                if port_type not in self._singletons:
                    self._singletons[port_type] = self._factories[port_type]()
                return self._singletons[port_type]

            return self._factories[port_type]()

    def is_registered(self, port_type: type[Any]) -> bool:
        """Check if a type is registered."""
        return port_type in self._factories

    def clear_singletons(self) -> None:
        """Clear all cached singletons.

        Call this in tests to ensure fresh instances.
        """
        with self._lock:
            self._singletons.clear()

    def clear_all(self) -> None:
        """Clear all registrations and singletons."""
        with self._lock:
            self._factories.clear()
            self._singletons.clear()
            self._singleton_types.clear()

    @classmethod
    def create_default(cls, config: Optional[AppConfig] = None) -> Container:
        """Create a container with default production bindings.

        Nothing is loaded here: the station dataset is read the first
        time ``QueryUnderstandingService.refresh_index`` is called.

        Args:
            config: Optional configuration override.

        Returns:
            A configured Container instance.

        Raises:
            ConfigurationError: If the configuration is invalid.
        """
        from .adapters.stations import CSVStationRepository, JSONStationRepository
        from .nlp.query_parser import QueryParser
        from .ports.nlp import QueryParserPort
        from .ports.stations import StationRepositoryPort, StationResolverPort
        from .services import QueryUnderstandingService
        from .stations import StationIndexHolder, StationResolver

        config = config or load_config()
        container = cls(config=config)
        station_config = config.station

        # Dataset loader chosen from the file extension
        def create_repository() -> StationRepositoryPort:
            if station_config.stations_path.suffix.lower() == ".json":
                return JSONStationRepository(station_config)
            return CSVStationRepository(station_config)

        container.register(StationRepositoryPort, create_repository)

        container.register(
            QueryParserPort,
            lambda: QueryParser(config.parser),
        )
        container.register(
            StationResolverPort,
            lambda: StationResolver(
                abbreviations=dict(station_config.abbreviations),
                max_results=station_config.max_results,
                ambiguity_margin=station_config.ambiguity_margin,
                spelling_cutoff=station_config.spelling_cutoff,
                max_query_length=config.parser.max_query_length,
            ),
        )
        container.register(StationIndexHolder, StationIndexHolder)

        # Main service
        def create_query_service() -> QueryUnderstandingService:
            return QueryUnderstandingService(
                parser=container.resolve(QueryParserPort),
                resolver=container.resolve(StationResolverPort),
                index_holder=container.resolve(StationIndexHolder),
                repository=container.resolve(StationRepositoryPort),
                variants=dict(station_config.variants),
            )

        container.register(QueryUnderstandingService, create_query_service)

        return container


# Global default container (lazy initialized)
_default_container: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """Get the default application container.

    Returns:
        The default Container instance (creates one if needed).
    """
    global _default_container
    if _default_container is None:
        with _container_lock:
            if _default_container is None:
                _default_container = Container.create_default()
    return _default_container


def reset_container() -> None:
    """Reset the default container.

    Call this in tests to ensure a fresh container.
    """
    global _default_container
    with _container_lock:
        if _default_container is not None:
            _default_container.clear_all()
        _default_container = None
