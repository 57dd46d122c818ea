"""Tests for the query understanding service."""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import List
from zoneinfo import ZoneInfo

import pytest

from tra_query.domain.errors import QueryEngineError, StationDataError
from tra_query.domain.models import Station
from tra_query.services import QueryUnderstandingService
from tra_query.stations.abbreviations import DEFAULT_VARIANTS
from tra_query.stations.index import StationIndexHolder

NOW = datetime(2026, 10, 19, 9, 0, tzinfo=ZoneInfo("Asia/Taipei"))


@dataclass
class FakeRepository:
    stations: List[Station]
    calls: int = 0

    def load(self):
        self.calls += 1
        return list(self.stations)


@dataclass
class FailingRepository:
    error: Exception = field(default_factory=lambda: StationDataError("boom"))

    def load(self):
        raise self.error


@pytest.fixture
def repository(stations):
    return FakeRepository(list(stations))


@pytest.fixture
def service(parser, resolver, repository):
    service = QueryUnderstandingService(
        parser=parser,
        resolver=resolver,
        repository=repository,
        variants=DEFAULT_VARIANTS,
    )
    service.refresh_index()
    return service


class TestUnderstand:
    def test_resolves_both_stations(self, service):
        resolved = service.understand("台北到台中明天")

        assert resolved.parsed.origin_raw == "台北"
        assert resolved.parsed.destination_raw == "台中"
        assert resolved.parsed.date == "2026-10-20"
        assert resolved.origin.main.station_id == "1000"
        assert resolved.destination.main.station_id == "3300"
        assert resolved.is_ready

    def test_no_route_means_no_resolution(self, service):
        resolved = service.understand("明天早上8點")
        assert resolved.origin is None
        assert resolved.destination is None
        assert not resolved.is_ready

    def test_unknown_station_is_not_ready(self, service):
        resolved = service.understand("台北到火星明天")
        assert resolved.origin.main.station_id == "1000"
        assert resolved.destination.is_empty
        assert not resolved.is_ready

    def test_ambiguous_station_is_not_ready(self, service):
        resolved = service.understand("新左到高雄明天")
        assert resolved.origin.main.station_id == "4350"
        assert resolved.origin.needs_confirmation
        assert not resolved.is_ready

    def test_to_dict(self, service):
        data = service.understand("台北到台中明天").to_dict()
        assert data["is_ready"] is True
        assert data["origin"]["main"]["station_id"] == "1000"
        assert data["parsed"]["date"] == "2026-10-20"

    def test_explicit_now(self, service):
        resolved = service.understand("板橋到高雄明天", now=datetime(2026, 1, 31, 12, 0))
        assert resolved.parsed.date == "2026-02-01"


class TestResolveStation:
    def test_abbreviation(self, service):
        assert service.resolve_station("北車").main.name == "臺北"

    def test_before_any_dataset_is_loaded(self, parser, resolver):
        service = QueryUnderstandingService(parser=parser, resolver=resolver)
        assert service.resolve_station("臺北").is_empty
        assert len(service.index) == 0


class TestRefresh:
    def test_without_repository(self, parser, resolver):
        service = QueryUnderstandingService(parser=parser, resolver=resolver)
        with pytest.raises(QueryEngineError):
            service.refresh_index()

    def test_load_error_keeps_previous_index(self, service):
        previous = service.index
        service.repository = FailingRepository()

        with pytest.raises(StationDataError):
            service.refresh_index()

        assert service.index is previous
        assert service.resolve_station("臺北").main.station_id == "1000"

    def test_refresh_publishes_new_dataset(self, service, repository):
        repository.stations.append(Station("7000", "花蓮", "Hualien"))
        index = service.refresh_index()

        assert service.index is index
        assert repository.calls == 2
        assert service.resolve_station("花蓮").main.station_id == "7000"

    def test_captured_snapshot_survives_refresh(self, service, repository):
        snapshot = service.index
        repository.stations.clear()
        service.refresh_index()

        assert len(service.index) == 0
        assert service.resolver.resolve("臺北", snapshot).main.station_id == "1000"

    def test_shared_holder(self, parser, resolver, repository):
        holder = StationIndexHolder()
        first = QueryUnderstandingService(
            parser=parser, resolver=resolver, index_holder=holder, repository=repository
        )
        second = QueryUnderstandingService(
            parser=parser, resolver=resolver, index_holder=holder
        )
        first.refresh_index()
        assert second.resolve_station("高雄").main.station_id == "4400"

    def test_concurrent_reads_during_refresh(self, service):
        errors = []

        def read():
            for _ in range(200):
                result = service.understand("台北到高雄明天")
                if result.origin.main is None or result.destination.main is None:
                    errors.append(result)

        readers = [threading.Thread(target=read) for _ in range(4)]
        for reader in readers:
            reader.start()
        for _ in range(20):
            service.refresh_index()
        for reader in readers:
            reader.join()

        assert errors == []
