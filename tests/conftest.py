"""Shared fixtures for the test suite."""

import os
import sys
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from tra_query.config import ParserConfig, reset_config
from tra_query.container import reset_container
from tra_query.domain.models import Station
from tra_query.nlp.query_parser import QueryParser
from tra_query.stations.abbreviations import DEFAULT_VARIANTS
from tra_query.stations.index import StationIndex
from tra_query.stations.resolver import StationResolver

# Monday 19 October 2026, 09:00 in Taipei.
NOW = datetime(2026, 10, 19, 9, 0, tzinfo=ZoneInfo("Asia/Taipei"))

STATIONS = (
    Station("1000", "臺北", "Taipei", {"city": "臺北市"}),
    Station("1020", "板橋", "Banqiao"),
    Station("1190", "北新竹", "North Hsinchu"),
    Station("1210", "新竹", "Hsinchu"),
    Station("3300", "臺中", "Taichung"),
    Station("4220", "臺南", "Tainan"),
    Station("4340", "左營", "Zuoying"),
    Station("4350", "新左營", "Xinzuoying"),
    Station("4400", "高雄", "Kaohsiung"),
)


@pytest.fixture(autouse=True)
def fresh_config():
    """Make every test start from an unconfigured environment."""
    reset_config()
    reset_container()
    yield
    reset_config()
    reset_container()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def parser():
    return QueryParser(ParserConfig(), clock=lambda: NOW)


@pytest.fixture
def stations():
    return STATIONS


@pytest.fixture
def index():
    return StationIndex.build(STATIONS, DEFAULT_VARIANTS)


@pytest.fixture
def resolver():
    return StationResolver()
