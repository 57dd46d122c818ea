"""Tests for the CSV and JSON station repositories."""

import json

import pytest

from tra_query.adapters.stations import CSVStationRepository, JSONStationRepository
from tra_query.config import StationConfig
from tra_query.domain.errors import StationDataError
from tra_query.stations.abbreviations import DEFAULT_VARIANTS
from tra_query.stations.index import StationIndex
from tra_query.stations.resolver import StationResolver


class TestCSVStationRepository:
    def test_load(self, tmp_path):
        path = tmp_path / "stations.csv"
        path.write_text(
            "station_id,station_name,station_name_en,city\n"
            "1000,臺北,Taipei,臺北市\n"
            "3300,臺中,,臺中市\n",
            encoding="utf-8",
        )

        stations = CSVStationRepository(path=path).load()

        assert [s.id for s in stations] == ["1000", "3300"]
        assert stations[0].primary_name == "臺北"
        assert stations[0].alternate_name == "Taipei"
        assert stations[0].attributes == {"city": "臺北市"}
        assert stations[1].alternate_name is None

    def test_byte_order_mark(self, tmp_path):
        path = tmp_path / "stations.csv"
        path.write_text(
            "station_id,station_name\n1000,臺北\n", encoding="utf-8-sig"
        )
        assert CSVStationRepository(path=path).load()[0].id == "1000"

    def test_rows_without_id_are_skipped(self, tmp_path):
        path = tmp_path / "stations.csv"
        path.write_text(
            "station_id,station_name\n,無名\n1020,板橋\n", encoding="utf-8"
        )
        assert [s.id for s in CSVStationRepository(path=path).load()] == ["1020"]

    def test_path_from_config(self, tmp_path):
        (tmp_path / "mini.csv").write_text(
            "station_id,station_name\n4400,高雄\n", encoding="utf-8"
        )
        config = StationConfig(data_dir=tmp_path, stations_file="mini.csv")
        repository = CSVStationRepository(config)

        assert repository.source == tmp_path / "mini.csv"
        assert repository.load()[0].primary_name == "高雄"

    def test_missing_file(self, tmp_path):
        path = tmp_path / "missing.csv"
        with pytest.raises(StationDataError) as info:
            CSVStationRepository(path=path).load()
        assert info.value.file_path == str(path)
        assert isinstance(info.value.cause, OSError)
        assert str(info.value).count(str(path)) == 1

    def test_undecodable_file(self, tmp_path):
        path = tmp_path / "stations.csv"
        path.write_bytes(b"station_id,station_name\n1000,\xff\xfe\n")
        with pytest.raises(StationDataError):
            CSVStationRepository(path=path).load()


class TestJSONStationRepository:
    def _write(self, tmp_path, payload):
        path = tmp_path / "stations.json"
        path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
        return path

    def test_load_list(self, tmp_path):
        path = self._write(
            tmp_path,
            [
                {
                    "StationID": "1000",
                    "StationName": {"Zh_tw": "臺北", "En": "Taipei"},
                    "StationAddress": "臺北市中正區",
                },
                {"StationID": 4400, "StationName": "高雄"},
            ],
        )

        stations = JSONStationRepository(path=path).load()

        assert [s.id for s in stations] == ["1000", "4400"]
        assert stations[0].alternate_name == "Taipei"
        assert stations[0].attributes == {"StationAddress": "臺北市中正區"}
        assert stations[1].primary_name == "高雄"
        assert stations[1].alternate_name is None

    @pytest.mark.parametrize("key", ["Stations", "data"])
    def test_load_wrapped_list(self, tmp_path, key):
        path = self._write(
            tmp_path, {key: [{"StationID": "1020", "StationName": {"Zh_tw": "板橋"}}]}
        )
        assert JSONStationRepository(path=path).load()[0].primary_name == "板橋"

    @pytest.mark.parametrize(
        "payload",
        [
            {"stations": []},
            "not a list",
            [{"StationName": {"Zh_tw": "臺北"}}],
            [{"StationID": "  ", "StationName": "臺北"}],
            ["1000"],
        ],
    )
    def test_malformed_payload(self, tmp_path, payload):
        path = self._write(tmp_path, payload)
        with pytest.raises(StationDataError):
            JSONStationRepository(path=path).load()

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "stations.json"
        path.write_text("[{", encoding="utf-8")
        with pytest.raises(StationDataError) as info:
            JSONStationRepository(path=path).load()
        assert isinstance(info.value.cause, ValueError)


def test_bundled_dataset_resolves_every_station():
    stations = CSVStationRepository(StationConfig()).load()
    index = StationIndex.build(stations, DEFAULT_VARIANTS)
    resolver = StationResolver()

    assert len(index) == len(stations) == 29
    for station in stations:
        result = resolver.resolve(station.primary_name, index)
        assert result.main.station_id == station.id
        assert result.main.confidence == 1.0
