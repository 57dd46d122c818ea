"""Tests for multi-tier station resolution."""

import pytest

from tra_query.domain.models import Station
from tra_query.stations.abbreviations import DEFAULT_VARIANTS
from tra_query.stations.index import StationIndex
from tra_query.stations.resolver import (
    ALTERNATE_CONFIDENCE,
    EXACT_CONFIDENCE,
    FUZZY_FLOOR,
    PREFIX_FLOOR,
    StationResolver,
)


class TestTiers:
    def test_exact_name(self, resolver, index):
        result = resolver.resolve("臺北", index)
        assert result.main.station_id == "1000"
        assert result.main.name == "臺北"
        assert result.main.confidence == EXACT_CONFIDENCE
        assert result.alternatives == ()
        assert not result.needs_confirmation

    def test_variant_spelling_is_exact(self, resolver, index):
        result = resolver.resolve("台北", index)
        assert result.main.station_id == "1000"
        assert result.main.confidence == EXACT_CONFIDENCE

    def test_prefix_is_floored(self, resolver, index):
        result = resolver.resolve("台", index)
        assert [m.station_id for m in result.candidates] == ["1000", "3300", "4220"]
        assert all(m.confidence == PREFIX_FLOOR for m in result.candidates)
        assert result.needs_confirmation

    def test_prefix_ratio(self, resolver, index):
        result = resolver.resolve("新左", index)
        assert result.main.station_id == "4350"
        assert result.main.confidence == pytest.approx(max(PREFIX_FLOOR, 2 / 3))

    def test_alternate_name(self, resolver, index):
        result = resolver.resolve("Taichung", index)
        assert result.main.station_id == "3300"
        assert result.main.name == "臺中"
        assert result.main.confidence == ALTERNATE_CONFIDENCE
        assert result.needs_confirmation

    def test_substring_either_way(self, resolver, index):
        result = resolver.resolve("左營", index)
        assert result.main.station_id == "4340"
        assert [m.station_id for m in result.alternatives] == ["4350"]
        assert result.alternatives[0].confidence == pytest.approx(1 - 1 / 3)
        assert not result.needs_confirmation

    def test_query_containing_a_station_name(self, resolver, index):
        result = resolver.resolve("板橋區", index)
        assert result.main.station_id == "1020"
        assert result.main.confidence == pytest.approx(max(FUZZY_FLOOR, 1 - 1 / 3))

    def test_ranking_prefers_higher_confidence_then_shorter_names(self, resolver, index):
        result = resolver.resolve("新", index)
        assert [m.station_id for m in result.candidates] == ["1210", "4350", "1190"]
        assert result.candidates[-1].confidence == FUZZY_FLOOR

    def test_spelling_tier_only_when_nothing_else_matched(self, resolver, index):
        result = resolver.resolve("taipie", index)
        assert result.main.station_id == "1000"
        assert 0 < result.main.confidence < FUZZY_FLOOR
        assert result.needs_confirmation

    def test_no_match(self, resolver, index):
        result = resolver.resolve("不存在的地方", index)
        assert result.is_empty
        assert result.alternatives == ()
        assert result.needs_confirmation


class TestAbbreviations:
    def test_default_abbreviation(self, resolver, index):
        result = resolver.resolve("北車", index)
        assert result.main.name == "臺北"
        assert result.main.confidence >= PREFIX_FLOOR

    def test_abbreviation_result_is_floored(self, index):
        resolver = StationResolver(abbreviations={"竹": "新竹站"})
        result = resolver.resolve("竹", index)
        assert result.main.station_id == "1210"
        assert result.main.confidence == PREFIX_FLOOR

    def test_unknown_canonical_name_falls_back_to_query(self, index):
        resolver = StationResolver(abbreviations={"高雄": "不存在"})
        assert resolver.resolve("高雄", index).main.station_id == "4400"

    def test_table_is_configuration(self, index):
        assert StationResolver(abbreviations={}).resolve("北車", index).is_empty


class TestEdgeCases:
    @pytest.mark.parametrize("query", ["", "   ", "\x00\x01", None, 42, "站" * 5000])
    def test_never_raises(self, resolver, index, query):
        result = resolver.resolve(query, index)
        assert result.needs_confirmation

    def test_empty_query(self, resolver, index):
        result = resolver.resolve("", index)
        assert result.main is None
        assert result.alternatives == ()

    def test_empty_index(self, resolver):
        assert resolver.resolve("臺北", StationIndex.empty()).is_empty

    def test_result_cap(self, index):
        resolver = StationResolver(max_results=2)
        assert len(resolver.search("新", index)) == 2

    def test_duplicate_names_are_ambiguous(self, resolver):
        index = StationIndex.build([Station("A1", "大橋"), Station("A2", "大橋")])
        result = resolver.resolve("大橋", index)
        assert result.main.station_id == "A1"
        assert result.main.confidence == EXACT_CONFIDENCE
        assert result.needs_confirmation

    def test_ties_prefer_the_shorter_matched_name(self, resolver):
        index = StationIndex.build(
            [
                Station("P1", "abcde"),
                Station("A1", "很長的中文站名稱", "abcd"),
            ]
        )
        candidates = resolver.resolve("abcd", index).candidates
        assert [m.station_id for m in candidates] == ["A1", "P1"]
        assert candidates[0].confidence == candidates[1].confidence == ALTERNATE_CONFIDENCE

    def test_close_runner_up_is_ambiguous(self, index):
        resolver = StationResolver(ambiguity_margin=0.5)
        assert resolver.resolve("左營", index).needs_confirmation


@pytest.mark.parametrize(
    "query", ["台", "新", "北", "左營", "Taipei", "臺中", "高", "taipie", "中", "站"]
)
def test_candidates_are_unique_and_sorted(resolver, index, query):
    candidates = resolver.resolve(query, index).candidates
    ids = [m.station_id for m in candidates]
    confidences = [m.confidence for m in candidates]
    assert len(ids) == len(set(ids))
    assert confidences == sorted(confidences, reverse=True)
    assert all(0.0 <= c <= 1.0 for c in confidences)


def test_every_station_resolves_to_itself(resolver, stations):
    index = StationIndex.build(stations, DEFAULT_VARIANTS)
    for station in stations:
        result = resolver.resolve(station.primary_name, index)
        assert result.main.station_id == station.id
        assert result.main.confidence == EXACT_CONFIDENCE


def test_resolution_is_repeatable(resolver, stations):
    first = resolver.resolve("新", StationIndex.build(stations, DEFAULT_VARIANTS))
    second = resolver.resolve("新", StationIndex.build(stations, DEFAULT_VARIANTS))
    assert first == second
