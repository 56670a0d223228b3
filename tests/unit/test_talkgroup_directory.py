"""Unit tests for talkgroup directory parsing and country derivation"""
import json

import pytest

from lastheard.services.talkgroups import (
    build_entry, continent_for, parse_directory, resolve_country
)


class TestResolveCountry:
    """Country derivation from the Brandmeister numbering plan"""

    @pytest.mark.parametrize("talkgroup_id,country", [
        (46601, "TW"),
        (250100, "RU"),
        (91, "Global"),
        (1, "Global"),
        (950, "Global"),
        (8801, "Global"),
        (9990, "Global"),
        (91000, "Global"),
        (214, "ES"),
        (2141, "ES"),
        (21465, "Global"),
        (262, "DE"),
        (2623201, "DE"),
        (3100, "US"),
        (310, "US"),
        (2350001, "GB"),
        (2348001, "GB"),
        (505, "AU"),
        (123, "Unknown"),
    ])
    def test_country(self, talkgroup_id, country):
        assert resolve_country(talkgroup_id) == country

    def test_four_digit_prefix_checked_first(self):
        # 2570 (Belarus) has no three digit counterpart
        assert resolve_country(2570123) == "BY"
        assert resolve_country(2410001) == "SE"

    def test_five_digit_ids_are_global(self):
        assert resolve_country(26232) == "Global"


class TestContinent:
    @pytest.mark.parametrize("country,continent", [
        ("ES", "Europe"),
        ("US", "North America"),
        ("BR", "South America"),
        ("JP", "Asia"),
        ("AU", "Oceania"),
        ("ZA", "Africa"),
        ("Global", "Global"),
        ("WW", "Global"),
        ("NA", "Africa"),
        ("AF", "Asia"),
        ("Unknown", None),
        (None, None),
    ])
    def test_continent(self, country, continent):
        assert continent_for(country) == continent


class TestBuildEntry:
    def test_derived_fields(self):
        entry = build_entry("214", " Spain ")
        assert entry == {
            "talkgroup_id": 214,
            "name": "Spain",
            "country": "ES",
            "continent": "Europe",
            "full_country_name": "Spain",
        }

    def test_explicit_country_used(self):
        entry = build_entry(91, "World-wide", "ww")
        assert entry["country"] == "WW"
        assert entry["continent"] == "Global"
        assert entry["full_country_name"] == "Worldwide"

    def test_unknown_country_name_falls_back_to_code(self):
        entry = build_entry(123, "Mystery")
        assert entry["country"] == "Unknown"
        assert entry["full_country_name"] == "Unknown"
        assert entry["continent"] is None

    @pytest.mark.parametrize("talkgroup_id,name", [
        ("abc", "Name"),
        (0, "Zero"),
        (-5, "Negative"),
        (214, ""),
        (214, None),
        (214, 42),
    ])
    def test_invalid_rows_skipped(self, talkgroup_id, name):
        assert build_entry(talkgroup_id, name) is None


class TestParseDirectory:
    """CSV and JSON talkgroup documents"""

    def test_csv_with_standard_headers(self):
        text = "talkgroup_id,name,country\n214,Spain,ES\n91,World-wide,Global\n"
        entries = parse_directory(text)
        assert [e["talkgroup_id"] for e in entries] == [214, 91]
        assert entries[1]["continent"] == "Global"

    def test_csv_header_aliases_case_insensitive(self):
        text = "TG,Description,Country_Code\n262,Deutschland,de\n"
        entries = parse_directory(text)
        assert entries == [{
            "talkgroup_id": 262,
            "name": "Deutschland",
            "country": "DE",
            "continent": "Europe",
            "full_country_name": "Germany",
        }]

    def test_csv_without_country_derives_it(self):
        entries = parse_directory("id,name\n3100,USA Nationwide\n")
        assert entries[0]["country"] == "US"
        assert entries[0]["continent"] == "North America"

    def test_csv_bad_rows_skipped(self):
        entries = parse_directory("id,name\n214,Spain\nxyz,Broken\n262,\n")
        assert [e["talkgroup_id"] for e in entries] == [214]

    def test_csv_with_bom(self):
        entries = parse_directory("\ufeffid,name\n214,Spain\n")
        assert entries[0]["talkgroup_id"] == 214

    def test_csv_without_id_column_rejected(self):
        with pytest.raises(ValueError):
            parse_directory("foo,bar\n1,2\n")

    def test_json_id_name_map(self):
        document = json.dumps({"91": "World-wide", "214": "Spain", "bad": "x", "262": ""})
        entries = parse_directory(document)
        assert sorted(e["talkgroup_id"] for e in entries) == [91, 214]

    def test_json_list_of_objects(self):
        document = json.dumps([{"id": 214, "name": "Spain"}, {"Talkgroup": "262", "Name": "Deutschland"}, "junk"])
        entries = parse_directory(document)
        assert [e["talkgroup_id"] for e in entries] == [214, 262]

    def test_invalid_json_raises(self):
        with pytest.raises(ValueError):
            parse_directory("{not json")
