"""Unit tests for query filter parsing and statement building"""
import pytest
from sqlalchemy.dialects import sqlite

from lastheard.services.aggregation import (
    MAX_LIMIT, QueryFilter, TimeRange, callsign_pattern,
    callsign_activity_statement, parse_int, talkgroup_activity_statement,
)


class TestTimeRange:
    """Tests for the time window tokens"""

    @pytest.mark.parametrize("token,seconds", [
        ("5m", 300),
        ("15m", 900),
        ("30m", 1800),
        ("1h", 3600),
        ("2h", 7200),
        ("6h", 21600),
        ("12h", 43200),
        ("24h", 86400),
        ("2d", 172800),
        ("5d", 432000),
        ("1w", 604800),
        ("2w", 1209600),
        ("1M", 2592000),
    ])
    def test_token_seconds(self, token, seconds):
        assert TimeRange.parse(token).seconds == seconds

    def test_thirteen_tokens(self):
        assert len(TimeRange) == 13

    @pytest.mark.parametrize("token", [None, "", "3h", "1m", "forever"])
    def test_unknown_token_defaults_to_five_minutes(self, token):
        assert TimeRange.parse(token) == TimeRange.FIVE_MINUTES


class TestQueryFilterFromParams:
    """Tests for building filters from raw query strings"""

    def test_defaults(self):
        f = QueryFilter.from_params()
        assert f.time_range == TimeRange.FIVE_MINUTES
        assert f.limit == 25
        assert f.continent is None
        assert f.country is None
        assert f.talkgroup is None
        assert f.callsign is None

    @pytest.mark.parametrize("raw,expected", [
        ("10", 10),
        ("50", 50),
        ("500", MAX_LIMIT),
        ("abc", 25),
        ("0", 25),
        ("-3", 25),
        ("", 25),
    ])
    def test_limit(self, raw, expected):
        assert QueryFilter.from_params(limit=raw).limit == expected

    @pytest.mark.parametrize("raw,expected", [
        ("91", 91),
        (" 214 ", 214),
        ("abc", None),
        ("", None),
        ("0", None),
    ])
    def test_talkgroup_coercion(self, raw, expected):
        assert QueryFilter.from_params(talkgroup=raw).talkgroup == expected

    def test_all_continent_means_no_filter(self):
        f = QueryFilter.from_params(continent="All", country="ES")
        assert f.continent is None
        assert f.country is None

    def test_country_needs_continent(self):
        assert QueryFilter.from_params(country="ES").country is None

    def test_country_ignored_for_global(self):
        f = QueryFilter.from_params(continent="Global", country="ES")
        assert f.continent == "Global"
        assert f.country is None

    def test_continent_and_country(self):
        f = QueryFilter.from_params(continent="Europe", country="ES")
        assert (f.continent, f.country) == ("Europe", "ES")

    def test_filter_is_immutable(self):
        f = QueryFilter.from_params()
        with pytest.raises(Exception):
            f.limit = 10

    def test_start_time(self):
        f = QueryFilter.from_params(time_range="1h")
        assert f.start_time(now=1700003600) == 1700000000


class TestCallsignPattern:
    """Tests for callsign search translation"""

    def test_star_becomes_percent(self):
        assert callsign_pattern("EA*") == "EA%"

    def test_multiple_stars(self):
        assert callsign_pattern("*7KL*") == "%7KL%"

    def test_plain_search_is_substring(self):
        assert callsign_pattern("KLK") == "%KLK%"

    def test_sql_wildcards_used_as_given(self):
        assert callsign_pattern("EA_KLK") == "EA_KLK"
        assert callsign_pattern("EA%") == "EA%"

    def test_blank(self):
        assert callsign_pattern("  ") is None
        assert callsign_pattern(None) is None


class TestParseInt:
    def test_values(self):
        assert parse_int("12") == 12
        assert parse_int(7) == 7
        assert parse_int("1.5") is None
        assert parse_int(None) is None
        assert parse_int(True) is None


class TestStatements:
    """Compiled SQL keeps the invariants of both grouping modes"""

    def compile(self, stmt) -> str:
        return str(stmt.compile(dialect=sqlite.dialect()))

    def test_talkgroup_statement_excludes_local_and_orders_by_count(self):
        sql = self.compile(talkgroup_activity_statement(QueryFilter.from_params(), now=1700000000))
        assert '"DestinationID" != ' in sql
        assert "GROUP BY lastheard.\"DestinationID\", lastheard.\"DestinationName\"" in sql
        assert "ORDER BY" in sql and "DESC" in sql
        assert "LIMIT" in sql

    def test_callsign_statement_groups_by_callsign(self):
        sql = self.compile(callsign_activity_statement(QueryFilter.from_params(callsign="EA*"), now=1700000000))
        assert 'GROUP BY lastheard."SourceCall"' in sql
        assert "LIKE" in sql
        assert "max(lastheard.\"SourceName\")" in sql

    def test_continent_and_country_use_directory_subqueries(self):
        f = QueryFilter.from_params(continent="Europe", country="ES")
        sql = self.compile(talkgroup_activity_statement(f, now=1700000000))
        assert sql.count("FROM talkgroups") == 2
