"""
Aggregation query layer for last-heard statistics.

Request parameters are turned into an immutable QueryFilter once, at the HTTP
boundary. The filter is then compiled into a parameterized SELECT that groups
call records either by talkgroup or by callsign.

Filter composition:
- time window: Start >= now - window (always applied)
- local talkgroup 9: always excluded
- continent: destination must be a directory talkgroup on that continent
- country: further restricts within the continent
- talkgroup: exact destination id
- callsign: LIKE pattern against the source callsign
- limit: applied last
"""
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from sqlalchemy import Select, desc, func, select

from lastheard.models import CallRecord, Talkgroup
from lastheard.services.normalizer import LOCAL_TALKGROUP_ID

ALL_CONTINENTS = "All"
GLOBAL_CONTINENT = "Global"
DEFAULT_LIMIT = 25
MAX_LIMIT = 50


class TimeRange(str, Enum):
    """Relative time windows offered by the dashboards."""
    FIVE_MINUTES = "5m"
    FIFTEEN_MINUTES = "15m"
    THIRTY_MINUTES = "30m"
    ONE_HOUR = "1h"
    TWO_HOURS = "2h"
    SIX_HOURS = "6h"
    TWELVE_HOURS = "12h"
    ONE_DAY = "24h"
    TWO_DAYS = "2d"
    FIVE_DAYS = "5d"
    ONE_WEEK = "1w"
    TWO_WEEKS = "2w"
    ONE_MONTH = "1M"

    @property
    def seconds(self) -> int:
        return _TIME_RANGE_SECONDS[self]

    @classmethod
    def parse(cls, token: Optional[str]) -> "TimeRange":
        """Parse a timeRange token, falling back to five minutes."""
        try:
            return cls(token)
        except ValueError:
            return cls.FIVE_MINUTES


_TIME_RANGE_SECONDS = {
    TimeRange.FIVE_MINUTES: 5 * 60,
    TimeRange.FIFTEEN_MINUTES: 15 * 60,
    TimeRange.THIRTY_MINUTES: 30 * 60,
    TimeRange.ONE_HOUR: 3600,
    TimeRange.TWO_HOURS: 2 * 3600,
    TimeRange.SIX_HOURS: 6 * 3600,
    TimeRange.TWELVE_HOURS: 12 * 3600,
    TimeRange.ONE_DAY: 24 * 3600,
    TimeRange.TWO_DAYS: 2 * 86400,
    TimeRange.FIVE_DAYS: 5 * 86400,
    TimeRange.ONE_WEEK: 7 * 86400,
    TimeRange.TWO_WEEKS: 14 * 86400,
    TimeRange.ONE_MONTH: 30 * 86400,
}


def parse_int(value: Any) -> Optional[int]:
    """Lenient integer parse for query parameters. Returns None on failure."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def callsign_pattern(value: Optional[str]) -> Optional[str]:
    """
    Build a LIKE pattern from a user supplied callsign search.

    '*' is the user facing wildcard and becomes '%'. A search without any
    wildcard matches anywhere in the callsign.
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    pattern = value.replace("*", "%")
    if "%" not in pattern and "_" not in pattern:
        pattern = f"%{pattern}%"
    return pattern


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class QueryFilter:
    """Validated filter for the grouped last-heard queries."""
    time_range: TimeRange = TimeRange.FIVE_MINUTES
    limit: int = DEFAULT_LIMIT
    continent: Optional[str] = None
    country: Optional[str] = None
    talkgroup: Optional[int] = None
    callsign: Optional[str] = None  # LIKE pattern, already translated

    @classmethod
    def from_params(
        cls,
        time_range: Optional[str] = None,
        limit: Any = None,
        continent: Optional[str] = None,
        country: Optional[str] = None,
        talkgroup: Any = None,
        callsign: Optional[str] = None,
    ) -> "QueryFilter":
        """Build a filter from raw query string values, never raising."""
        parsed_limit = parse_int(limit)
        if parsed_limit is None or parsed_limit <= 0:
            parsed_limit = DEFAULT_LIMIT

        continent = _clean(continent)
        if continent == ALL_CONTINENTS:
            continent = None

        country = _clean(country)
        if continent is None or continent == GLOBAL_CONTINENT:
            country = None

        parsed_talkgroup = parse_int(talkgroup)
        if parsed_talkgroup is not None and parsed_talkgroup <= 0:
            parsed_talkgroup = None

        return cls(
            time_range=TimeRange.parse(time_range),
            limit=min(parsed_limit, MAX_LIMIT),
            continent=continent,
            country=country,
            talkgroup=parsed_talkgroup,
            callsign=callsign_pattern(callsign),
        )

    def start_time(self, now: Optional[int] = None) -> int:
        """Absolute lower bound of the time window."""
        if now is None:
            now = int(time.time())
        return now - self.time_range.seconds


def build_conditions(query_filter: QueryFilter, now: Optional[int] = None) -> list:
    """WHERE clauses shared by both grouping modes."""
    conditions = [
        CallRecord.start >= query_filter.start_time(now),
        CallRecord.destination_id != LOCAL_TALKGROUP_ID,
    ]

    if query_filter.continent:
        conditions.append(
            CallRecord.destination_id.in_(
                select(Talkgroup.talkgroup_id).where(Talkgroup.continent == query_filter.continent)
            )
        )
        if query_filter.country:
            conditions.append(
                CallRecord.destination_id.in_(
                    select(Talkgroup.talkgroup_id).where(Talkgroup.country == query_filter.country)
                )
            )

    if query_filter.talkgroup is not None:
        conditions.append(CallRecord.destination_id == query_filter.talkgroup)

    if query_filter.callsign:
        conditions.append(CallRecord.source_call.like(query_filter.callsign))

    return conditions


def talkgroup_activity_statement(query_filter: QueryFilter, now: Optional[int] = None) -> Select:
    """Calls per talkgroup, busiest first."""
    count = func.count().label("count")
    return (
        select(
            CallRecord.destination_id.label("destinationId"),
            CallRecord.destination_name.label("destinationName"),
            count,
            func.sum(CallRecord.duration).label("totalDuration"),
        )
        .where(*build_conditions(query_filter, now))
        .group_by(CallRecord.destination_id, CallRecord.destination_name)
        .order_by(desc(count), CallRecord.destination_id)
        .limit(query_filter.limit)
    )


def callsign_activity_statement(query_filter: QueryFilter, now: Optional[int] = None) -> Select:
    """Calls per source callsign, busiest first."""
    count = func.count().label("count")
    return (
        select(
            CallRecord.source_call.label("callsign"),
            func.max(CallRecord.source_name).label("name"),
            count,
            func.sum(CallRecord.duration).label("totalDuration"),
        )
        .where(*build_conditions(query_filter, now))
        .group_by(CallRecord.source_call)
        .order_by(desc(count), CallRecord.source_call)
        .limit(query_filter.limit)
    )


def talkgroup_rows_to_dicts(rows) -> list[dict]:
    # Row is a tuple, so "count" must be read through the mapping
    return [
        {
            "destinationId": m["destinationId"],
            "destinationName": m["destinationName"],
            "count": m["count"],
            "totalDuration": int(m["totalDuration"] or 0),
        }
        for m in (row._mapping for row in rows)
    ]


def callsign_rows_to_dicts(rows) -> list[dict]:
    return [
        {
            "callsign": m["callsign"],
            "name": m["name"],
            "count": m["count"],
            "totalDuration": int(m["totalDuration"] or 0),
        }
        for m in (row._mapping for row in rows)
    ]
