"""
Public last-heard API endpoints.

Unauthenticated read access used by the dashboards. Every endpoint answers
with an empty result rather than an error when the store is unavailable, so
the auto-refreshing pages stay quiet during hiccups.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from lastheard.core import get_db
from lastheard.repositories import CallRecordRepository, TalkgroupRepository
from lastheard.schemas import (
    CallRecordOut, CallsignActivity, CountryOption, LastheardStats,
    TalkgroupActivity, TalkgroupOption,
)
from lastheard.services.aggregation import QueryFilter, parse_int

router = APIRouter(prefix="/public", tags=["Public"])

TIME_RANGE_HELP = "Time window: 5m, 15m, 30m, 1h, 2h, 6h, 12h, 24h, 2d, 5d, 1w, 2w or 1M (default 5m)"


def query_filter_params(
    time_range: Optional[str] = Query(None, alias="timeRange", description=TIME_RANGE_HELP),
    limit: Optional[str] = Query(None, description="Rows to return (default 25, max 50)"),
    continent: Optional[str] = Query(None, description="Continent name, or All"),
    country: Optional[str] = Query(None, description="Country code, only used with a continent"),
    talkgroup: Optional[str] = Query(None, description="Talkgroup id"),
    callsign: Optional[str] = Query(None, description="Callsign search, * is a wildcard"),
) -> QueryFilter:
    """Build the query filter from raw query string values. Bad values are ignored, never rejected."""
    return QueryFilter.from_params(
        time_range=time_range,
        limit=limit,
        continent=continent,
        country=country,
        talkgroup=talkgroup,
        callsign=callsign,
    )


@router.get(
    "/lastheard/grouped",
    response_model=list[TalkgroupActivity],
    summary="Activity by Talkgroup",
    description="""
Calls grouped by talkgroup over a recent time window, busiest first.

Filters:
- **timeRange**: relative window (5m ... 1M)
- **continent** / **country**: restrict to talkgroups from the directory
- **talkgroup**: a single talkgroup id
- **callsign**: source callsign search, `*` is a wildcard
- **limit**: number of talkgroups (default 25, max 50)

The local talkgroup 9 is never included.
    """,
    responses={
        200: {
            "description": "Talkgroup activity",
            "content": {
                "application/json": {
                    "example": [
                        {"destinationId": 214, "destinationName": "Spain", "count": 42, "totalDuration": 1260},
                        {"destinationId": 91, "destinationName": "World-wide", "count": 30, "totalDuration": 905},
                    ]
                }
            }
        }
    }
)
async def get_grouped_by_talkgroup(
    query_filter: QueryFilter = Depends(query_filter_params),
    db: AsyncSession = Depends(get_db),
):
    """Get last-heard activity grouped by talkgroup."""
    return await CallRecordRepository(db).group_by_talkgroup(query_filter)


@router.get(
    "/lastheard/callsigns",
    response_model=list[CallsignActivity],
    summary="Activity by Callsign",
    description="""
Calls grouped by source callsign over a recent time window, most active first.

Accepts the same filters as `/public/lastheard/grouped`. A callsign search
without wildcards matches anywhere in the callsign; `EA*` matches callsigns
starting with EA.
    """,
    responses={
        200: {
            "description": "Callsign activity",
            "content": {
                "application/json": {
                    "example": [
                        {"callsign": "EA7KLK", "name": "Juan", "count": 12, "totalDuration": 480}
                    ]
                }
            }
        }
    }
)
async def get_grouped_by_callsign(
    query_filter: QueryFilter = Depends(query_filter_params),
    db: AsyncSession = Depends(get_db),
):
    """Get last-heard activity grouped by callsign."""
    return await CallRecordRepository(db).group_by_callsign(query_filter)


@router.get(
    "/lastheard",
    response_model=list[CallRecordOut],
    summary="Recent Calls",
    description="Most recent call records, newest first. `callsign` matches anywhere in the callsign.",
)
async def get_recent_calls(
    callsign: Optional[str] = Query(None, description="Callsign substring"),
    talkgroup: Optional[str] = Query(None, description="Talkgroup id"),
    limit: Optional[str] = Query(None, description="Rows to return (default 50, max 100)"),
    db: AsyncSession = Depends(get_db),
):
    return await CallRecordRepository(db).recent_entries(
        callsign=(callsign or "").strip() or None,
        talkgroup=parse_int(talkgroup),
        limit=parse_int(limit) or 50,
    )


@router.get(
    "/stats",
    response_model=LastheardStats,
    summary="Store Statistics",
    description="Total calls, calls in the last 24 hours and distinct callsigns and talkgroups.",
)
async def get_stats(db: AsyncSession = Depends(get_db)):
    return await CallRecordRepository(db).statistics()


@router.get(
    "/continents",
    response_model=list[str],
    summary="Continents",
    description="Continents present in the talkgroup directory.",
)
async def get_continents(db: AsyncSession = Depends(get_db)):
    return await TalkgroupRepository(db).continents()


@router.get(
    "/countries",
    response_model=list[CountryOption],
    summary="Countries on a Continent",
    description="Countries with talkgroups on the given continent. Empty for All and Global.",
)
async def get_countries(
    continent: Optional[str] = Query(None, description="Continent name"),
    db: AsyncSession = Depends(get_db),
):
    return await TalkgroupRepository(db).countries(continent)


@router.get(
    "/talkgroups",
    response_model=list[TalkgroupOption],
    summary="Talkgroups on a Continent",
    description="Talkgroups for a continent, optionally narrowed to one country. Empty for All and Global.",
)
async def get_talkgroups(
    continent: Optional[str] = Query(None, description="Continent name"),
    country: Optional[str] = Query(None, description="Country code"),
    db: AsyncSession = Depends(get_db),
):
    return await TalkgroupRepository(db).talkgroups(continent, country)
