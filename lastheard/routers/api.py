"""
Authenticated last-heard API endpoints.

Same aggregation as the public endpoints, for callers holding an API key
(X-API-Key header) or a logged-in session.
"""
from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.ext.asyncio import AsyncSession

from lastheard.core import get_db
from lastheard.core.auth import AuthContext, require_api_access
from lastheard.repositories import CallRecordRepository, TalkgroupRepository
from lastheard.routers.public import query_filter_params
from lastheard.schemas import CallsignActivity, TalkgroupActivity, TalkgroupOut
from lastheard.services.aggregation import QueryFilter

router = APIRouter(prefix="/api", tags=["Authenticated"])


@router.get(
    "/lastheard/grouped",
    response_model=list[TalkgroupActivity],
    summary="Activity by Talkgroup (authenticated)",
    description="Same as `/public/lastheard/grouped`; requires an API key or session.",
    responses={401: {"description": "Missing or invalid credentials"}, 403: {"description": "Key inactive or expired"}},
)
async def get_grouped_by_talkgroup(
    query_filter: QueryFilter = Depends(query_filter_params),
    auth: AuthContext = Depends(require_api_access),
    db: AsyncSession = Depends(get_db),
):
    return await CallRecordRepository(db).group_by_talkgroup(query_filter)


@router.get(
    "/lastheard/callsigns",
    response_model=list[CallsignActivity],
    summary="Activity by Callsign (authenticated)",
    description="Same as `/public/lastheard/callsigns`; requires an API key or session.",
    responses={401: {"description": "Missing or invalid credentials"}, 403: {"description": "Key inactive or expired"}},
)
async def get_grouped_by_callsign(
    query_filter: QueryFilter = Depends(query_filter_params),
    auth: AuthContext = Depends(require_api_access),
    db: AsyncSession = Depends(get_db),
):
    return await CallRecordRepository(db).group_by_callsign(query_filter)


@router.get(
    "/talkgroups",
    response_model=list[TalkgroupOut],
    summary="Talkgroup Directory",
    description="Every talkgroup in the directory, ordered by id.",
)
async def list_talkgroups(
    auth: AuthContext = Depends(require_api_access),
    db: AsyncSession = Depends(get_db),
):
    return await TalkgroupRepository(db).all()


@router.get(
    "/talkgroups/{talkgroup_id}",
    response_model=TalkgroupOut,
    summary="Talkgroup by Id",
    responses={404: {"description": "Talkgroup not in the directory"}},
)
async def get_talkgroup(
    talkgroup_id: int = Path(..., description="Talkgroup id", ge=1),
    auth: AuthContext = Depends(require_api_access),
    db: AsyncSession = Depends(get_db),
):
    talkgroup = await TalkgroupRepository(db).get(talkgroup_id)
    if talkgroup is None:
        raise HTTPException(status_code=404, detail=f"Talkgroup {talkgroup_id} not found")
    return talkgroup
