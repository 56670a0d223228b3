"""
System status and health API endpoints.
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from lastheard.core import get_db, db_execute_safe
from lastheard.schemas import HealthResponse

router = APIRouter(tags=["System"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="""
Check the health of the service.

Checks:
- **database**: store answers a trivial query
- **feed**: Brandmeister connection state and ingestion counters
- **maintenance**: scheduler state and last job results
    """,
)
async def health_check(request: Request, db: AsyncSession = Depends(get_db)):
    services = {}

    result = await db_execute_safe(db, text("SELECT 1"))
    services["database"] = {"status": "up" if result is not None else "down"}

    feed = getattr(request.app.state, "feed", None)
    services["feed"] = feed.get_stats() if feed else {"status": "disabled"}

    maintenance = getattr(request.app.state, "maintenance", None)
    services["maintenance"] = maintenance.get_stats() if maintenance else {"status": "disabled"}

    return {
        "status": "healthy" if result is not None else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "services": services,
    }


@router.get("/metrics", summary="Prometheus Metrics", include_in_schema=False)
async def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
