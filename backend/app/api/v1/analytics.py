"""Analytics API router — page-view tracking and visitor statistics."""

import datetime as dt

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db, require_admin
from app.api.responses import ok
from app.auth.verifier import AdminIdentity
from app.schemas.analytics import DailyStatUpsert, OverviewResponse, PageViewCreate, VisitorStatResponse
from app.schemas.common import Envelope, MessageResponse
from app.services import analytics_service
from app.services.analytics_service import PageViewEvent

router = APIRouter(prefix="/api/v1/analytics", tags=["analytics"])


def _client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


@router.post(
    "/page-views",
    response_model=Envelope[MessageResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Record a page view",
)
async def record_page_view(
    request: Request,
    body: PageViewCreate,
    db: AsyncSession = Depends(get_db),
) -> dict:
    event = PageViewEvent(
        page_url=body.page_url,
        referrer=body.referrer,
        session_id=body.session_id,
        ip_address=_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    await analytics_service.record_page_view(db, event)
    return ok({"message": "Page view recorded"})


@router.get("/visitors", response_model=Envelope[list[VisitorStatResponse]], summary="Visitor statistics")
async def get_visitor_stats(
    period: str = Query("daily", pattern="^(daily|weekly|monthly)$"),
    db: AsyncSession = Depends(get_db),
    _admin: AdminIdentity = Depends(require_admin),
) -> dict:
    stats = await analytics_service.get_visitor_stats(db, period)
    return ok(stats)


@router.get("/overview", response_model=Envelope[OverviewResponse], summary="Dashboard overview")
async def get_overview(
    db: AsyncSession = Depends(get_db),
    _admin: AdminIdentity = Depends(require_admin),
) -> dict:
    return ok(await analytics_service.get_overview(db))


@router.put("/daily/{day}", response_model=Envelope[VisitorStatResponse], summary="Set a day's counters")
async def upsert_daily_stat(
    day: dt.date,
    body: DailyStatUpsert,
    db: AsyncSession = Depends(get_db),
    _admin: AdminIdentity = Depends(require_admin),
) -> dict:
    stat = await analytics_service.upsert_daily_stat(
        db, day, body.visitors, body.page_views, body.unique_visitors
    )
    return ok(stat)


@router.post("/rollup/{day}", response_model=Envelope[VisitorStatResponse], summary="Roll up a day's page views")
async def rollup_day(
    day: dt.date,
    db: AsyncSession = Depends(get_db),
    _admin: AdminIdentity = Depends(require_admin),
) -> dict:
    stat = await analytics_service.rollup_day(db, day)
    return ok(stat)
