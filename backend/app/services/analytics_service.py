"""Analytics rollup — page-view log and per-day visitor counters.

``visitor_stats`` holds exactly one row per calendar date. Writers go through
a single ``INSERT ... ON CONFLICT (date) DO UPDATE`` so repeated or concurrent
upserts for the same day never double the counters or raise.
"""

import datetime as dt
import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import dialect_insert
from app.errors import ValidationError
from app.models.analytics import PageView, VisitorStat
from app.models.category import Category
from app.models.product import Product
from app.models.reservation import RESERVATION_STATUSES, STATUS_CONFIRMED, Reservation
from app.models.room import Room

logger = logging.getLogger(__name__)

# Length of the trailing window, in days, for each reporting period.
PERIOD_DAYS = {"daily": 7, "weekly": 30, "monthly": 365}


@dataclass(frozen=True)
class PageViewEvent:
    page_url: str
    ip_address: str | None = None
    user_agent: str | None = None
    referrer: str | None = None
    session_id: str | None = None


async def upsert_daily_stat(
    db: AsyncSession,
    day: dt.date,
    visitors: int,
    page_views: int,
    unique_visitors: int,
) -> VisitorStat:
    """Set the counters for ``day``, inserting the row if it does not exist yet.

    Args:
        db: Session owning the transaction.
        day: Calendar date of the row.
        visitors: Distinct sessions seen that day.
        page_views: Page-view events that day.
        unique_visitors: Distinct IP addresses that day.

    Returns:
        The stored row, reloaded after the upsert.

    Raises:
        ValidationError: Any counter is negative.
    """
    if min(visitors, page_views, unique_visitors) < 0:
        raise ValidationError("Visitor counters cannot be negative")

    table = VisitorStat.__table__
    stmt = dialect_insert(db.get_bind().dialect.name, table).values(
        date=day,
        visitors=visitors,
        page_views=page_views,
        unique_visitors=unique_visitors,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[table.c.date],
        set_={
            "visitors": stmt.excluded.visitors,
            "page_views": stmt.excluded.page_views,
            "unique_visitors": stmt.excluded.unique_visitors,
            "updated_at": func.now(),
        },
    )
    await db.execute(stmt)

    result = await db.execute(
        select(VisitorStat).where(VisitorStat.date == day).execution_options(populate_existing=True)
    )
    stat = result.scalar_one()
    logger.info(
        "Upserted visitor stats for %s: visitors=%d page_views=%d unique=%d",
        day,
        visitors,
        page_views,
        unique_visitors,
    )
    return stat


async def record_page_view(db: AsyncSession, event: PageViewEvent) -> PageView:
    page_view = PageView(
        page_url=event.page_url,
        ip_address=event.ip_address,
        user_agent=event.user_agent,
        referrer=event.referrer,
        session_id=event.session_id,
    )
    db.add(page_view)
    await db.flush()
    return page_view


async def rollup_day(db: AsyncSession, day: dt.date) -> VisitorStat:
    """Aggregate the page-view log for ``day`` into its ``visitor_stats`` row.

    page views = events, visitors = distinct session ids, unique visitors =
    distinct IP addresses. Re-running the rollup overwrites the row.
    """
    start = dt.datetime.combine(day, dt.time.min)
    end = start + dt.timedelta(days=1)
    result = await db.execute(
        select(
            func.count(PageView.id),
            func.count(func.distinct(PageView.session_id)),
            func.count(func.distinct(PageView.ip_address)),
        ).where(PageView.created_at >= start, PageView.created_at < end)
    )
    page_views, visitors, unique_visitors = result.one()
    return await upsert_daily_stat(db, day, visitors, page_views, unique_visitors)


async def get_visitor_stats(
    db: AsyncSession,
    period: str = "daily",
    today: dt.date | None = None,
) -> list[VisitorStat]:
    """Rows for the trailing window of ``period`` ending ``today``, newest first."""
    if period not in PERIOD_DAYS:
        raise ValidationError(f"Unknown period {period!r}; expected one of {', '.join(PERIOD_DAYS)}")
    today = today or dt.date.today()
    since = today - dt.timedelta(days=PERIOD_DAYS[period])

    result = await db.execute(
        select(VisitorStat)
        .where(VisitorStat.date > since, VisitorStat.date <= today)
        .order_by(VisitorStat.date.desc())
    )
    return list(result.scalars().all())


async def get_overview(db: AsyncSession) -> dict:
    """Headline counts for the admin dashboard."""
    totals = {}
    for key, model in (("total_products", Product), ("total_categories", Category), ("total_rooms", Room)):
        result = await db.execute(select(func.count()).select_from(model))
        totals[key] = result.scalar_one()

    by_status = dict.fromkeys(RESERVATION_STATUSES, 0)
    result = await db.execute(select(Reservation.status, func.count()).group_by(Reservation.status))
    for status, count in result.all():
        by_status[status] = count

    revenue_result = await db.execute(
        select(func.coalesce(func.sum(Reservation.total_amount), 0)).where(
            Reservation.status == STATUS_CONFIRMED
        )
    )
    revenue = Decimal(str(revenue_result.scalar_one())).quantize(Decimal("0.01"))

    return {**totals, "reservations_by_status": by_status, "confirmed_revenue": revenue}
