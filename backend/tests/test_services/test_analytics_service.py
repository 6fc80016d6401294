"""Analytics rollup tests — daily upsert, page-view aggregation and the overview."""

import datetime as dt
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import ValidationError
from app.models.analytics import PageView, VisitorStat
from app.models.room import Room
from app.services import analytics_service, booking_service, catalog_service
from app.services.analytics_service import PageViewEvent
from app.services.booking_service import GuestContact, StayRange

DAY = dt.date(2024, 6, 1)


async def _rows_for(db: AsyncSession, day: dt.date) -> int:
    result = await db.execute(select(func.count()).select_from(VisitorStat).where(VisitorStat.date == day))
    return result.scalar_one()


class TestUpsertDailyStat:
    async def test_repeat_upsert_overwrites(self, db_session: AsyncSession):
        await analytics_service.upsert_daily_stat(db_session, DAY, 50, 150, 40)
        stat = await analytics_service.upsert_daily_stat(db_session, DAY, 50, 150, 40)

        assert await _rows_for(db_session, DAY) == 1
        assert (stat.visitors, stat.page_views, stat.unique_visitors) == (50, 150, 40)

    async def test_second_call_values_win(self, db_session: AsyncSession):
        await analytics_service.upsert_daily_stat(db_session, DAY, 50, 150, 40)
        stat = await analytics_service.upsert_daily_stat(db_session, DAY, 7, 9, 3)

        assert await _rows_for(db_session, DAY) == 1
        assert (stat.visitors, stat.page_views, stat.unique_visitors) == (7, 9, 3)

    async def test_negative_counters_rejected(self, db_session: AsyncSession):
        with pytest.raises(ValidationError):
            await analytics_service.upsert_daily_stat(db_session, DAY, -1, 0, 0)


class TestRollup:
    async def test_aggregates_one_day(self, db_session: AsyncSession):
        def view(hour: int, session_id: str | None, ip: str, day: dt.date = DAY) -> PageView:
            return PageView(
                page_url="/",
                session_id=session_id,
                ip_address=ip,
                created_at=dt.datetime.combine(day, dt.time(hour)),
            )

        db_session.add_all(
            [
                view(0, "s1", "10.0.0.1"),
                view(9, "s1", "10.0.0.1"),
                view(12, "s2", "10.0.0.1"),
                view(23, "s3", "10.0.0.2"),
                view(14, None, "10.0.0.3"),
                view(10, "s9", "10.0.0.9", day=DAY + dt.timedelta(days=1)),
                view(23, "s8", "10.0.0.8", day=DAY - dt.timedelta(days=1)),
            ]
        )
        await db_session.flush()

        stat = await analytics_service.rollup_day(db_session, DAY)

        assert stat.page_views == 5
        assert stat.visitors == 3
        assert stat.unique_visitors == 3

        # Re-running replaces rather than accumulates.
        again = await analytics_service.rollup_day(db_session, DAY)
        assert again.page_views == 5
        assert await _rows_for(db_session, DAY) == 1

    async def test_empty_day(self, db_session: AsyncSession):
        stat = await analytics_service.rollup_day(db_session, DAY)
        assert (stat.visitors, stat.page_views, stat.unique_visitors) == (0, 0, 0)

    async def test_record_page_view_appends(self, db_session: AsyncSession):
        event = PageViewEvent(page_url="/rooms", ip_address="10.1.1.1", session_id="abc")
        await analytics_service.record_page_view(db_session, event)
        await analytics_service.record_page_view(db_session, event)
        total = (await db_session.execute(select(func.count()).select_from(PageView))).scalar_one()
        assert total == 2


class TestVisitorStats:
    async def test_windows(self, db_session: AsyncSession):
        today = dt.date(2024, 12, 31)
        for days_ago in (0, 6, 7, 29, 30, 364, 365):
            await analytics_service.upsert_daily_stat(db_session, today - dt.timedelta(days=days_ago), 1, 1, 1)

        async def ages(period: str) -> list[int]:
            stats = await analytics_service.get_visitor_stats(db_session, period, today=today)
            return [(today - stat.date).days for stat in stats]

        assert await ages("daily") == [0, 6]
        assert await ages("weekly") == [0, 6, 7, 29]
        assert await ages("monthly") == [0, 6, 7, 29, 30, 364]

    async def test_unknown_period(self, db_session: AsyncSession):
        with pytest.raises(ValidationError):
            await analytics_service.get_visitor_stats(db_session, "hourly")


class TestOverview:
    async def test_counts_and_revenue(self, db_session: AsyncSession, test_room: Room):
        await catalog_service.create_product(db_session, {"name": "P", "price": Decimal("5.00")})
        guest = GuestContact("G", "g@example.com", "+1")
        confirmed = await booking_service.create_reservation(
            db_session, test_room.id, StayRange(dt.date(2024, 6, 1), dt.date(2024, 6, 3)), guest
        )
        await booking_service.update_reservation_status(db_session, confirmed.id, "confirmed")
        await booking_service.create_reservation(
            db_session, test_room.id, StayRange(dt.date(2024, 7, 1), dt.date(2024, 7, 2)), guest
        )

        overview = await analytics_service.get_overview(db_session)

        assert overview["total_products"] == 1
        assert overview["total_categories"] == 3
        assert overview["total_rooms"] == 1
        assert overview["reservations_by_status"] == {"pending": 1, "confirmed": 1, "cancelled": 0}
        assert overview["confirmed_revenue"] == Decimal("200.00")
