"""Tests for analytics endpoints — page views, daily counters and the overview."""

import datetime as dt
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from app.database import Database
from app.models.analytics import PageView, VisitorStat

pytestmark = pytest.mark.asyncio


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _date_str(offset: int) -> str:
    """Return an ISO date string relative to today."""
    return (dt.date.today() + dt.timedelta(days=offset)).isoformat()


async def _count(database: Database, model) -> int:
    async with database.session() as session:
        return (await session.execute(select(func.count()).select_from(model))).scalar_one()


# ---------------------------------------------------------------------------
# POST /api/v1/analytics/page-views
# ---------------------------------------------------------------------------


class TestPageViews:
    async def test_public_page_view_recorded(self, client: AsyncClient, database: Database):
        response = await client.post(
            "/api/v1/analytics/page-views",
            json={"page_url": "/rooms", "session_id": "abc"},
            headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1", "User-Agent": "pytest"},
        )
        assert response.status_code == 201
        assert response.json()["success"] is True

        async with database.session() as session:
            view = (await session.execute(select(PageView))).scalar_one()
        assert view.ip_address == "203.0.113.7"
        assert view.user_agent == "pytest"
        assert view.session_id == "abc"

    async def test_missing_url_is_400(self, client: AsyncClient):
        response = await client.post("/api/v1/analytics/page-views", json={"session_id": "abc"})
        assert response.status_code == 400

    async def test_rollup_counts_recorded_views(self, client: AsyncClient, auth_headers: dict):
        for session_id, ip in (("s1", "10.0.0.1"), ("s1", "10.0.0.1"), ("s2", "10.0.0.2")):
            await client.post(
                "/api/v1/analytics/page-views",
                json={"page_url": "/", "session_id": session_id},
                headers={"X-Forwarded-For": ip},
            )
        # Page views are timestamped by the database clock, which is UTC.
        today = dt.datetime.now(dt.timezone.utc).date().isoformat()

        response = await client.post(f"/api/v1/analytics/rollup/{today}", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert (data["page_views"], data["visitors"], data["unique_visitors"]) == (3, 2, 2)


# ---------------------------------------------------------------------------
# PUT /api/v1/analytics/daily/{day} and GET /api/v1/analytics/visitors
# ---------------------------------------------------------------------------


class TestDailyStats:
    async def test_put_twice_keeps_one_row(self, client: AsyncClient, auth_headers: dict, database: Database):
        day = _date_str(-1)
        counters = {"visitors": 50, "page_views": 150, "unique_visitors": 40}

        first = await client.put(f"/api/v1/analytics/daily/{day}", json=counters, headers=auth_headers)
        second = await client.put(f"/api/v1/analytics/daily/{day}", json=counters, headers=auth_headers)

        assert first.status_code == second.status_code == 200
        assert second.json()["data"]["page_views"] == 150
        assert await _count(database, VisitorStat) == 1

    async def test_negative_counter_is_400(self, client: AsyncClient, auth_headers: dict):
        response = await client.put(
            f"/api/v1/analytics/daily/{_date_str(0)}",
            json={"visitors": -1, "page_views": 0, "unique_visitors": 0},
            headers=auth_headers,
        )
        assert response.status_code == 400

    async def test_visitors_window(self, client: AsyncClient, auth_headers: dict):
        for offset in (0, -3, -10):
            await client.put(
                f"/api/v1/analytics/daily/{_date_str(offset)}",
                json={"visitors": 1, "page_views": 2, "unique_visitors": 1},
                headers=auth_headers,
            )

        daily = await client.get("/api/v1/analytics/visitors", headers=auth_headers)
        assert [s["date"] for s in daily.json()["data"]] == [_date_str(0), _date_str(-3)]

        weekly = await client.get("/api/v1/analytics/visitors", params={"period": "weekly"}, headers=auth_headers)
        assert [s["date"] for s in weekly.json()["data"]] == [_date_str(0), _date_str(-3), _date_str(-10)]

    async def test_unknown_period_is_400(self, client: AsyncClient, auth_headers: dict):
        response = await client.get("/api/v1/analytics/visitors", params={"period": "hourly"}, headers=auth_headers)
        assert response.status_code == 400

    async def test_visitors_require_admin(self, client: AsyncClient):
        response = await client.get("/api/v1/analytics/visitors")
        assert response.status_code == 401


# ---------------------------------------------------------------------------
# GET /api/v1/analytics/overview
# ---------------------------------------------------------------------------


class TestOverview:
    async def test_overview(self, client: AsyncClient, auth_headers: dict, test_room):
        created = await client.post(
            "/api/v1/reservations",
            json={
                "room_id": test_room.id,
                "guest_name": "Ana Guest",
                "guest_email": "ana@example.com",
                "guest_phone": "+38160000000",
                "check_in_date": _date_str(5),
                "check_out_date": _date_str(8),
            },
        )
        await client.put(
            f"/api/v1/reservations/{created.json()['data']['id']}/status",
            json={"status": "confirmed"},
            headers=auth_headers,
        )

        response = await client.get("/api/v1/analytics/overview", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total_products"] == 0
        assert data["total_categories"] == 3
        assert data["total_rooms"] == 1
        assert data["reservations_by_status"] == {"pending": 0, "confirmed": 1, "cancelled": 0}
        assert Decimal(data["confirmed_revenue"]) == Decimal("300.00")
