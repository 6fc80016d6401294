"""Tests for room type and room endpoints."""

from datetime import date, timedelta
from decimal import Decimal

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio

CHECK_IN = date.today() + timedelta(days=30)


async def _room_type_id(client: AsyncClient, slug: str) -> int:
    response = await client.get("/api/v1/room-types")
    return {rt["slug"]: rt["id"] for rt in response.json()["data"]}[slug]


async def _create_room(client: AsyncClient, headers: dict, **fields) -> dict:
    response = await client.post("/api/v1/rooms", json=fields, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def _book_and_confirm(client: AsyncClient, headers: dict, room_id: int, check_in: date, check_out: date) -> dict:
    created = await client.post(
        "/api/v1/reservations",
        json={
            "room_id": room_id,
            "guest_name": "Ana Guest",
            "guest_email": "ana@example.com",
            "guest_phone": "+38160000000",
            "check_in_date": check_in.isoformat(),
            "check_out_date": check_out.isoformat(),
        },
    )
    assert created.status_code == 201, created.text
    reservation_id = created.json()["data"]["id"]
    confirmed = await client.put(
        f"/api/v1/reservations/{reservation_id}/status", json={"status": "confirmed"}, headers=headers
    )
    assert confirmed.status_code == 200, confirmed.text
    return confirmed.json()["data"]


# ---------------------------------------------------------------------------
# /api/v1/room-types
# ---------------------------------------------------------------------------


class TestRoomTypesApi:
    async def test_seeded_types_listed(self, client: AsyncClient):
        response = await client.get("/api/v1/room-types")
        assert response.status_code == 200
        assert {rt["slug"] for rt in response.json()["data"]} == {"standard", "family", "premium", "superior"}

    async def test_create_derives_slug(self, client: AsyncClient, auth_headers: dict):
        response = await client.post(
            "/api/v1/room-types",
            json={"name": "Garden Suite", "base_price": "180.00", "max_adults": 2},
            headers=auth_headers,
        )
        assert response.status_code == 201
        assert response.json()["data"]["slug"] == "garden-suite"

        duplicate = await client.post("/api/v1/room-types", json={"name": "Garden Suite"}, headers=auth_headers)
        assert duplicate.status_code == 409

    async def test_update(self, client: AsyncClient, auth_headers: dict):
        family_id = await _room_type_id(client, "family")
        response = await client.put(
            f"/api/v1/room-types/{family_id}", json={"max_children": 3}, headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["max_children"] == 3
        assert response.json()["data"]["name"] == "Family Room"

    async def test_rooms_of_type_include_unavailable(self, client: AsyncClient, auth_headers: dict, test_room):
        standard_id = await _room_type_id(client, "standard")
        hidden = await _create_room(
            client, auth_headers, name="Room 102", price_per_night="90.00", room_type_id=standard_id, is_available=False
        )

        response = await client.get(f"/api/v1/room-types/{standard_id}/rooms")
        assert response.status_code == 200
        assert {r["id"] for r in response.json()["data"]} == {test_room.id, hidden["id"]}

    async def test_delete_in_use_without_force_is_409(self, client: AsyncClient, auth_headers: dict, test_room):
        standard_id = await _room_type_id(client, "standard")

        response = await client.delete(f"/api/v1/room-types/{standard_id}", headers=auth_headers)

        assert response.status_code == 409
        assert "1 room" in response.json()["error"]
        assert (await client.get(f"/api/v1/rooms/{test_room.id}")).status_code == 200

    async def test_force_delete_cancels_and_removes(self, client: AsyncClient, auth_headers: dict, test_room):
        standard_id = await _room_type_id(client, "standard")
        reservation = await _book_and_confirm(
            client, auth_headers, test_room.id, CHECK_IN, CHECK_IN + timedelta(days=2)
        )

        response = await client.delete(f"/api/v1/room-types/{standard_id}?force=true", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["rooms_deleted"] == 1
        assert data["reservations_cancelled"] == 1
        assert (await client.get(f"/api/v1/room-types/{standard_id}")).status_code == 404
        assert (await client.get(f"/api/v1/rooms/{test_room.id}")).status_code == 404

        kept_response = await client.get(
            f"/api/v1/reservations/{reservation['id']}", params={"email": "ana@example.com"}
        )
        kept = kept_response.json()["data"]
        assert kept["status"] == "cancelled"
        assert kept["room_id"] is None
        assert kept["room_name"] == "Room 101"

    async def test_delete_unused_type(self, client: AsyncClient, auth_headers: dict):
        superior_id = await _room_type_id(client, "superior")
        response = await client.delete(f"/api/v1/room-types/{superior_id}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"]["rooms_deleted"] == 0


# ---------------------------------------------------------------------------
# /api/v1/rooms
# ---------------------------------------------------------------------------


class TestRoomsApi:
    async def test_create_room_reports_type(self, client: AsyncClient, auth_headers: dict):
        family_id = await _room_type_id(client, "family")
        room = await _create_room(
            client,
            auth_headers,
            name="Family 201",
            price_per_night="150.00",
            room_type_id=family_id,
            max_adults=4,
            max_children=2,
            amenities={"wifi": True, "beds": {"double": 1, "single": 2}},
        )
        assert room["room_type_slug"] == "family"
        assert room["room_type_name"] == "Family Room"
        assert Decimal(room["price_per_night"]) == Decimal("150.00")

    async def test_unknown_room_type_is_400(self, client: AsyncClient, auth_headers: dict):
        response = await client.post(
            "/api/v1/rooms", json={"name": "Nowhere", "price_per_night": "10.00", "room_type_id": 9999}, headers=auth_headers
        )
        assert response.status_code == 400

    async def test_list_filters(self, client: AsyncClient, auth_headers: dict, test_room):
        family_id = await _room_type_id(client, "family")
        family = await _create_room(
            client, auth_headers, name="Family 201", price_per_night="150.00", room_type_id=family_id, max_adults=4
        )
        await _create_room(
            client, auth_headers, name="Closed 202", price_per_night="120.00", room_type_id=family_id, is_available=False
        )

        everything = (await client.get("/api/v1/rooms")).json()["data"]
        assert {r["name"] for r in everything} == {"Room 101", "Family 201"}

        by_type = (await client.get("/api/v1/rooms", params={"room_type": "family"})).json()["data"]
        assert [r["id"] for r in by_type] == [family["id"]]

        by_price = (await client.get("/api/v1/rooms", params={"max_price": "120"})).json()["data"]
        assert [r["id"] for r in by_price] == [test_room.id]

        by_adults = (await client.get("/api/v1/rooms", params={"adults": 3})).json()["data"]
        assert [r["id"] for r in by_adults] == [family["id"]]

    async def test_list_excludes_booked_rooms_for_stay(self, client: AsyncClient, auth_headers: dict, test_room):
        await _book_and_confirm(client, auth_headers, test_room.id, CHECK_IN, CHECK_IN + timedelta(days=3))

        def stay(start: int, end: int) -> dict:
            return {
                "check_in": (CHECK_IN + timedelta(days=start)).isoformat(),
                "check_out": (CHECK_IN + timedelta(days=end)).isoformat(),
            }

        overlapping = (await client.get("/api/v1/rooms", params=stay(1, 2))).json()["data"]
        assert overlapping == []

        back_to_back = (await client.get("/api/v1/rooms", params=stay(3, 5))).json()["data"]
        assert [r["id"] for r in back_to_back] == [test_room.id]

    async def test_list_needs_both_dates(self, client: AsyncClient):
        response = await client.get("/api/v1/rooms", params={"check_in": CHECK_IN.isoformat()})
        assert response.status_code == 400

    async def test_availability_endpoint(self, client: AsyncClient, auth_headers: dict, test_room):
        await _book_and_confirm(client, auth_headers, test_room.id, CHECK_IN, CHECK_IN + timedelta(days=2))
        url = f"/api/v1/rooms/{test_room.id}/availability"

        busy = await client.get(
            url, params={"check_in": CHECK_IN.isoformat(), "check_out": (CHECK_IN + timedelta(days=1)).isoformat()}
        )
        assert busy.status_code == 200
        assert busy.json()["data"]["available"] is False

        free = await client.get(
            url,
            params={
                "check_in": (CHECK_IN + timedelta(days=2)).isoformat(),
                "check_out": (CHECK_IN + timedelta(days=4)).isoformat(),
            },
        )
        assert free.json()["data"]["available"] is True

        reversed_range = await client.get(
            url, params={"check_in": CHECK_IN.isoformat(), "check_out": CHECK_IN.isoformat()}
        )
        assert reversed_range.status_code == 400

    async def test_update_room(self, client: AsyncClient, auth_headers: dict, test_room):
        response = await client.put(
            f"/api/v1/rooms/{test_room.id}", json={"price_per_night": "110.00"}, headers=auth_headers
        )
        assert response.status_code == 200
        assert Decimal(response.json()["data"]["price_per_night"]) == Decimal("110.00")
        assert response.json()["data"]["name"] == "Room 101"

    async def test_delete_room_with_active_reservation_is_409(
        self, client: AsyncClient, auth_headers: dict, test_room
    ):
        await _book_and_confirm(client, auth_headers, test_room.id, CHECK_IN, CHECK_IN + timedelta(days=2))

        response = await client.delete(f"/api/v1/rooms/{test_room.id}", headers=auth_headers)
        assert response.status_code == 409

    async def test_delete_room(self, client: AsyncClient, auth_headers: dict, test_room):
        response = await client.delete(f"/api/v1/rooms/{test_room.id}", headers=auth_headers)
        assert response.status_code == 200
        assert (await client.get(f"/api/v1/rooms/{test_room.id}")).status_code == 404
