"""Room API router — listings, availability and admin CRUD."""

from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import bounded, get_db, get_read_timeout, require_admin
from app.api.responses import ok
from app.auth.verifier import AdminIdentity
from app.errors import ValidationError
from app.schemas.common import Envelope, MessageResponse
from app.schemas.room import AvailabilityResponse, RoomCreate, RoomResponse, RoomUpdate
from app.services import booking_service
from app.services.booking_service import RoomFilters, StayRange

router = APIRouter(prefix="/api/v1/rooms", tags=["rooms"])


@router.get("", response_model=Envelope[list[RoomResponse]], summary="List bookable rooms")
async def list_rooms(
    room_type: str | None = Query(None, description="Room type slug"),
    min_price: Decimal | None = Query(None, ge=0),
    max_price: Decimal | None = Query(None, ge=0),
    adults: int | None = Query(None, ge=1),
    children: int | None = Query(None, ge=0),
    check_in: date | None = Query(None),
    check_out: date | None = Query(None),
    db: AsyncSession = Depends(get_db),
    timeout: float = Depends(get_read_timeout),
) -> dict:
    """List available rooms; with ``check_in`` and ``check_out`` only rooms free for that stay."""
    if (check_in is None) != (check_out is None):
        raise ValidationError("check_in and check_out must be given together")
    filters = RoomFilters(
        room_type=room_type,
        min_price=min_price,
        max_price=max_price,
        adults=adults,
        children=children,
        check_in=check_in,
        check_out=check_out,
    )
    rooms = await bounded(booking_service.list_rooms(db, filters), timeout)
    return ok(rooms)


@router.get("/{room_id}", response_model=Envelope[RoomResponse], summary="Get a room")
async def get_room(
    room_id: int,
    db: AsyncSession = Depends(get_db),
    timeout: float = Depends(get_read_timeout),
) -> dict:
    room = await bounded(booking_service.get_room(db, room_id), timeout)
    return ok(room)


@router.get(
    "/{room_id}/availability",
    response_model=Envelope[AvailabilityResponse],
    summary="Check a room's availability",
)
async def check_availability(
    room_id: int,
    check_in: date = Query(...),
    check_out: date = Query(...),
    db: AsyncSession = Depends(get_db),
    timeout: float = Depends(get_read_timeout),
) -> dict:
    available = await bounded(
        booking_service.check_availability(db, room_id, StayRange(check_in, check_out)), timeout
    )
    return ok({"room_id": room_id, "check_in": check_in, "check_out": check_out, "available": available})


@router.post(
    "",
    response_model=Envelope[RoomResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a room",
)
async def create_room(
    body: RoomCreate,
    db: AsyncSession = Depends(get_db),
    _admin: AdminIdentity = Depends(require_admin),
) -> dict:
    room = await booking_service.create_room(db, body.model_dump())
    return ok(room)


@router.put("/{room_id}", response_model=Envelope[RoomResponse], summary="Update a room")
async def update_room(
    room_id: int,
    body: RoomUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: AdminIdentity = Depends(require_admin),
) -> dict:
    room = await booking_service.update_room(db, room_id, body.model_dump(exclude_unset=True))
    return ok(room)


@router.delete("/{room_id}", response_model=Envelope[MessageResponse], summary="Delete a room")
async def delete_room(
    room_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: AdminIdentity = Depends(require_admin),
) -> dict:
    await booking_service.delete_room(db, room_id)
    return ok({"message": "Room deleted"})
