"""Room type API router."""

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import bounded, get_db, get_read_timeout, require_admin
from app.api.responses import ok
from app.auth.verifier import AdminIdentity
from app.schemas.common import Envelope
from app.schemas.room import RoomResponse, RoomTypeCreate, RoomTypeResponse, RoomTypeUpdate
from app.services import booking_service

router = APIRouter(prefix="/api/v1/room-types", tags=["room-types"])


class RoomTypeDeleteResponse(BaseModel):
    message: str
    rooms_deleted: int
    reservations_cancelled: int


@router.get("", response_model=Envelope[list[RoomTypeResponse]], summary="List room types")
async def list_room_types(
    db: AsyncSession = Depends(get_db),
    timeout: float = Depends(get_read_timeout),
) -> dict:
    room_types = await bounded(booking_service.list_room_types(db), timeout)
    return ok(room_types)


@router.get("/{room_type_id}", response_model=Envelope[RoomTypeResponse], summary="Get a room type")
async def get_room_type(
    room_type_id: int,
    db: AsyncSession = Depends(get_db),
    timeout: float = Depends(get_read_timeout),
) -> dict:
    room_type = await bounded(booking_service.get_room_type(db, room_type_id), timeout)
    return ok(room_type)


@router.get(
    "/{room_type_id}/rooms",
    response_model=Envelope[list[RoomResponse]],
    summary="List the rooms of a room type",
)
async def list_rooms_by_type(
    room_type_id: int,
    db: AsyncSession = Depends(get_db),
    timeout: float = Depends(get_read_timeout),
) -> dict:
    rooms = await bounded(booking_service.list_rooms_by_type(db, room_type_id), timeout)
    return ok(rooms)


@router.post(
    "",
    response_model=Envelope[RoomTypeResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a room type",
)
async def create_room_type(
    body: RoomTypeCreate,
    db: AsyncSession = Depends(get_db),
    _admin: AdminIdentity = Depends(require_admin),
) -> dict:
    room_type = await booking_service.create_room_type(db, body.model_dump())
    return ok(room_type)


@router.put("/{room_type_id}", response_model=Envelope[RoomTypeResponse], summary="Update a room type")
async def update_room_type(
    room_type_id: int,
    body: RoomTypeUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: AdminIdentity = Depends(require_admin),
) -> dict:
    room_type = await booking_service.update_room_type(db, room_type_id, body.model_dump(exclude_unset=True))
    return ok(room_type)


@router.delete(
    "/{room_type_id}",
    response_model=Envelope[RoomTypeDeleteResponse],
    summary="Delete a room type",
)
async def delete_room_type(
    room_type_id: int,
    force: bool = Query(False, description="Also cancel reservations and delete rooms of this type"),
    db: AsyncSession = Depends(get_db),
    _admin: AdminIdentity = Depends(require_admin),
) -> dict:
    """Delete a room type.

    Refused with 409 while rooms use the type, unless ``force=true``.
    """
    summary = await booking_service.delete_room_type(db, room_type_id, force=force)
    return ok({"message": "Room type deleted", **summary})
