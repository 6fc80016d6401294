"""Reservation API router.

Guests create and look up reservations without a token; listing and status
changes are admin operations.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import bounded, get_db, get_read_timeout, require_admin
from app.api.responses import ok
from app.auth.verifier import AdminIdentity
from app.errors import ValidationError
from app.models.reservation import RESERVATION_STATUSES
from app.schemas.common import Envelope
from app.schemas.reservation import (
    ReservationCreate,
    ReservationListResponse,
    ReservationResponse,
    ReservationStatusUpdate,
)
from app.services import booking_service
from app.services.booking_service import GuestContact, ReservationFilters, StayRange

router = APIRouter(prefix="/api/v1/reservations", tags=["reservations"])


@router.post(
    "",
    response_model=Envelope[ReservationResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Request a reservation",
)
async def create_reservation(
    body: ReservationCreate,
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Create a pending reservation.

    Rejected with 409 when a confirmed reservation for the room overlaps the
    requested stay.
    """
    if body.check_in_date < date.today():
        raise ValidationError("Check-in date cannot be in the past")

    reservation = await booking_service.create_reservation(
        db,
        body.room_id,
        StayRange(body.check_in_date, body.check_out_date),
        GuestContact(name=body.guest_name, email=body.guest_email, phone=body.guest_phone),
        adults=body.adults,
        children=body.children,
        special_requests=body.special_requests,
    )
    return ok(reservation)


@router.get("", response_model=Envelope[ReservationListResponse], summary="List reservations")
async def list_reservations(
    status_filter: str | None = Query(None, alias="status", pattern="^(" + "|".join(RESERVATION_STATUSES) + ")$"),
    email: str | None = Query(None, max_length=255),
    sort_by: str = Query("created_at", pattern="^(created_at|check_in_date|check_out_date|total_amount)$"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    _admin: AdminIdentity = Depends(require_admin),
) -> dict:
    filters = ReservationFilters(status=status_filter, email=email, sort_by=sort_by, sort_order=sort_order)
    items, total, total_pages = await booking_service.list_reservations(db, filters, page=page, limit=limit)
    return ok({"items": items, "total": total, "page": page, "limit": limit, "total_pages": total_pages})


@router.get("/{reservation_id}", response_model=Envelope[ReservationResponse], summary="Get a reservation")
async def get_reservation(
    reservation_id: int,
    email: str = Query(..., min_length=3, max_length=255, description="Guest email used when booking"),
    db: AsyncSession = Depends(get_db),
    timeout: float = Depends(get_read_timeout),
) -> dict:
    """Look up a reservation as its guest. Answers 404 unless ``email`` matches the booking."""
    reservation = await bounded(booking_service.get_reservation_for_guest(db, reservation_id, email), timeout)
    return ok(reservation)


@router.put(
    "/{reservation_id}/status",
    response_model=Envelope[ReservationResponse],
    summary="Change a reservation's status",
)
async def update_reservation_status(
    reservation_id: int,
    body: ReservationStatusUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: AdminIdentity = Depends(require_admin),
) -> dict:
    reservation = await booking_service.update_reservation_status(db, reservation_id, body.status)
    return ok(reservation)
