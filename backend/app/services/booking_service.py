"""Inventory/booking store — room types, rooms and reservations.

Booking rule: two *confirmed* reservations for the same room never overlap.
Ranges are half-open, so ``[s1, e1)`` and ``[s2, e2)`` conflict iff
``s1 < e2 and s2 < e1``; a stay may start on the day another one ends.

Every check-then-write on a room (creating a reservation, confirming one)
first takes a row lock on the room with ``SELECT ... FOR UPDATE`` and keeps it
until the caller's transaction ends, so two concurrent requests for the same
room are serialized. On SQLite the connection-level ``BEGIN IMMEDIATE`` gives
the same guarantee.

Functions flush but never commit; the caller owns the transaction.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from math import ceil
from typing import Any

from sqlalchemy import Select, delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import (
    BookingConflictError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from app.models.reservation import (
    RESERVATION_STATUSES,
    STATUS_CANCELLED,
    STATUS_CONFIRMED,
    STATUS_PENDING,
    TERMINAL_STATUSES,
    Reservation,
)
from app.models.room import Room, RoomType
from app.slugs import slugify

logger = logging.getLogger(__name__)

ROOM_TYPE_FIELDS = frozenset({"name", "slug", "description", "base_price", "max_adults", "max_children"})
ROOM_FIELDS = frozenset(
    {
        "name",
        "description",
        "price_per_night",
        "room_type_id",
        "main_image",
        "images",
        "max_adults",
        "max_children",
        "size_sqm",
        "amenities",
        "is_available",
        "display_order",
    }
)

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    STATUS_PENDING: frozenset({STATUS_CONFIRMED, STATUS_CANCELLED}),
    STATUS_CONFIRMED: frozenset({STATUS_CANCELLED}),
    STATUS_CANCELLED: frozenset(),
}

RESERVATION_SORT_FIELDS = {
    "created_at": Reservation.created_at,
    "check_in_date": Reservation.check_in_date,
    "check_out_date": Reservation.check_out_date,
    "total_amount": Reservation.total_amount,
}


@dataclass(frozen=True)
class StayRange:
    """Half-open date range ``[check_in, check_out)``."""

    check_in: date
    check_out: date

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    def overlaps(self, other: "StayRange") -> bool:
        return self.check_in < other.check_out and other.check_in < self.check_out


@dataclass(frozen=True)
class GuestContact:
    name: str
    email: str
    phone: str


def _positive_amount(value: Any, label: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{label} must be a number") from None
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"{label} must be greater than zero")
    return amount


def _check_range(stay: StayRange) -> None:
    if stay.check_in >= stay.check_out:
        raise ValidationError("Check-out date must be after check-in date")


# ---------------------------------------------------------------------------
# Room types
# ---------------------------------------------------------------------------


async def list_room_types(db: AsyncSession) -> list[RoomType]:
    result = await db.execute(select(RoomType).order_by(RoomType.name.asc()))
    return list(result.scalars().all())


async def get_room_type(db: AsyncSession, room_type_id: int) -> RoomType:
    room_type = await db.get(RoomType, room_type_id)
    if room_type is None:
        raise NotFoundError("Room type not found")
    return room_type


def _room_type_slug(slug: str | None) -> str:
    cleaned = slugify(slug or "")
    if not cleaned or cleaned != slug:
        raise ValidationError(f"Invalid slug {slug!r}: use lower-case letters, digits and single hyphens")
    return cleaned


def _room_type_values(fields: dict[str, Any]) -> dict[str, Any]:
    values = {key: value for key, value in fields.items() if key in ROOM_TYPE_FIELDS}
    if "name" in values:
        name = (values["name"] or "").strip()
        if not name:
            raise ValidationError("Name is required")
        values["name"] = name
    if "slug" in values:
        if values["slug"] is None:
            del values["slug"]
        else:
            values["slug"] = _room_type_slug(values["slug"])
    if values.get("base_price") is not None:
        values["base_price"] = _positive_amount(values["base_price"], "Base price")
    if "max_adults" in values and (values["max_adults"] is None or values["max_adults"] < 1):
        raise ValidationError("A room type must allow at least one adult")
    if "max_children" in values and (values["max_children"] is None or values["max_children"] < 0):
        raise ValidationError("max_children cannot be negative")
    return values


async def _slug_taken(db: AsyncSession, slug: str, exclude_id: int | None = None) -> bool:
    stmt = select(RoomType.id).where(RoomType.slug == slug)
    if exclude_id is not None:
        stmt = stmt.where(RoomType.id != exclude_id)
    result = await db.execute(stmt)
    return result.scalar_one_or_none() is not None


async def _flush_room_type(db: AsyncSession) -> None:
    try:
        async with db.begin_nested():
            await db.flush()
    except IntegrityError:
        raise ConflictError("A room type with this slug already exists") from None


async def create_room_type(db: AsyncSession, fields: dict[str, Any]) -> RoomType:
    """Insert a room type.

    Args:
        db: Async database session.
        fields: Room type attributes. ``slug`` is optional and defaults to
            the slugified name.

    Returns:
        The created room type.

    Raises:
        ValidationError: Missing name, a name without letters or digits, or
            a malformed slug.
        ConflictError: Another room type already uses the slug.
    """
    if not fields.get("name"):
        raise ValidationError("Name is required")
    values = _room_type_values(fields)
    if "slug" not in values:
        values["slug"] = slugify(values["name"])
        if not values["slug"]:
            raise ValidationError("Name must contain at least one letter or digit")

    if await _slug_taken(db, values["slug"]):
        raise ConflictError("A room type with this slug already exists")

    room_type = RoomType(**values)
    db.add(room_type)
    await _flush_room_type(db)
    await db.refresh(room_type)
    logger.info("Created room type %s (%s)", room_type.id, room_type.slug)
    return room_type


async def update_room_type(db: AsyncSession, room_type_id: int, fields: dict[str, Any]) -> RoomType:
    """Apply a partial update to a room type.

    Renaming keeps the slug, so room listings filtered by it keep working.
    The slug only changes when ``fields`` carries a new one, which is
    re-validated for shape and uniqueness.

    Raises:
        NotFoundError: Unknown room type.
        ValidationError: Invalid field values.
        ConflictError: The new slug belongs to another room type.
    """
    room_type = await get_room_type(db, room_type_id)
    values = _room_type_values(fields)

    if "slug" in values and values["slug"] != room_type.slug:
        if await _slug_taken(db, values["slug"], exclude_id=room_type.id):
            raise ConflictError("A room type with this slug already exists")

    for field, value in values.items():
        setattr(room_type, field, value)
    await _flush_room_type(db)
    await db.refresh(room_type)
    logger.info("Updated room type %s: %s", room_type.id, sorted(values))
    return room_type


async def delete_room_type(db: AsyncSession, room_type_id: int, *, force: bool = False) -> dict[str, int]:
    """Delete a room type.

    Without ``force`` the delete is refused while any room uses the type. With
    ``force`` the non-terminal reservations of those rooms are cancelled, the
    rooms are deleted (reservations keep their ``room_name`` snapshot) and
    then the type goes.

    Returns:
        Counts of ``rooms_deleted`` and ``reservations_cancelled``.

    Raises:
        NotFoundError: Unknown room type.
        ConflictError: Rooms reference the type and ``force`` is false.
    """
    room_type = await get_room_type(db, room_type_id)

    result = await db.execute(
        select(Room.id).where(Room.room_type_id == room_type.id).with_for_update()
    )
    room_ids = list(result.scalars().all())

    if room_ids and not force:
        raise ConflictError(
            f"Cannot delete room type because it is assigned to {len(room_ids)} room(s). "
            "Reassign or delete those rooms first, or delete with force."
        )

    cancelled: list[int] = []
    async with db.begin_nested():
        if room_ids:
            result = await db.execute(
                select(Reservation.id).where(
                    Reservation.room_id.in_(room_ids),
                    Reservation.status.not_in(sorted(TERMINAL_STATUSES)),
                )
            )
            cancelled = list(result.scalars().all())
            if cancelled:
                await db.execute(
                    update(Reservation)
                    .where(Reservation.id.in_(cancelled))
                    .values(status=STATUS_CANCELLED)
                    .execution_options(synchronize_session=False)
                )
            # Reservations keep their rows; the FK sets their room_id to NULL.
            await db.execute(
                delete(Room).where(Room.id.in_(room_ids)).execution_options(synchronize_session=False)
            )
        await db.delete(room_type)
        await db.flush()

    logger.info(
        "Deleted room type %s (force=%s): %d room(s) deleted, %d reservation(s) cancelled",
        room_type_id,
        force,
        len(room_ids),
        len(cancelled),
    )
    return {"rooms_deleted": len(room_ids), "reservations_cancelled": len(cancelled)}


# ---------------------------------------------------------------------------
# Rooms
# ---------------------------------------------------------------------------


async def get_room(db: AsyncSession, room_id: int) -> Room:
    """Fetch a room with its room type loaded."""
    result = await db.execute(
        select(Room).where(Room.id == room_id).execution_options(populate_existing=True)
    )
    room = result.scalar_one_or_none()
    if room is None:
        raise NotFoundError("Room not found")
    return room


async def _room_values(db: AsyncSession, fields: dict[str, Any]) -> dict[str, Any]:
    values = {key: value for key, value in fields.items() if key in ROOM_FIELDS}

    if "name" in values and (not values["name"] or not str(values["name"]).strip()):
        raise ValidationError("Name is required")
    if "price_per_night" in values:
        values["price_per_night"] = _positive_amount(values["price_per_night"], "Price per night")
    if "room_type_id" in values:
        if values["room_type_id"] is None:
            raise ValidationError("A room must have a room type")
        if await db.get(RoomType, values["room_type_id"]) is None:
            raise ValidationError(f"Room type {values['room_type_id']} does not exist")
    if "max_adults" in values and (values["max_adults"] is None or values["max_adults"] < 1):
        raise ValidationError("A room must allow at least one adult")
    if "max_children" in values and (values["max_children"] is None or values["max_children"] < 0):
        raise ValidationError("max_children cannot be negative")
    for key, empty in (("images", []), ("amenities", {})):
        if key in values and values[key] is None:
            values[key] = empty
    return values


async def create_room(db: AsyncSession, fields: dict[str, Any]) -> Room:
    for required in ("name", "price_per_night", "room_type_id"):
        if fields.get(required) is None:
            raise ValidationError(f"Missing required field: {required}")
    values = await _room_values(db, fields)

    room = Room(**values)
    db.add(room)
    await db.flush()
    logger.info("Created room %s (%s) of type %s", room.id, room.name, room.room_type_id)
    return await get_room(db, room.id)


async def update_room(db: AsyncSession, room_id: int, fields: dict[str, Any]) -> Room:
    room = await get_room(db, room_id)
    values = await _room_values(db, fields)
    for field, value in values.items():
        setattr(room, field, value)
    await db.flush()
    logger.info("Updated room %s: %s", room.id, sorted(values))
    return await get_room(db, room.id)


async def delete_room(db: AsyncSession, room_id: int) -> None:
    """Delete a room that has no pending or confirmed reservations.

    Cancelled reservations stay, detached from the room.
    """
    room = await _lock_room(db, room_id)
    if room is None:
        raise NotFoundError("Room not found")

    active = await db.execute(
        select(func.count())
        .select_from(Reservation)
        .where(Reservation.room_id == room_id, Reservation.status.not_in(sorted(TERMINAL_STATUSES)))
    )
    active_count = active.scalar_one()
    if active_count:
        raise ConflictError(f"Cannot delete room with {active_count} active reservation(s). Cancel them first.")

    await db.delete(room)
    await db.flush()
    logger.info("Deleted room %s", room_id)


@dataclass(frozen=True)
class RoomFilters:
    """Filters for :func:`list_rooms`. ``room_type`` is a room type slug."""

    room_type: str | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    adults: int | None = None
    children: int | None = None
    check_in: date | None = None
    check_out: date | None = None
    include_unavailable: bool = False


def _confirmed_overlap_clause(check_in: date, check_out: date) -> list:
    return [
        Reservation.status == STATUS_CONFIRMED,
        Reservation.check_in_date < check_out,
        Reservation.check_out_date > check_in,
    ]


def _rooms_statement(filters: RoomFilters) -> Select:
    stmt = select(Room)
    if not filters.include_unavailable:
        stmt = stmt.where(Room.is_available.is_(True))
    if filters.room_type:
        stmt = stmt.join(RoomType, Room.room_type_id == RoomType.id).where(RoomType.slug == filters.room_type)
    if filters.min_price is not None:
        stmt = stmt.where(Room.price_per_night >= filters.min_price)
    if filters.max_price is not None:
        stmt = stmt.where(Room.price_per_night <= filters.max_price)
    if filters.adults is not None:
        stmt = stmt.where(Room.max_adults >= filters.adults)
    if filters.children is not None:
        stmt = stmt.where(Room.max_children >= filters.children)
    if filters.check_in is not None and filters.check_out is not None:
        _check_range(StayRange(filters.check_in, filters.check_out))
        booked = select(Reservation.room_id).where(
            Reservation.room_id.is_not(None),
            *_confirmed_overlap_clause(filters.check_in, filters.check_out),
        )
        stmt = stmt.where(Room.id.not_in(booked))
    return stmt.order_by(Room.display_order.asc(), Room.created_at.desc(), Room.id.asc())


async def list_rooms(db: AsyncSession, filters: RoomFilters | None = None) -> list[Room]:
    """List bookable rooms matching ``filters``.

    Args:
        db: Async database session.
        filters: Room type slug, price bounds, guest counts and an optional
            stay. With both stay dates set, rooms holding an overlapping
            confirmed reservation are left out. Defaults to every
            available room.

    Returns:
        Matching rooms ordered by display order, newest first within it.

    Raises:
        ValidationError: The stay ends on or before its check-in.
    """
    result = await db.execute(_rooms_statement(filters or RoomFilters()))
    return list(result.scalars().all())


async def list_rooms_by_type(db: AsyncSession, room_type_id: int) -> list[Room]:
    """All rooms of one type, including unavailable ones."""
    room_type = await get_room_type(db, room_type_id)
    result = await db.execute(
        select(Room)
        .where(Room.room_type_id == room_type.id)
        .order_by(Room.display_order.asc(), Room.id.asc())
    )
    return list(result.scalars().all())


async def check_availability(db: AsyncSession, room_id: int, stay: StayRange) -> bool:
    """True when the room is bookable and no confirmed reservation overlaps ``stay``."""
    _check_range(stay)
    room = await get_room(db, room_id)
    if not room.is_available:
        return False
    return await _find_overlap(db, room_id, stay) is None


# ---------------------------------------------------------------------------
# Reservations
# ---------------------------------------------------------------------------


async def _lock_room(db: AsyncSession, room_id: int) -> Room | None:
    result = await db.execute(
        select(Room).where(Room.id == room_id).with_for_update().execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _find_overlap(
    db: AsyncSession,
    room_id: int,
    stay: StayRange,
    exclude_reservation_id: int | None = None,
) -> Reservation | None:
    stmt = select(Reservation).where(
        Reservation.room_id == room_id,
        *_confirmed_overlap_clause(stay.check_in, stay.check_out),
    )
    if exclude_reservation_id is not None:
        stmt = stmt.where(Reservation.id != exclude_reservation_id)
    result = await db.execute(stmt.limit(1))
    return result.scalar_one_or_none()


async def create_reservation(
    db: AsyncSession,
    room_id: int,
    stay: StayRange,
    contact: GuestContact,
    *,
    adults: int = 1,
    children: int = 0,
    special_requests: str | None = None,
) -> Reservation:
    """Create a pending reservation for ``room_id`` over ``stay``.

    The room row stays locked from the overlap check until the caller's
    transaction ends, so a concurrent booking for the same room waits and then
    sees this one.

    Args:
        db: Session owning the transaction. The room lock is held until it
            commits or rolls back.
        room_id: The room to book.
        stay: Check-in and check-out dates, check-out exclusive.
        contact: Guest name, email and phone. All are required.
        adults: Adult guests, at least one.
        children: Child guests.
        special_requests: Optional free text from the guest.

    Returns:
        The new reservation, status ``pending``, with ``nights`` and
        ``total_amount`` computed from the room's nightly price.

    Raises:
        ValidationError: Malformed range, missing contact details, unavailable
            room, or guest counts above the room's capacity.
        NotFoundError: Unknown room.
        BookingConflictError: A confirmed reservation overlaps ``stay``.
    """
    _check_range(stay)
    for label, value in (("Guest name", contact.name), ("Guest email", contact.email), ("Guest phone", contact.phone)):
        if not value or not value.strip():
            raise ValidationError(f"{label} is required")
    if adults < 1 or children < 0:
        raise ValidationError("A reservation needs at least one adult and a non-negative number of children")

    room = await _lock_room(db, room_id)
    if room is None:
        raise NotFoundError("Room not found")
    if not room.is_available:
        raise ValidationError(f"Room {room.name} is not available for booking")
    if adults > room.max_adults or children > room.max_children:
        raise ValidationError(
            f"Room {room.name} sleeps at most {room.max_adults} adult(s) and {room.max_children} child(ren)"
        )

    if await _find_overlap(db, room.id, stay) is not None:
        raise BookingConflictError(f"Room {room.name} is not available for the selected dates")

    reservation = Reservation(
        room_id=room.id,
        room_name=room.name,
        guest_name=contact.name.strip(),
        guest_email=contact.email.strip(),
        guest_phone=contact.phone.strip(),
        check_in_date=stay.check_in,
        check_out_date=stay.check_out,
        adults=adults,
        children=children,
        nights=stay.nights,
        total_amount=room.price_per_night * stay.nights,
        special_requests=special_requests,
        status=STATUS_PENDING,
    )
    db.add(reservation)
    await db.flush()
    await db.refresh(reservation)
    logger.info(
        "Created reservation %s for room %s (%s to %s)",
        reservation.id,
        room.id,
        stay.check_in,
        stay.check_out,
    )
    return reservation


async def get_reservation(db: AsyncSession, reservation_id: int) -> Reservation:
    reservation = await db.get(Reservation, reservation_id)
    if reservation is None:
        raise NotFoundError("Reservation not found")
    return reservation


async def get_reservation_for_guest(db: AsyncSession, reservation_id: int, email: str) -> Reservation:
    """Fetch a reservation on behalf of its guest.

    Args:
        db: Async database session.
        reservation_id: The reservation id.
        email: The guest email the reservation was made with, compared
            case-insensitively.

    Returns:
        The reservation.

    Raises:
        NotFoundError: Unknown id, or the email does not match. Both cases
            look the same to the caller.
    """
    reservation = await db.get(Reservation, reservation_id)
    if reservation is None or reservation.guest_email.strip().lower() != email.strip().lower():
        raise NotFoundError("Reservation not found")
    return reservation


async def update_reservation_status(db: AsyncSession, reservation_id: int, status: str) -> Reservation:
    """Move a reservation along pending → confirmed → cancelled.

    Allowed: pending→confirmed, pending→cancelled, confirmed→cancelled.
    Cancelled is terminal. Confirming re-checks overlap under the room lock.

    Args:
        db: Session owning the transaction.
        reservation_id: The reservation to move.
        status: Target status.

    Returns:
        The reservation with its new status.

    Raises:
        ValidationError: Unknown status value.
        NotFoundError: Unknown reservation.
        InvalidTransitionError: The transition is not allowed.
        BookingConflictError: Confirming would overlap another confirmed stay.
    """
    if status not in RESERVATION_STATUSES:
        raise ValidationError(f"Invalid status {status!r}")

    result = await db.execute(
        select(Reservation)
        .where(Reservation.id == reservation_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    reservation = result.scalar_one_or_none()
    if reservation is None:
        raise NotFoundError("Reservation not found")

    current = reservation.status
    if status not in ALLOWED_TRANSITIONS.get(current, frozenset()):
        raise InvalidTransitionError(f"Cannot change reservation status from {current} to {status}")

    if status == STATUS_CONFIRMED:
        room = await _lock_room(db, reservation.room_id) if reservation.room_id is not None else None
        if room is None:
            raise InvalidTransitionError("Cannot confirm a reservation whose room no longer exists")
        stay = StayRange(reservation.check_in_date, reservation.check_out_date)
        if await _find_overlap(db, room.id, stay, exclude_reservation_id=reservation.id) is not None:
            raise BookingConflictError(f"Room {room.name} is already booked for these dates")

    reservation.status = status
    await db.flush()
    await db.refresh(reservation)
    logger.info("Reservation %s: %s -> %s", reservation.id, current, status)
    return reservation


@dataclass(frozen=True)
class ReservationFilters:
    status: str | None = None
    email: str | None = None
    sort_by: str = "created_at"
    sort_order: str = "desc"


async def list_reservations(
    db: AsyncSession,
    filters: ReservationFilters | None = None,
    page: int = 1,
    limit: int = 20,
) -> tuple[list[Reservation], int, int]:
    """Return ``(items, total, total_pages)`` for a 1-based page."""
    filters = filters or ReservationFilters()
    conditions = []
    if filters.status:
        conditions.append(Reservation.status == filters.status)
    if filters.email:
        conditions.append(Reservation.guest_email.icontains(filters.email, autoescape=True))

    total_result = await db.execute(select(func.count()).select_from(Reservation).where(*conditions))
    total = total_result.scalar_one()

    sort_column = RESERVATION_SORT_FIELDS.get(filters.sort_by, Reservation.created_at)
    direction = sort_column.asc() if filters.sort_order.lower() == "asc" else sort_column.desc()
    result = await db.execute(
        select(Reservation)
        .where(*conditions)
        .order_by(direction, Reservation.id.desc())
        .offset((max(page, 1) - 1) * limit)
        .limit(limit)
    )
    return list(result.scalars().all()), total, ceil(total / limit) if limit else 0
