"""Pydantic v2 request/response schemas for room type and room endpoints."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.category import SLUG_PATTERN

# ---------------------------------------------------------------------------
# Room types
# ---------------------------------------------------------------------------


class RoomTypeCreate(BaseModel):
    """Schema for creating a room type. Without a slug, it is derived from the name."""

    name: str = Field(..., min_length=1, max_length=100)
    slug: str | None = Field(None, min_length=1, max_length=100, pattern=SLUG_PATTERN)
    description: str | None = None
    base_price: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)
    max_adults: int = Field(2, ge=1)
    max_children: int = Field(0, ge=0)


class RoomTypeUpdate(BaseModel):
    """Partial update. Renaming keeps the slug unless a new one is given."""

    name: str | None = Field(None, min_length=1, max_length=100)
    slug: str | None = Field(None, min_length=1, max_length=100, pattern=SLUG_PATTERN)
    description: str | None = None
    base_price: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)
    max_adults: int | None = Field(None, ge=1)
    max_children: int | None = Field(None, ge=0)


class RoomTypeResponse(BaseModel):
    id: int
    name: str
    slug: str
    description: str | None = None
    base_price: Decimal | None = None
    max_adults: int
    max_children: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Rooms
# ---------------------------------------------------------------------------


class RoomCreate(BaseModel):
    """Schema for creating a room."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    price_per_night: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    room_type_id: int
    main_image: str | None = Field(None, max_length=500)
    images: list[str] = Field(default_factory=list)
    max_adults: int = Field(2, ge=1)
    max_children: int = Field(0, ge=0)
    size_sqm: int | None = Field(None, gt=0)
    amenities: dict[str, Any] = Field(default_factory=dict)
    is_available: bool = True
    display_order: int = 0


class RoomUpdate(BaseModel):
    """Schema for partially updating a room. All fields optional."""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    price_per_night: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)
    room_type_id: int | None = None
    main_image: str | None = Field(None, max_length=500)
    images: list[str] | None = None
    max_adults: int | None = Field(None, ge=1)
    max_children: int | None = Field(None, ge=0)
    size_sqm: int | None = Field(None, gt=0)
    amenities: dict[str, Any] | None = None
    is_available: bool | None = None
    display_order: int | None = None


class RoomResponse(BaseModel):
    id: int
    name: str
    description: str | None = None
    price_per_night: Decimal
    room_type_id: int
    room_type_name: str | None = None
    room_type_slug: str | None = None
    main_image: str | None = None
    images: list[str] = []
    max_adults: int
    max_children: int
    size_sqm: int | None = None
    amenities: dict[str, Any] = {}
    is_available: bool
    display_order: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AvailabilityResponse(BaseModel):
    room_id: int
    check_in: date
    check_out: date
    available: bool
