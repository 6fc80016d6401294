"""Pydantic v2 request/response schemas for reservation endpoints."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from app.models.reservation import RESERVATION_STATUSES

_STATUS_PATTERN = "^(" + "|".join(RESERVATION_STATUSES) + ")$"

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ReservationCreate(BaseModel):
    """Public booking request."""

    room_id: int
    guest_name: str = Field(..., min_length=1, max_length=255)
    guest_email: EmailStr
    guest_phone: str = Field(..., min_length=1, max_length=50)
    check_in_date: date
    check_out_date: date
    adults: int = Field(1, ge=1)
    children: int = Field(0, ge=0)
    special_requests: str | None = None

    @model_validator(mode="after")
    def check_dates(self) -> "ReservationCreate":
        """Validate that check-out is strictly after check-in."""
        if self.check_out_date <= self.check_in_date:
            raise ValueError("Check-out date must be after check-in date")
        return self


class ReservationStatusUpdate(BaseModel):
    status: str = Field(..., pattern=_STATUS_PATTERN)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ReservationResponse(BaseModel):
    id: int
    room_id: int | None = None
    room_name: str
    guest_name: str
    guest_email: str
    guest_phone: str
    check_in_date: date
    check_out_date: date
    adults: int
    children: int
    nights: int
    total_amount: Decimal
    special_requests: str | None = None
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReservationListResponse(BaseModel):
    """Paginated list of reservations."""

    items: list[ReservationResponse]
    total: int
    page: int
    limit: int
    total_pages: int
