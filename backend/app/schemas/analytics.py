"""Pydantic v2 schemas for analytics endpoints."""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class PageViewCreate(BaseModel):
    """A page-view event reported by the storefront."""

    page_url: str = Field(..., min_length=1, max_length=2048)
    referrer: str | None = Field(None, max_length=2048)
    session_id: str | None = Field(None, max_length=255)


class DailyStatUpsert(BaseModel):
    visitors: int = Field(..., ge=0)
    page_views: int = Field(..., ge=0)
    unique_visitors: int = Field(..., ge=0)


class VisitorStatResponse(BaseModel):
    date: dt.date
    visitors: int
    page_views: int
    unique_visitors: int
    updated_at: dt.datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class OverviewResponse(BaseModel):
    total_products: int
    total_categories: int
    total_rooms: int
    reservations_by_status: dict[str, int]
    confirmed_revenue: Decimal
