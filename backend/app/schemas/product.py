"""Pydantic v2 request/response schemas for product endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.specifications import check_specification_shape

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ProductCreate(BaseModel):
    """Schema for creating a product."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    category_id: int | None = None
    main_image: str | None = Field(None, max_length=500)
    images: list[str] = Field(default_factory=list)
    specifications: dict[str, Any] = Field(default_factory=dict)

    @field_validator("specifications")
    @classmethod
    def _specifications_shape(cls, value: dict[str, Any]) -> dict[str, Any]:
        check_specification_shape(value)
        return value


class ProductUpdate(BaseModel):
    """Schema for partially updating a product. All fields optional."""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    price: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)
    category_id: int | None = None
    main_image: str | None = Field(None, max_length=500)
    images: list[str] | None = None
    specifications: dict[str, Any] | None = None

    @field_validator("specifications")
    @classmethod
    def _specifications_shape(cls, value: dict[str, Any] | None) -> dict[str, Any] | None:
        if value is not None:
            check_specification_shape(value)
        return value


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ProductResponse(BaseModel):
    id: int
    name: str
    description: str | None = None
    price: Decimal
    category_id: int | None = None
    category_name: str | None = None
    main_image: str | None = None
    images: list[str] = []
    specifications: dict[str, Any] = {}
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductListResponse(BaseModel):
    """Paginated list of products."""

    items: list[ProductResponse]
    total: int
    page: int
    limit: int
    total_pages: int
