"""Product API router."""

from decimal import Decimal

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import bounded, get_db, get_read_timeout, require_admin
from app.api.responses import ok
from app.auth.verifier import AdminIdentity
from app.schemas.common import Envelope, MessageResponse
from app.schemas.product import ProductCreate, ProductListResponse, ProductResponse, ProductUpdate
from app.services import catalog_service
from app.services.catalog_service import ProductFilters

router = APIRouter(prefix="/api/v1/products", tags=["products"])


def _required_keys(request: Request) -> list[str]:
    return request.app.state.settings.product_required_specification_keys


@router.get("", response_model=Envelope[ProductListResponse], summary="List products")
async def list_products(
    category: str | None = Query(None, description="Category id, slug or name"),
    search: str | None = Query(None, max_length=200, description="Search in name and description"),
    min_price: Decimal | None = Query(None, ge=0),
    max_price: Decimal | None = Query(None, ge=0),
    sort_by: str = Query("created_at", pattern="^(name|price|created_at)$"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    timeout: float = Depends(get_read_timeout),
) -> dict:
    filters = ProductFilters(
        category=category,
        search=search,
        min_price=min_price,
        max_price=max_price,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    items, total, total_pages = await bounded(
        catalog_service.list_products(db, filters).page(page, limit), timeout
    )
    return ok(
        {"items": items, "total": total, "page": page, "limit": limit, "total_pages": total_pages}
    )


@router.get("/{product_id}", response_model=Envelope[ProductResponse], summary="Get a product")
async def get_product(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    timeout: float = Depends(get_read_timeout),
) -> dict:
    product = await bounded(catalog_service.get_product(db, product_id), timeout)
    return ok(product)


@router.post(
    "",
    response_model=Envelope[ProductResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a product",
)
async def create_product(
    request: Request,
    body: ProductCreate,
    db: AsyncSession = Depends(get_db),
    _admin: AdminIdentity = Depends(require_admin),
) -> dict:
    product = await catalog_service.create_product(
        db, body.model_dump(), required_specification_keys=_required_keys(request)
    )
    return ok(product)


@router.put("/{product_id}", response_model=Envelope[ProductResponse], summary="Update a product")
async def update_product(
    request: Request,
    product_id: int,
    body: ProductUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: AdminIdentity = Depends(require_admin),
) -> dict:
    product = await catalog_service.update_product(
        db,
        product_id,
        body.model_dump(exclude_unset=True),
        required_specification_keys=_required_keys(request),
    )
    return ok(product)


@router.delete("/{product_id}", response_model=Envelope[MessageResponse], summary="Delete a product")
async def delete_product(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: AdminIdentity = Depends(require_admin),
) -> dict:
    await catalog_service.delete_product(db, product_id)
    return ok({"message": "Product deleted"})
