"""Category API router.

Reads are public; create, update and delete go through the admin gateway.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import bounded, get_db, get_read_timeout, require_admin
from app.api.responses import ok
from app.auth.verifier import AdminIdentity
from app.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from app.schemas.common import Envelope, MessageResponse
from app.services import catalog_service

router = APIRouter(prefix="/api/v1/categories", tags=["categories"])


@router.get("", response_model=Envelope[list[CategoryResponse]], summary="List categories")
async def list_categories(
    db: AsyncSession = Depends(get_db),
    timeout: float = Depends(get_read_timeout),
) -> dict:
    categories = await bounded(catalog_service.list_categories(db), timeout)
    return ok(categories)


@router.get("/{category_id}", response_model=Envelope[CategoryResponse], summary="Get a category")
async def get_category(
    category_id: int,
    db: AsyncSession = Depends(get_db),
    timeout: float = Depends(get_read_timeout),
) -> dict:
    category = await bounded(catalog_service.get_category(db, category_id), timeout)
    return ok(category)


@router.post(
    "",
    response_model=Envelope[CategoryResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a category",
)
async def create_category(
    body: CategoryCreate,
    db: AsyncSession = Depends(get_db),
    _admin: AdminIdentity = Depends(require_admin),
) -> dict:
    category = await catalog_service.create_category(db, body.name, body.slug, body.description)
    return ok(category)


@router.put("/{category_id}", response_model=Envelope[CategoryResponse], summary="Update a category")
async def update_category(
    category_id: int,
    body: CategoryUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: AdminIdentity = Depends(require_admin),
) -> dict:
    category = await catalog_service.update_category(db, category_id, body.model_dump(exclude_unset=True))
    return ok(category)


@router.delete("/{category_id}", response_model=Envelope[MessageResponse], summary="Delete a category")
async def delete_category(
    category_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: AdminIdentity = Depends(require_admin),
) -> dict:
    """Delete a category. Its products stay, with no category."""
    detached = await catalog_service.delete_category(db, category_id)
    return ok({"message": f"Category deleted; {detached} product(s) now have no category"})
