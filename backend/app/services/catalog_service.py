"""Catalog store — categories and products.

Invariants kept here:

* category slugs are unique (checked up front, and the unique index is the
  backstop for concurrent writers);
* deleting a category detaches its products (``category_id`` → NULL) and
  never deletes them;
* a product's category exists (or is NULL) and its price is positive.

Functions flush but never commit; the caller owns the transaction.
"""

import logging
from collections.abc import AsyncIterator, Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from math import ceil
from typing import Any

from sqlalchemy import Select, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.errors import ConflictError, NotFoundError, ValidationError
from app.models.category import Category
from app.models.product import Product
from app.slugs import slugify
from app.specifications import check_specification_shape, missing_required_keys

logger = logging.getLogger(__name__)

CATEGORY_FIELDS = frozenset({"name", "slug", "description"})
PRODUCT_FIELDS = frozenset(
    {"name", "description", "price", "category_id", "main_image", "images", "specifications"}
)
PRODUCT_SORT_FIELDS = {
    "name": Product.name,
    "price": Product.price,
    "created_at": Product.created_at,
}


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


def _clean_slug(slug: str) -> str:
    cleaned = slugify(slug or "")
    if not cleaned or cleaned != slug:
        raise ValidationError(f"Invalid slug {slug!r}: use lower-case letters, digits and single hyphens")
    return cleaned


async def _slug_owner(db: AsyncSession, slug: str) -> int | None:
    result = await db.execute(select(Category.id).where(Category.slug == slug))
    return result.scalar_one_or_none()


async def get_category(db: AsyncSession, category_id: int) -> Category:
    category = await db.get(Category, category_id)
    if category is None:
        raise NotFoundError("Category not found")
    return category


async def get_category_by_slug(db: AsyncSession, slug: str) -> Category:
    result = await db.execute(select(Category).where(Category.slug == slug))
    category = result.scalar_one_or_none()
    if category is None:
        raise NotFoundError("Category not found")
    return category


async def list_categories(db: AsyncSession) -> list[Category]:
    result = await db.execute(select(Category).order_by(Category.name.asc()))
    return list(result.scalars().all())


async def create_category(
    db: AsyncSession,
    name: str,
    slug: str,
    description: str | None = None,
) -> Category:
    """Insert a category.

    Args:
        db: Session owning the transaction.
        name: Display name. Surrounding whitespace is stripped.
        slug: URL key. Must already be in slug form.
        description: Optional free text.

    Returns:
        The stored category, refreshed from the database.

    Raises:
        ValidationError: Empty name or malformed slug.
        ConflictError: The slug is already used. Nothing is written; callers
            decide whether to reuse the existing category or pick another slug.
    """
    if not name or not name.strip():
        raise ValidationError("Name is required")
    slug = _clean_slug(slug)

    if await _slug_owner(db, slug) is not None:
        raise ConflictError(f"A category with slug {slug!r} already exists")

    category = Category(name=name.strip(), slug=slug, description=description)
    try:
        async with db.begin_nested():
            db.add(category)
            await db.flush()
    except IntegrityError:
        # Lost a race with a concurrent insert of the same slug.
        raise ConflictError(f"A category with slug {slug!r} already exists") from None

    await db.refresh(category)
    logger.info("Created category %s (%s)", category.id, category.slug)
    return category


async def update_category(db: AsyncSession, category_id: int, fields: dict[str, Any]) -> Category:
    """Apply a partial update, re-validating slug uniqueness when the slug changes.

    Args:
        db: Session owning the transaction.
        category_id: The category to change.
        fields: Columns to set. Keys outside name, slug and description are ignored.

    Returns:
        The updated category.

    Raises:
        NotFoundError: No category with that id.
        ValidationError: Empty name or malformed slug.
        ConflictError: Another category already uses the new slug.
    """
    category = await get_category(db, category_id)
    changes = {key: value for key, value in fields.items() if key in CATEGORY_FIELDS}

    if "name" in changes and (not changes["name"] or not changes["name"].strip()):
        raise ValidationError("Name is required")

    if "slug" in changes and changes["slug"] != category.slug:
        changes["slug"] = _clean_slug(changes["slug"])
        owner = await _slug_owner(db, changes["slug"])
        if owner is not None and owner != category.id:
            raise ConflictError(f"A category with slug {changes['slug']!r} already exists")

    for field, value in changes.items():
        setattr(category, field, value)

    try:
        async with db.begin_nested():
            await db.flush()
    except IntegrityError:
        raise ConflictError("A category with this slug already exists") from None

    await db.refresh(category)
    logger.info("Updated category %s: %s", category.id, sorted(changes))
    return category


async def delete_category(db: AsyncSession, category_id: int) -> int:
    """Detach every product from the category, then delete it.

    Products are kept with ``category_id`` set to NULL.

    Returns:
        The number of products that were detached.

    Raises:
        NotFoundError: No category with that id.
    """
    category = await get_category(db, category_id)

    async with db.begin_nested():
        counted = await db.execute(
            select(func.count()).select_from(Product).where(Product.category_id == category.id)
        )
        detached = counted.scalar_one()
        await db.execute(
            update(Product)
            .where(Product.category_id == category.id)
            .values(category_id=None)
            .execution_options(synchronize_session=False)
        )
        await db.delete(category)
        await db.flush()

    logger.info("Deleted category %s, detached %d product(s)", category_id, detached)
    return detached


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


def _check_price(value: Any) -> Decimal:
    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError("Price must be a number") from None
    if not price.is_finite() or price <= 0:
        raise ValidationError("Price must be greater than zero")
    return price


async def _check_product_fields(
    db: AsyncSession,
    fields: dict[str, Any],
    required_specification_keys: Iterable[str],
) -> dict[str, Any]:
    values = {key: value for key, value in fields.items() if key in PRODUCT_FIELDS}

    if "name" in values and (not values["name"] or not str(values["name"]).strip()):
        raise ValidationError("Name is required")
    if "price" in values:
        values["price"] = _check_price(values["price"])

    category_id = values.get("category_id")
    if category_id is not None and await db.get(Category, category_id) is None:
        raise ValidationError(f"Category {category_id} does not exist")

    if "specifications" in values:
        specifications = values["specifications"] or {}
        try:
            check_specification_shape(specifications)
        except ValueError as exc:
            raise ValidationError(str(exc)) from None
        missing = missing_required_keys(specifications, required_specification_keys)
        if missing:
            raise ValidationError(f"Missing specification keys: {', '.join(missing)}")
        values["specifications"] = specifications

    if "images" in values and values["images"] is None:
        values["images"] = []
    return values


async def get_product(db: AsyncSession, product_id: int) -> Product:
    """Fetch a product with its category loaded."""
    result = await db.execute(
        select(Product)
        .options(selectinload(Product.category))
        .where(Product.id == product_id)
        .execution_options(populate_existing=True)
    )
    product = result.scalar_one_or_none()
    if product is None:
        raise NotFoundError("Product not found")
    return product


async def create_product(
    db: AsyncSession,
    fields: dict[str, Any],
    *,
    required_specification_keys: Sequence[str] = (),
) -> Product:
    """Validate and insert a product.

    Args:
        db: Session owning the transaction.
        fields: Column values. ``name`` and ``price`` are required; the rest
            default to empty.
        required_specification_keys: Keys the ``specifications`` map must
            carry, for deployments that configure them.

    Returns:
        The stored product with its category loaded.

    Raises:
        ValidationError: Missing name/price, non-positive price, unknown
            category, or a malformed specification map.
    """
    for required in ("name", "price"):
        if fields.get(required) is None:
            raise ValidationError(f"{required.capitalize()} is required")
    fields = {"specifications": {}, **fields}

    values = await _check_product_fields(db, fields, required_specification_keys)
    product = Product(**values)
    db.add(product)
    await db.flush()

    logger.info("Created product %s (%s)", product.id, product.name)
    return await get_product(db, product.id)


async def update_product(
    db: AsyncSession,
    product_id: int,
    fields: dict[str, Any],
    *,
    required_specification_keys: Sequence[str] = (),
) -> Product:
    """Apply a partial update with the same validation as :func:`create_product`."""
    product = await get_product(db, product_id)
    values = await _check_product_fields(db, fields, required_specification_keys)

    for field, value in values.items():
        setattr(product, field, value)
    await db.flush()

    logger.info("Updated product %s: %s", product.id, sorted(values))
    return await get_product(db, product.id)


async def delete_product(db: AsyncSession, product_id: int) -> None:
    product = await get_product(db, product_id)
    await db.delete(product)
    await db.flush()
    logger.info("Deleted product %s", product_id)


@dataclass(frozen=True)
class ProductFilters:
    """Filters for :func:`list_products`.

    ``category`` matches a category id (digits), slug, or display name.
    ``search`` is a case-insensitive substring match on name and description.
    """

    category: str | None = None
    search: str | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    sort_by: str = "created_at"
    sort_order: str = "desc"


class ProductListing:
    """A lazy, finite, restartable sequence of products matching some filters.

    Iterating issues one bounded query per ``batch_size`` rows; iterating again
    starts over with fresh queries. Each product has its category loaded, so
    ``product.category_name`` is available without further I/O.
    """

    def __init__(self, db: AsyncSession, filters: ProductFilters, batch_size: int = 100) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        self.db = db
        self.filters = filters
        self.batch_size = batch_size

    def _filtered(self, stmt: Select) -> Select:
        filters = self.filters
        if filters.category:
            stmt = stmt.join(Category, Product.category_id == Category.id)
            if filters.category.isdigit():
                stmt = stmt.where(Category.id == int(filters.category))
            else:
                stmt = stmt.where(or_(Category.slug == filters.category, Category.name == filters.category))
        if filters.search:
            stmt = stmt.where(
                or_(
                    Product.name.icontains(filters.search, autoescape=True),
                    Product.description.icontains(filters.search, autoescape=True),
                )
            )
        if filters.min_price is not None:
            stmt = stmt.where(Product.price >= filters.min_price)
        if filters.max_price is not None:
            stmt = stmt.where(Product.price <= filters.max_price)
        return stmt

    def _statement(self) -> Select:
        sort_column = PRODUCT_SORT_FIELDS.get(self.filters.sort_by, Product.created_at)
        direction = sort_column.asc() if self.filters.sort_order.lower() == "asc" else sort_column.desc()
        return (
            self._filtered(select(Product))
            .options(selectinload(Product.category))
            .order_by(direction, Product.id.asc())
        )

    async def _fetch(self, offset: int, limit: int) -> list[Product]:
        result = await self.db.execute(self._statement().offset(offset).limit(limit))
        return list(result.scalars().all())

    async def __aiter__(self) -> AsyncIterator[Product]:
        offset = 0
        while True:
            batch = await self._fetch(offset, self.batch_size)
            for product in batch:
                yield product
            if len(batch) < self.batch_size:
                return
            offset += len(batch)

    async def count(self) -> int:
        result = await self.db.execute(self._filtered(select(func.count()).select_from(Product)))
        return result.scalar_one()

    async def page(self, page: int = 1, limit: int = 12) -> tuple[list[Product], int, int]:
        """Return ``(items, total, total_pages)`` for a 1-based page."""
        total = await self.count()
        items = await self._fetch((max(page, 1) - 1) * limit, limit)
        return items, total, ceil(total / limit) if limit else 0


def list_products(db: AsyncSession, filters: ProductFilters | None = None, batch_size: int = 100) -> ProductListing:
    """Return a lazy listing of products joined with their category."""
    return ProductListing(db, filters or ProductFilters(), batch_size=batch_size)
