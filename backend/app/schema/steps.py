"""Versioned, additive migration steps applied by :class:`~app.schema.manager.SchemaManager`.

Each step has an existence guard. A step whose guard says the change is already
present is recorded as applied without touching the schema, so a database that
was created from the current models and one evolved from an older shape end up
with the same ledger.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

import sqlalchemy as sa
from alembic.operations import Operations
from sqlalchemy.engine import Connection, Inspector

from app.slugs import slugify

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MigrationStep:
    version: str
    description: str
    is_pending: Callable[[Inspector], bool]
    apply: Callable[[Operations, Connection], None]


def _columns(inspector: Inspector, table: str) -> set[str]:
    if not inspector.has_table(table):
        return set()
    return {column["name"] for column in inspector.get_columns(table)}


# ---------------------------------------------------------------------------
# 0001: categories.slug
# ---------------------------------------------------------------------------


def _categories_slug_pending(inspector: Inspector) -> bool:
    return inspector.has_table("categories") and "slug" not in _columns(inspector, "categories")


def _add_categories_slug(op: Operations, conn: Connection) -> None:
    # The categories table is a foreign-key parent, so it is altered in place rather
    # than rebuilt: rebuilding it on SQLite would fire ON DELETE SET NULL on products.
    op.add_column(
        "categories",
        sa.Column("slug", sa.String(255), nullable=False, server_default=""),
    )

    rows = conn.execute(sa.text("SELECT id, name FROM categories ORDER BY id")).all()
    taken: set[str] = set()
    for category_id, name in rows:
        slug = slugify(name or "") or f"category-{category_id}"
        if slug in taken:
            slug = f"{slug}-{category_id}"
        taken.add(slug)
        conn.execute(
            sa.text("UPDATE categories SET slug = :slug WHERE id = :id"),
            {"slug": slug, "id": category_id},
        )

    if conn.dialect.name != "sqlite":
        op.alter_column("categories", "slug", server_default=None)
    logger.info("Backfilled slugs for %d categories", len(rows))


# ---------------------------------------------------------------------------
# 0002: products.category_id (nullable FK, detach on category delete)
# ---------------------------------------------------------------------------


def _products_category_id_pending(inspector: Inspector) -> bool:
    return inspector.has_table("products") and "category_id" not in _columns(inspector, "products")


def _add_products_category_id(op: Operations, conn: Connection) -> None:
    with op.batch_alter_table("products") as batch:
        batch.add_column(sa.Column("category_id", sa.Integer(), nullable=True))
        batch.create_foreign_key(
            "fk_products_category_id",
            "categories",
            ["category_id"],
            ["id"],
            ondelete="SET NULL",
        )


# ---------------------------------------------------------------------------
# 0003: retire the free-text products.category column
# ---------------------------------------------------------------------------


def _products_text_category_pending(inspector: Inspector) -> bool:
    return "category" in _columns(inspector, "products")


def _drop_products_text_category(op: Operations, conn: Connection) -> None:
    result = conn.execute(
        sa.text(
            "UPDATE products SET category_id = ("
            "  SELECT MIN(c.id) FROM categories c"
            "  WHERE c.name = products.category OR c.slug = products.category"
            ") WHERE category_id IS NULL AND category IS NOT NULL"
        )
    )
    logger.info("Linked %d products from text category to category_id", result.rowcount)
    with op.batch_alter_table("products") as batch:
        batch.drop_column("category")


# ---------------------------------------------------------------------------
# 0004: products.stock removed from the model
# ---------------------------------------------------------------------------


def _products_stock_pending(inspector: Inspector) -> bool:
    return "stock" in _columns(inspector, "products")


def _drop_products_stock(op: Operations, conn: Connection) -> None:
    with op.batch_alter_table("products") as batch:
        batch.drop_column("stock")


# ---------------------------------------------------------------------------
# 0005: products.images and products.specifications
# ---------------------------------------------------------------------------

_PRODUCT_JSON_COLUMNS = {"images": "[]", "specifications": "{}"}


def _products_json_columns_pending(inspector: Inspector) -> bool:
    if not inspector.has_table("products"):
        return False
    return not _PRODUCT_JSON_COLUMNS.keys() <= _columns(inspector, "products")


def _add_products_json_columns(op: Operations, conn: Connection) -> None:
    existing = _columns(sa.inspect(conn), "products")
    for name, empty in _PRODUCT_JSON_COLUMNS.items():
        if name in existing:
            continue
        op.add_column("products", sa.Column(name, sa.JSON(), nullable=True))
        # Names and literals come from the fixed mapping above.
        result = conn.execute(sa.text(f"UPDATE products SET {name} = '{empty}' WHERE {name} IS NULL"))
        logger.info("Added products.%s, backfilled %d row(s)", name, result.rowcount)


# ---------------------------------------------------------------------------
# 0006: products.description becomes optional
# ---------------------------------------------------------------------------


def _products_description_required(inspector: Inspector) -> bool:
    if not inspector.has_table("products"):
        return False
    for column in inspector.get_columns("products"):
        if column["name"] == "description":
            return not column["nullable"]
    return False


def _relax_products_description(op: Operations, conn: Connection) -> None:
    with op.batch_alter_table("products") as batch:
        batch.alter_column("description", existing_type=sa.Text(), nullable=True)


STEPS: tuple[MigrationStep, ...] = (
    MigrationStep("0001", "add unique slug to categories", _categories_slug_pending, _add_categories_slug),
    MigrationStep(
        "0002", "add products.category_id foreign key", _products_category_id_pending, _add_products_category_id
    ),
    MigrationStep(
        "0003", "migrate products.category text to category_id", _products_text_category_pending,
        _drop_products_text_category,
    ),
    MigrationStep("0004", "drop products.stock", _products_stock_pending, _drop_products_stock),
    MigrationStep(
        "0005", "add products.images and products.specifications", _products_json_columns_pending,
        _add_products_json_columns,
    ),
    MigrationStep(
        "0006", "allow NULL products.description", _products_description_required, _relax_products_description
    ),
)
