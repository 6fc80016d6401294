"""Idempotent schema bootstrap.

``ensure_schema`` brings an empty or partially migrated database to the
current shape in one transaction:

1. create every table that is missing,
2. apply pending versioned steps (see :mod:`app.schema.steps`) and record
   them in ``schema_migrations``,
3. create every declared index that is missing,
4. seed default categories and room types, skipping slugs that exist.

Any failure rolls the whole unit back and surfaces as
:class:`~app.errors.SchemaMigrationError`; callers treat that as fatal.
"""

import logging

import sqlalchemy as sa
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine

import app.models  # noqa: F401  (registers every table on Base.metadata)
from app.config import Settings
from app.database import Base, dialect_insert
from app.errors import SchemaMigrationError
from app.models.category import Category
from app.models.product import Product
from app.models.room import RoomType
from app.models.schema_migration import SchemaMigration
from app.schema.steps import STEPS, MigrationStep

logger = logging.getLogger(__name__)


class SchemaManager:
    """Owns table, index and constraint definitions for a single engine."""

    def __init__(self, engine: AsyncEngine, settings: Settings, steps: tuple[MigrationStep, ...] = STEPS) -> None:
        self.engine = engine
        self.settings = settings
        self.steps = steps

    async def ensure_schema(self) -> list[str]:
        """Create/migrate/seed idempotently. Returns the step versions applied by this call."""
        applied = await self._run("ensure schema", self._ensure_schema_sync)
        logger.info("Schema is current (%d migration step(s) applied)", len(applied))
        return applied

    async def recreate_catalog(self) -> None:
        """Drop and recreate the categories and products tables, then re-seed categories.

        Destroys every product and category row.
        """
        await self._run("recreate catalog", self._recreate_catalog_sync)
        logger.warning("Catalog tables recreated; all products were removed")

    # -----------------------------------------------------------------------
    # Internals (run on the sync side of the async connection)
    # -----------------------------------------------------------------------

    async def _run(self, label: str, fn):  # type: ignore[no-untyped-def]
        try:
            async with self.engine.begin() as conn:
                return await conn.run_sync(fn)
        except Exception as exc:
            logger.exception("Schema operation %r failed; transaction rolled back", label)
            raise SchemaMigrationError(f"{label} failed: {exc}") from exc

    def _ensure_schema_sync(self, conn: Connection) -> list[str]:
        for table in Base.metadata.sorted_tables:
            table.create(conn, checkfirst=True)

        applied = self._apply_steps(conn)

        for table in Base.metadata.sorted_tables:
            for index in table.indexes:
                index.create(conn, checkfirst=True)

        self._seed(conn)
        return applied

    def _apply_steps(self, conn: Connection) -> list[str]:
        ledger = SchemaMigration.__table__
        recorded = set(conn.execute(sa.select(ledger.c.version)).scalars())
        op = Operations(MigrationContext.configure(conn))

        applied: list[str] = []
        for step in self.steps:
            if step.version in recorded:
                continue
            # Fresh inspector per step: earlier steps may have changed the shape.
            if step.is_pending(sa.inspect(conn)):
                logger.info("Applying schema step %s: %s", step.version, step.description)
                step.apply(op, conn)
                applied.append(step.version)
            conn.execute(sa.insert(ledger).values(version=step.version, description=step.description))
        return applied

    def _seed(self, conn: Connection) -> None:
        dialect_name = conn.dialect.name

        categories = [seed.model_dump() for seed in self.settings.seed_categories]
        if categories:
            stmt = dialect_insert(dialect_name, Category.__table__).values(categories)
            conn.execute(stmt.on_conflict_do_nothing(index_elements=["slug"]))

        room_types = [seed.model_dump() for seed in self.settings.seed_room_types]
        if room_types:
            stmt = dialect_insert(dialect_name, RoomType.__table__).values(room_types)
            conn.execute(stmt.on_conflict_do_nothing(index_elements=["slug"]))

    def _recreate_catalog_sync(self, conn: Connection) -> None:
        Product.__table__.drop(conn, checkfirst=True)
        Category.__table__.drop(conn, checkfirst=True)
        Category.__table__.create(conn)
        Product.__table__.create(conn)
        categories = [seed.model_dump() for seed in self.settings.seed_categories]
        if categories:
            conn.execute(sa.insert(Category.__table__).values(categories))
