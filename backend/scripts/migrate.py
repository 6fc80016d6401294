"""Bring the database schema up to date, independently of the API service.

Usage (from ``backend/``)::

    python -m scripts.migrate                      # idempotent create/migrate/seed
    python -m scripts.migrate --recreate-catalog   # DESTRUCTIVE: drop and rebuild categories/products
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add backend to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.config import settings
from app.database import Database
from app.errors import SchemaMigrationError
from app.schema import SchemaManager


async def migrate(recreate_catalog: bool = False) -> int:
    database = Database.from_settings(settings)
    manager = SchemaManager(database.engine, settings)
    try:
        if recreate_catalog:
            await manager.recreate_catalog()
            print("Catalog tables recreated and default categories seeded.")
        applied = await manager.ensure_schema()
    except SchemaMigrationError as exc:
        print(f"Migration failed, nothing was changed: {exc}", file=sys.stderr)
        return 1
    finally:
        await database.dispose()

    if applied:
        print(f"Applied migration steps: {', '.join(applied)}")
    else:
        print("Schema already up to date.")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--recreate-catalog",
        action="store_true",
        help="drop and recreate the categories and products tables (deletes every product)",
    )
    args = parser.parse_args()
    sys.exit(asyncio.run(migrate(recreate_catalog=args.recreate_catalog)))


if __name__ == "__main__":
    main()
