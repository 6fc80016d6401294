"""Create an admin account, or reset the password of an existing one.

Usage (from ``backend/``)::

    python -m scripts.create_admin admin@example.com --name "Site Admin"

The password is read from ``ADMIN_PASSWORD`` or prompted for.
"""

import argparse
import asyncio
import getpass
import os
import sys
from pathlib import Path

# Add backend to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.config import settings
from app.database import Database
from app.errors import ValidationError
from app.schema import SchemaManager
from app.services import admin_service


async def create_admin(email: str, password: str, name: str, role: str) -> int:
    database = Database.from_settings(settings)
    try:
        await SchemaManager(database.engine, settings).ensure_schema()
        async with database.session() as session:
            admin = await admin_service.upsert_admin(session, email, password, name, role)
            admin_id = admin.id
    except ValidationError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1
    finally:
        await database.dispose()

    print(f"Admin {email} ready (id={admin_id}, role={role}).")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Create or update an admin account.")
    parser.add_argument("email")
    parser.add_argument("--name", default="Administrator")
    parser.add_argument("--role", default="admin", choices=settings.admin_roles)
    args = parser.parse_args()

    password = os.environ.get("ADMIN_PASSWORD") or getpass.getpass("Password: ")
    sys.exit(asyncio.run(create_admin(args.email, password, args.name, args.role)))


if __name__ == "__main__":
    main()
