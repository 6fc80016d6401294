"""Admin accounts — password login and account provisioning."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.passwords import DUMMY_HASH, hash_password, verify_password
from app.errors import AuthenticationError, ValidationError
from app.models.admin import Admin

logger = logging.getLogger(__name__)


async def get_admin_by_email(db: AsyncSession, email: str) -> Admin | None:
    result = await db.execute(select(Admin).where(Admin.email == email.lower()))
    return result.scalar_one_or_none()


async def authenticate(db: AsyncSession, email: str, password: str) -> Admin:
    """Return the active admin matching ``email`` and ``password``.

    Args:
        db: Database session.
        email: Login email, matched case-insensitively.
        password: The plain-text password to check.

    Returns:
        The authenticated admin.

    Raises:
        AuthenticationError: The login failed. An unknown email costs one
            bcrypt check like a known one, and every failure carries the
            same message.
    """
    admin = await get_admin_by_email(db, email)
    password_ok = verify_password(password, admin.hashed_password if admin else DUMMY_HASH)
    if admin is None or not password_ok or not admin.is_active:
        logger.warning("Failed admin login for %s", email)
        raise AuthenticationError("Invalid email or password")
    return admin


async def upsert_admin(
    db: AsyncSession,
    email: str,
    password: str,
    name: str,
    role: str = "admin",
) -> Admin:
    """Create the admin, or reset the password, name and role of an existing one.

    The account is (re)activated either way.

    Raises:
        ValidationError: The password is shorter than 8 characters.
    """
    if len(password) < 8:
        raise ValidationError("Password must be at least 8 characters")

    admin = await get_admin_by_email(db, email)
    if admin is None:
        admin = Admin(email=email.lower(), name=name, role=role, is_active=True, hashed_password="")
        db.add(admin)
        action = "Created"
    else:
        action = "Updated"
    admin.hashed_password = hash_password(password)
    admin.name = name
    admin.role = role
    admin.is_active = True
    await db.flush()
    logger.info("%s admin %s (%s, role=%s)", action, admin.id, admin.email, role)
    return admin
