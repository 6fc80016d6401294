"""Bearer token verification for the admin mutation gateway.

The gateway only needs *something* that turns a token into an identity or
refuses it. :class:`TokenVerifier` is that seam; :class:`JWTTokenVerifier`
is the implementation wired into the application by default.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.jwt import decode_token
from app.config import Settings
from app.errors import AuthenticationError
from app.models.admin import Admin

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdminIdentity:
    """The caller behind a verified token."""

    id: int
    email: str
    name: str
    role: str


class TokenVerifier(Protocol):
    async def verify(self, token: str, db: AsyncSession) -> AdminIdentity:
        """Return the identity behind ``token`` or raise ``AuthenticationError``."""
        ...


class JWTTokenVerifier:
    """Verifies HS256 access tokens and confirms the admin still exists and is active."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    async def verify(self, token: str, db: AsyncSession) -> AdminIdentity:
        try:
            payload = decode_token(token, settings=self.settings)
        except JWTError:
            raise AuthenticationError("Access denied. Invalid token.") from None

        # Only accept access tokens
        if payload.get("type") != "access":
            raise AuthenticationError("Invalid token type")

        sub: str | None = payload.get("sub")
        try:
            admin_id = int(sub) if sub is not None else None
        except ValueError:
            admin_id = None
        if admin_id is None:
            raise AuthenticationError("Access denied. Invalid token.")

        result = await db.execute(select(Admin).where(Admin.id == admin_id))
        admin = result.scalar_one_or_none()
        if admin is None:
            raise AuthenticationError("Access denied. Admin not found.")
        if not admin.is_active:
            raise AuthenticationError("Admin account is inactive")

        return AdminIdentity(id=admin.id, email=admin.email, name=admin.name, role=admin.role)
