"""FastAPI dependencies forming the admin mutation gateway.

Request states, in order: no token (401) → token present → token verified by
the configured :class:`~app.auth.verifier.TokenVerifier` (401 on failure) →
role authorized (403 otherwise) → the route handler runs and touches a store.
"""

import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.verifier import AdminIdentity, TokenVerifier
from app.database import get_db
from app.errors import AuthenticationError, AuthorizationError

logger = logging.getLogger(__name__)

# auto_error=False: a missing token must surface as our 401, not FastAPI's 403
_bearer_scheme = HTTPBearer(auto_error=False)


def get_token_verifier(request: Request) -> TokenVerifier:
    return request.app.state.token_verifier


async def get_current_admin(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
    verifier: TokenVerifier = Depends(get_token_verifier),
    db: AsyncSession = Depends(get_db),
) -> AdminIdentity:
    """Authenticate the caller from the ``Authorization: Bearer`` header.

    Raises:
        AuthenticationError: No token, or the verifier rejected it.
    """
    if credentials is None or not credentials.credentials:
        logger.warning("Rejected %s %s: no bearer token", request.method, request.url.path)
        raise AuthenticationError("Access denied. No token provided.")

    try:
        return await verifier.verify(credentials.credentials, db)
    except AuthenticationError as exc:
        logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.message)
        raise


async def require_admin(
    request: Request,
    identity: AdminIdentity = Depends(get_current_admin),
) -> AdminIdentity:
    """Authorize an authenticated caller for mutating operations.

    Raises:
        AuthorizationError: The caller's role is not one of ``settings.admin_roles``.
    """
    allowed_roles = request.app.state.settings.admin_roles
    if identity.role not in allowed_roles:
        logger.warning(
            "Forbidden %s %s for admin %s (role=%s)",
            request.method,
            request.url.path,
            identity.id,
            identity.role,
        )
        raise AuthorizationError()
    return identity
