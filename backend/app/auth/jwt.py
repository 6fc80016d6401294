"""JWT access token creation and verification for admin accounts."""

from datetime import datetime, timedelta, timezone

from jose import jwt

from app.config import Settings, settings as default_settings


def create_access_token(
    data: dict,
    expires_delta: timedelta | None = None,
    settings: Settings = default_settings,
) -> str:
    """Create an access token.

    Args:
        data: Payload data. Must include ``sub`` (admin id as string).
        expires_delta: Custom expiration duration. Defaults to
            ``settings.jwt_access_token_expire_minutes`` minutes.
        settings: Settings supplying the signing key and algorithm.

    Returns:
        Encoded JWT string.
    """
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes))
    to_encode.update({"exp": expire, "iat": now, "type": "access"})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings = default_settings) -> dict:
    """Decode and verify a JWT token.

    Raises:
        jose.JWTError: If the token is invalid, expired, or malformed.
    """
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])


def create_admin_token(admin_id: int, role: str, settings: Settings = default_settings) -> dict[str, str]:
    """Create the token payload returned by the admin login endpoint."""
    return {
        "access_token": create_access_token({"sub": str(admin_id), "role": role}, settings=settings),
        "token_type": "bearer",
    }
