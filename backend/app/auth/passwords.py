"""Password hashing for admin accounts, using bcrypt directly."""

import bcrypt

# bcrypt only looks at the first 72 bytes of a password.
MAX_PASSWORD_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:MAX_PASSWORD_BYTES]


def hash_password(password: str) -> str:
    """Hash a plain-text password using bcrypt with a fresh salt.

    Args:
        password: The plain-text password to hash. Bytes past the 72nd are
            ignored, as bcrypt itself would.

    Returns:
        The bcrypt hash string.
    """
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain-text password against a stored bcrypt hash.

    Args:
        plain_password: The plain-text password to check.
        hashed_password: The bcrypt hash to verify against.

    Returns:
        True if the password matches the hash. False otherwise, including
        when the stored hash is malformed.
    """
    try:
        return bcrypt.checkpw(_encode(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        return False


# Verified against when the email is unknown, so a failed login costs the
# same whether or not the account exists.
DUMMY_HASH = hash_password("stayshop-dummy-password")
