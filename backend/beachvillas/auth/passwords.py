"""Password hashing and verification using bcrypt directly."""

import bcrypt

# bcrypt only looks at the first 72 bytes; bcrypt>=5 raises instead of truncating.
_BCRYPT_MAX_BYTES = 72
_BCRYPT_ROUNDS = 10


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Hash a plain-text password using bcrypt.

    Args:
        password: The plain-text password to hash.

    Returns:
        The bcrypt hash string.
    """
    hashed = bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=_BCRYPT_ROUNDS))
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain-text password against a bcrypt hash.

    Malformed hashes (e.g. placeholder values in seed data) never verify.
    """
    try:
        return bcrypt.checkpw(_encode(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        return False
