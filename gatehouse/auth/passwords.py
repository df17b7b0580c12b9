"""Password hashing and verification.

Uses bcrypt directly with a per-hash salt. The work factor
comes from settings.bcrypt_work_factor (tests lower it to keep runs fast).
Plaintext passwords are never compared directly or stored.

Bcrypt rejects passwords longer than 72 bytes; PrincipalCreate checks the
UTF-8 encoded length before anything is hashed.
"""

import bcrypt

from ..config import settings


def hash_password(password: str) -> str:
    """Return a bcrypt hash of the given plaintext password (60 characters)."""
    salt = bcrypt.gensalt(rounds=settings.bcrypt_work_factor)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A malformed stored hash counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False
