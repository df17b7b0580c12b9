"""Random secret generation.

Challenge codes come from the ``secrets`` module, never from ``random``.
"""

import secrets

CHALLENGE_ALPHABET = "0123456789"


def generate_challenge_code(length: int) -> str:
    """Generate a numeric one-time challenge code of the given length."""
    if length < 1:
        raise ValueError("Challenge code length must be at least 1")
    return "".join(secrets.choice(CHALLENGE_ALPHABET) for _ in range(length))


def constant_time_equals(left: str, right: str) -> bool:
    """Compare two strings without leaking the mismatch position."""
    return secrets.compare_digest(left.encode("utf-8"), right.encode("utf-8"))
