"""JWT access token issuing and validation.

Tokens are HS256-signed with settings.jwt_secret_key and carry:

- sub: the principal's username
- roles: authority names (e.g. ["ROLE_ADMIN", "ROLE_USER"])
- iat / exp: issued-at and expiry as epoch seconds

Lifetime is settings.jwt_expiry_seconds. Tokens are stateless: nothing is
stored server-side, and a token keeps the roles resolved at issuance until
it expires.

Validation failures are reported as TokenExpired, TokenSignatureInvalid or
TokenMalformed. The signature is checked before the expiry, so a forged
token is never reported as merely expired.
"""

import logging
from datetime import datetime, timedelta

import jwt
from pydantic import ValidationError as PydanticValidationError

from ..config import settings
from ..exceptions import TokenExpired, TokenMalformed, TokenSignatureInvalid
from ..utils import isodatetime
from .roles import parse_roles
from .schemas import AuthenticatedIdentity, IssuedToken, TokenPayload

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ["sub", "iat", "exp"]


# ============================================================================
# Issuing
# ============================================================================


def issue_access_token(identity: AuthenticatedIdentity) -> IssuedToken:
    """Sign a token for identity with the configured lifetime."""
    issued_at = isodatetime.now_unix()
    expires_at = issued_at + settings.jwt_expiry_seconds

    payload = {
        "sub": identity.username,
        "roles": [role.value for role in identity.roles],
        "iat": issued_at,
        "exp": expires_at,
    }
    encoded = jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)

    return IssuedToken(
        token=encoded,
        issued_at=isodatetime.from_unix(issued_at),
        expires_at=isodatetime.from_unix(expires_at),
    )


# ============================================================================
# Validation
# ============================================================================


def decode_access_token(token: str) -> TokenPayload:
    """Verify signature and expiry and return the token's claims.

    Raises:
        TokenExpired: If the token is past its exp claim
        TokenSignatureInvalid: If the signature does not verify
        TokenMalformed: If the token cannot be decoded or lacks claims
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require": REQUIRED_CLAIMS},
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpired("Token has expired")
    except jwt.InvalidSignatureError:
        raise TokenSignatureInvalid("Token signature is invalid")
    except jwt.InvalidTokenError as e:
        logger.debug(f"Rejected malformed token: {e}")
        raise TokenMalformed("Token is malformed")

    try:
        return TokenPayload(**payload)
    except PydanticValidationError:
        raise TokenMalformed("Token is missing required claims")


def validate_access_token(token: str) -> AuthenticatedIdentity:
    """Validate a token and rebuild the identity it was issued for.

    Raises:
        TokenExpired, TokenSignatureInvalid, TokenMalformed
    """
    payload = decode_access_token(token)
    try:
        roles = parse_roles(payload.roles)
    except ValueError:
        raise TokenMalformed("Token carries an unknown role")
    return AuthenticatedIdentity(username=payload.sub, roles=roles)


def parse_authorization_header(header: str) -> str:
    """Extract the token from a "<prefix> <token>" header value.

    The prefix comparison is case-insensitive.

    Raises:
        TokenMalformed: If the header does not have that shape
    """
    parts = header.split(" ")
    if len(parts) != 2 or parts[0].lower() != settings.token_prefix.lower() or not parts[1]:
        raise TokenMalformed(
            "Invalid authorization header format",
            {"expected": f"{settings.token_header}: {settings.token_prefix} <token>"}
        )
    return parts[1]


# ============================================================================
# Introspection
# ============================================================================


def decode_token_no_validation(token: str) -> dict:
    """Decode claims without verifying signature or expiry.

    For debugging and logging only; never trust the result.
    """
    return jwt.decode(token, options={"verify_signature": False, "verify_exp": False})


def get_expiration(token: str) -> datetime:
    """Return the expiry of a valid token as an aware UTC datetime."""
    return isodatetime.from_unix(decode_access_token(token).exp)


def get_token_expiry_remaining(token: str) -> timedelta | None:
    """Return time left before expiry, or None for expired/invalid tokens."""
    try:
        payload = decode_access_token(token)
    except (TokenExpired, TokenMalformed, TokenSignatureInvalid):
        return None
    return timedelta(seconds=payload.exp - isodatetime.now_unix())


def is_token_expired(token: str) -> bool:
    """Return True if the token is expired or invalid."""
    return get_token_expiry_remaining(token) is None
