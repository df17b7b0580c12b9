"""Pydantic schemas for authentication.

Request models validate incoming JSON; response models are what the API
serializes. AuthenticatedIdentity is the transient, request-scoped result of
a successful login or token validation and is never persisted.
"""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..roles import Role

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

# bcrypt only accepts this many bytes of input
BCRYPT_MAX_PASSWORD_BYTES = 72


# ============================================================================
# Principal Schemas
# ============================================================================


class PrincipalBase(BaseModel):
    """Shared principal fields."""

    username: str = Field(..., min_length=1, max_length=64)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        """Usernames are stored exactly as given (no case folding)."""
        if not USERNAME_PATTERN.match(v):
            raise ValueError("Username may only contain letters, digits, hyphens and underscores")
        return v


class PrincipalCreate(PrincipalBase):
    """Schema for inserting a principal into the credential store."""

    password: str = Field(..., min_length=6, max_length=72)
    enabled: bool = True
    nickname: str | None = Field(default=None, max_length=64)
    avatar: str | None = None
    description: str | None = None

    @field_validator("password")
    @classmethod
    def validate_password_bytes(cls, v: str) -> str:
        """Bcrypt rejects input longer than 72 bytes once encoded."""
        if len(v.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
            raise ValueError(
                f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes when UTF-8 encoded"
            )
        return v


class PrincipalResponse(PrincipalBase):
    """Principal as exposed outside the store. Never carries the hash."""

    id: str
    enabled: bool
    nickname: str | None = None
    avatar: str | None = None
    description: str | None = None
    created_by: str | None = None
    created_at: datetime


# ============================================================================
# Login Schemas
# ============================================================================


class LoginRequest(BaseModel):
    """Plain username/password login."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ChallengeLoginRequest(LoginRequest):
    """Login that also presents the one-time challenge code."""

    challenge: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    """Issued token; clients send back "<token_prefix> <token>"."""

    token_prefix: str
    token: str
    expires_at: int = Field(..., description="Expiry as epoch milliseconds")


class ChallengeResponse(BaseModel):
    """A freshly issued challenge for the caller's session."""

    challenge: str
    expires_at: int = Field(..., description="Expiry as epoch milliseconds")


# ============================================================================
# Token / Identity Schemas
# ============================================================================


class TokenPayload(BaseModel):
    """Claims carried by an access token."""

    sub: str
    roles: list[str]
    iat: int
    exp: int


class IssuedToken(BaseModel):
    """A signed token together with its timestamps."""

    token: str
    issued_at: datetime
    expires_at: datetime


class AuthenticatedIdentity(BaseModel):
    """The identity installed in the security context.

    principal is present after a password login and None when the identity
    was rebuilt from a token.
    """

    model_config = ConfigDict(frozen=True)

    username: str
    roles: tuple[Role, ...]
    principal: PrincipalResponse | None = None

    def has_role(self, role: Role) -> bool:
        return role in self.roles


class IdentityResponse(BaseModel):
    """Current identity as returned by GET /auth/me."""

    username: str
    roles: list[str]
