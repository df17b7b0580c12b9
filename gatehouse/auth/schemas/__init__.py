"""Authentication Pydantic schemas for API validation."""

from .auth import (
    AuthenticatedIdentity,
    ChallengeLoginRequest,
    ChallengeResponse,
    IdentityResponse,
    IssuedToken,
    LoginRequest,
    LoginResponse,
    PrincipalBase,
    PrincipalCreate,
    PrincipalResponse,
    TokenPayload,
)

__all__ = [
    "AuthenticatedIdentity",
    "ChallengeLoginRequest",
    "ChallengeResponse",
    "IdentityResponse",
    "IssuedToken",
    "LoginRequest",
    "LoginResponse",
    "PrincipalBase",
    "PrincipalCreate",
    "PrincipalResponse",
    "TokenPayload",
]
