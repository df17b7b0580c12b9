"""Authentication module for Gatehouse.

This module provides authentication and authorization functionality:
- Schema validation for auth operations
- Password hashing and verification (bcrypt)
- Role resolution policy
- One-time challenge codes
- JWT token issuing and validation
- Request-scoped security context
- Decorators for protected endpoints

Auth endpoints:
- POST /auth/login - Authenticate and return an access token
- GET /auth/challenge - Issue a challenge code for this session
- POST /auth/login/challenge - Authenticate with a challenge code
- GET /auth/me - Current identity
- POST /auth/logout - Discard the current identity
"""

from . import schemas, token
from .context import get_current_identity

__all__ = ["schemas", "token", "get_current_identity"]
