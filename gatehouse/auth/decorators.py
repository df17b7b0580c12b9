"""Authentication decorators for protected endpoints.

This module provides decorators for enforcing security constraints on endpoints:
- @auth_required - Requires a valid access token
- @roles_required(*roles) - Requires a valid access token carrying every listed role

Both install the token's identity into the security context, so handlers read
it with get_current_identity().
"""

import logging
from functools import wraps

from flask import request

from ..config import settings
from ..exceptions import AuthenticationError, Forbidden
from . import token
from .context import set_current_identity
from .roles import Role
from .schemas import AuthenticatedIdentity

logger = logging.getLogger(__name__)


# ============================================================================
# Shared Authentication Logic
# ============================================================================


def _authenticate_request() -> AuthenticatedIdentity:
    """
    Authenticate the current request from its "<prefix> <token>" header.

    Raises:
        AuthenticationError: If no header is present
        TokenMalformed, TokenExpired, TokenSignatureInvalid: If the token is bad
    """
    header = request.headers.get(settings.token_header)
    if header is None:
        logger.warning("Unauthenticated request to protected endpoint")
        raise AuthenticationError(
            "Authentication required",
            {"expected": f"{settings.token_header}: {settings.token_prefix} <token>"}
        )

    try:
        identity = token.validate_access_token(token.parse_authorization_header(header))
    except AuthenticationError as e:
        logger.warning(f"Rejected token on {request.path}: {e.code}")
        raise

    set_current_identity(identity)
    logger.debug(f"Token authentication successful for {identity.username}")
    return identity


# ============================================================================
# Decorators
# ============================================================================


def auth_required(f):
    """
    Decorator to require a valid access token.

    Example:
    ```python
    @auth_required
    def protected_endpoint():
        identity = get_current_identity()
        ...
    ```
    """
    @wraps(f)
    def wrapper(*args, **kwargs):
        _authenticate_request()
        return f(*args, **kwargs)

    return wrapper


def roles_required(*required: Role):
    """
    Decorator factory requiring every listed role.

    Raises:
        AuthenticationError: If the request is not authenticated
        Forbidden: If the identity lacks a required role

    Example:
    ```python
    @roles_required(Role.ADMIN)
    def admin_only():
        ...
    ```
    """
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            identity = _authenticate_request()
            missing = [role.value for role in required if not identity.has_role(role)]
            if missing:
                logger.warning(f"{identity.username} denied {request.path}: missing {missing}")
                raise Forbidden("Insufficient role", {"required": missing})
            return f(*args, **kwargs)

        return wrapper

    return decorator
