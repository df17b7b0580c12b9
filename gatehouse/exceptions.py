"""Custom exceptions for Gatehouse.

Every exception carries a human-readable ``message``, an optional ``details``
dict, a stable machine-readable ``code`` and the HTTP status the Flask error
handler responds with.
"""


class GatehouseError(Exception):
    """Base exception for all Gatehouse errors."""

    code = "internal_error"
    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ResourceNotFound(GatehouseError):
    """Raised when a requested resource does not exist."""

    code = "not_found"
    status_code = 404


class ValidationError(GatehouseError):
    """Raised when request data fails validation."""

    code = "validation_error"
    status_code = 400


class DatabaseError(GatehouseError):
    """Raised when a database operation fails."""

    code = "database_error"
    status_code = 500


# ============================================================================
# Authentication
# ============================================================================


class AuthenticationError(GatehouseError):
    """Raised when authentication fails.

    Used directly for every principal lookup failure (unknown username,
    store error) so callers cannot tell which one happened.
    """

    code = "authentication_failed"
    status_code = 401


class InvalidCredentials(AuthenticationError):
    """Raised when the supplied password does not match the stored hash."""

    code = "invalid_credentials"


class AccountDisabled(AuthenticationError):
    """Raised when the principal's account is disabled."""

    code = "account_disabled"
    status_code = 403


class ChallengeMissing(AuthenticationError):
    """Raised when no challenge code is held for the caller's scope."""

    code = "challenge_missing"
    status_code = 400


class ChallengeMismatch(AuthenticationError):
    """Raised when the supplied challenge code does not match."""

    code = "challenge_mismatch"
    status_code = 400


class TokenExpired(AuthenticationError):
    """Raised when an access token is past its expiry."""

    code = "token_expired"


class TokenMalformed(AuthenticationError):
    """Raised when an access token cannot be parsed."""

    code = "token_malformed"


class TokenSignatureInvalid(AuthenticationError):
    """Raised when an access token's signature does not verify."""

    code = "token_signature_invalid"


class Forbidden(GatehouseError):
    """Raised when an authenticated identity lacks a required role."""

    code = "forbidden"
    status_code = 403
