"""Request-scoped security context.

Holds the AuthenticatedIdentity for the current request. Backed by a
ContextVar so every thread and asyncio task sees its own value; concurrent
requests never observe each other's identity.

The Flask app clears the context in its teardown_request hook. Code running
outside a request should use security_context(), which restores the previous
value on exit.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

from .schemas import AuthenticatedIdentity

_current_identity: ContextVar[AuthenticatedIdentity | None] = ContextVar(
    "_current_identity", default=None
)


def get_current_identity() -> AuthenticatedIdentity | None:
    """Return the identity authenticated in this scope, if any."""
    return _current_identity.get()


def set_current_identity(identity: AuthenticatedIdentity) -> None:
    """Install an identity for the rest of this scope."""
    _current_identity.set(identity)


def clear_current_identity() -> None:
    """Remove any identity from this scope."""
    _current_identity.set(None)


@contextmanager
def security_context(identity: AuthenticatedIdentity | None = None) -> Iterator[None]:
    """Run a block with its own security context.

    Anything installed inside the block (including by authenticate()) is
    discarded on exit and the outer identity is restored.
    """
    token = _current_identity.set(identity)
    try:
        yield
    finally:
        _current_identity.reset(token)
