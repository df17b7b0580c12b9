"""Role resolution policy.

Roles are derived from the principal's username alone:

- a username containing the literal substring ``"admin"`` (case-sensitive)
  is granted ADMIN and USER
- every other username is granted USER only

This is a deliberately simple heuristic, not a permission model. It sits
behind the ``RoleResolver`` protocol so an attribute-based resolver can
replace it without changes to the authentication service.
"""

from enum import Enum
from typing import Iterable, Protocol


class Role(str, Enum):
    """Authorization roles, valued by their authority names."""

    ADMIN = "ROLE_ADMIN"
    USER = "ROLE_USER"


# Canonical ordering for role sets (tokens, responses, comparisons)
_ROLE_ORDER = (Role.ADMIN, Role.USER)


def ordered(roles: Iterable[Role]) -> tuple[Role, ...]:
    """Return roles de-duplicated in canonical order."""
    granted = set(roles)
    return tuple(role for role in _ROLE_ORDER if role in granted)


class RoleResolver(Protocol):
    """Maps a username to the roles it is granted."""

    def __call__(self, username: str) -> tuple[Role, ...]:
        ...


class SubstringRoleResolver:
    """Grants extra roles when the username contains a marker substring."""

    def __init__(self, marker: str = "admin"):
        self.marker = marker

    def __call__(self, username: str) -> tuple[Role, ...]:
        if self.marker in username:
            return ordered((Role.ADMIN, Role.USER))
        return (Role.USER,)


resolve_roles: RoleResolver = SubstringRoleResolver()


def parse_roles(names: Iterable[str]) -> tuple[Role, ...]:
    """Convert authority names (e.g. from a token claim) back to roles.

    Raises:
        ValueError: If a name is not a known role
    """
    return ordered(Role(name) for name in names)
