"""Authentication service.

Composes the credential store, password hasher, role resolver, challenge
store and token issuer into the two login flows:

- authenticate(): username + password
- authenticate_with_challenge(): challenge code first, then username + password

Both flows run the same fixed, fail-fast sequence:

1. look up the principal and resolve its roles
2. verify the password
3. check the enabled flag
4. install the identity into the security context

The challenge flow checks the code before step 1, so a bad code is rejected
without touching the credential store. Nothing is installed unless every
step passes.

Lookup is modelled as a tagged PrincipalLookup result. Unknown usernames and
store errors are both reported to the caller as the same AuthenticationError;
the real cause is only logged.
"""

import logging
import sqlite3
from dataclasses import dataclass
from enum import Enum

from ..config import settings
from ..db.principal import PrincipalOperations
from ..exceptions import (
    AccountDisabled,
    AuthenticationError,
    ChallengeMismatch,
    ChallengeMissing,
    DatabaseError,
    InvalidCredentials,
    ValidationError,
)
from ..utils import isodatetime, secret
from . import roles, token
from .challenge import ChallengeStore, challenges as default_challenges
from .context import get_current_identity, set_current_identity
from .passwords import hash_password, verify_password
from .roles import Role, RoleResolver
from .schemas import AuthenticatedIdentity, LoginResponse, PrincipalCreate, PrincipalResponse

logger = logging.getLogger(__name__)

LOGIN_FAILED_MESSAGE = "Login failed"


# ============================================================================
# Principal Lookup
# ============================================================================


class LookupStatus(Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class PrincipalLookup:
    """Outcome of fetching a principal and resolving its roles."""

    status: LookupStatus
    username: str
    row: sqlite3.Row | None = None
    roles: tuple[Role, ...] = ()
    error: Exception | None = None


def lookup_principal(
    conn: sqlite3.Connection,
    username: str,
    role_resolver: RoleResolver | None = None,
) -> PrincipalLookup:
    """Fetch a principal and its roles without raising.

    Any exception from the store or the resolver is captured in the result.
    """
    resolver = role_resolver or roles.resolve_roles
    try:
        row = PrincipalOperations(conn).find_by_username(username)
        if row is None:
            return PrincipalLookup(LookupStatus.NOT_FOUND, username)
        granted = resolver(username)
    except Exception as e:
        return PrincipalLookup(LookupStatus.ERROR, username, error=e)
    return PrincipalLookup(LookupStatus.FOUND, username, row=row, roles=granted)


def _row_to_principal(row: sqlite3.Row) -> PrincipalResponse:
    return PrincipalResponse(
        id=row["id"],
        username=row["username"],
        enabled=bool(row["enabled"]),
        nickname=row["nickname"],
        avatar=row["avatar"],
        description=row["description"],
        created_by=row["created_by"],
        created_at=isodatetime.to_datetime(row["created_at"]),
    )


# ============================================================================
# Authentication Flows
# ============================================================================


def authenticate(
    conn: sqlite3.Connection,
    username: str,
    password: str,
    role_resolver: RoleResolver | None = None,
) -> AuthenticatedIdentity:
    """Verify username and password and install the resulting identity.

    Raises:
        AuthenticationError: Principal not found or the lookup failed
        InvalidCredentials: Password does not match
        AccountDisabled: Principal is disabled
    """
    lookup = lookup_principal(conn, username, role_resolver)

    if lookup.status is LookupStatus.NOT_FOUND:
        logger.warning(f"Failed login attempt for unknown username: {username}")
        raise AuthenticationError(LOGIN_FAILED_MESSAGE)
    if lookup.status is LookupStatus.ERROR:
        logger.warning(f"Principal lookup failed for username {username}: {lookup.error!r}")
        raise AuthenticationError(LOGIN_FAILED_MESSAGE)

    row = lookup.row
    if not verify_password(password, row["password_hash"]):
        logger.warning(f"Failed login attempt (bad password) for username: {username}")
        raise InvalidCredentials("Incorrect password")

    if not row["enabled"]:
        logger.warning(f"Login attempt for disabled account: {username}")
        raise AccountDisabled("Account is disabled")

    identity = AuthenticatedIdentity(
        username=row["username"],
        roles=lookup.roles,
        principal=_row_to_principal(row),
    )
    set_current_identity(identity)

    logger.info(f"Successful login: {identity.username}")
    return identity


def check_challenge(
    challenge_code: str,
    challenge_scope: str,
    challenges: ChallengeStore | None = None,
) -> None:
    """Match a supplied challenge code against the one held for scope.

    Raises:
        ChallengeMissing: No live code is held for scope
        ChallengeMismatch: The codes differ (exact, case-sensitive)
    """
    store = challenges or default_challenges
    expected = store.take_expected_code(challenge_scope)
    if expected is None:
        raise ChallengeMissing("Challenge code has expired or was never requested")
    if not secret.constant_time_equals(expected, challenge_code):
        raise ChallengeMismatch("Challenge code is incorrect")


def authenticate_with_challenge(
    conn: sqlite3.Connection,
    username: str,
    password: str,
    challenge_code: str,
    challenge_scope: str,
    challenges: ChallengeStore | None = None,
    role_resolver: RoleResolver | None = None,
) -> AuthenticatedIdentity:
    """Check the challenge code, then authenticate as authenticate() does.

    Raises:
        ChallengeMissing, ChallengeMismatch: Before any credential check
        AuthenticationError, InvalidCredentials, AccountDisabled
    """
    try:
        check_challenge(challenge_code, challenge_scope, challenges)
    except (ChallengeMissing, ChallengeMismatch) as e:
        logger.warning(f"Rejected challenge for username {username}: {e.code}")
        raise

    return authenticate(conn, username, password, role_resolver)


# ============================================================================
# Login (authenticate + issue token)
# ============================================================================


def _login_response(identity: AuthenticatedIdentity) -> LoginResponse:
    issued = token.issue_access_token(identity)
    return LoginResponse(
        token_prefix=settings.token_prefix,
        token=issued.token,
        expires_at=isodatetime.to_epoch_millis(issued.expires_at),
    )


def login(
    conn: sqlite3.Connection,
    username: str,
    password: str,
    role_resolver: RoleResolver | None = None,
) -> LoginResponse:
    """Authenticate and issue an access token."""
    identity = authenticate(conn, username, password, role_resolver)
    return _login_response(identity)


def login_with_challenge(
    conn: sqlite3.Connection,
    username: str,
    password: str,
    challenge_code: str,
    challenge_scope: str,
    challenges: ChallengeStore | None = None,
    role_resolver: RoleResolver | None = None,
) -> LoginResponse:
    """Authenticate with a challenge code and issue an access token."""
    identity = authenticate_with_challenge(
        conn, username, password, challenge_code, challenge_scope, challenges, role_resolver
    )
    return _login_response(identity)


# ============================================================================
# Principal Registration
# ============================================================================


def create_principal(
    conn: sqlite3.Connection,
    data: PrincipalCreate,
    created_by: str | None = None,
) -> PrincipalResponse:
    """Hash the password and insert a principal. Does not commit.

    created_by defaults to the username in the current security context.

    Raises:
        ValidationError: If the username is already taken
        DatabaseError: If the credential store fails
    """
    if created_by is None:
        current = get_current_identity()
        created_by = current.username if current else None

    store = PrincipalOperations(conn)
    try:
        if store.exists_by_username(data.username):
            raise ValidationError("Principal already exists", {"username": data.username})

        principal_id = store.insert(
            username=data.username,
            password_hash=hash_password(data.password),
            enabled=data.enabled,
            nickname=data.nickname,
            avatar=data.avatar,
            description=data.description,
            created_by=created_by,
        )
        row = store.get_by_id(principal_id)
    except sqlite3.IntegrityError:
        # Inserted concurrently after the existence check
        raise ValidationError("Principal already exists", {"username": data.username})
    except sqlite3.Error as e:
        logger.error(f"Failed to create principal {data.username}: {e!r}")
        raise DatabaseError("Failed to create principal", {"username": data.username}) from e

    logger.info(f"Principal created: {data.username}")
    return _row_to_principal(row)


def get_principal(conn: sqlite3.Connection, username: str) -> PrincipalResponse | None:
    """Get a principal by username, without credential material."""
    row = PrincipalOperations(conn).find_by_username(username)
    return _row_to_principal(row) if row else None
