"""Principal (credential store) operations.

IMPORT CONVENTION:
- Core accesses these through core.principal property
- NO direct import needed when using Core API

Usernames are unique and immutable once inserted. Lookups are exact
(case-sensitive) because role resolution works on the raw username string.
"""

import sqlite3

from ..exceptions import ResourceNotFound
from ..utils import isodatetime, uid


class PrincipalOperations:
    """Credential store operations for principal records."""

    def __init__(self, conn: sqlite3.Connection):
        """Initialize principal operations with a database connection.

        Args:
            conn: SQLite connection with row_factory set to sqlite3.Row
        """
        self._conn = conn

    def find_by_username(self, username: str) -> sqlite3.Row | None:
        """Get principal row by username, including the password hash.

        Returns:
            sqlite3.Row or None if no principal has that username
        """
        return self._conn.execute(
            "SELECT * FROM principals WHERE username = ?",
            (username,)
        ).fetchone()

    def exists_by_username(self, username: str) -> bool:
        """Check whether a principal with this username exists."""
        row = self._conn.execute(
            "SELECT 1 FROM principals WHERE username = ?",
            (username,)
        ).fetchone()
        return row is not None

    def get_by_id(self, principal_id: str) -> sqlite3.Row:
        """Get principal by ID.

        Raises:
            ResourceNotFound: If principal_id doesn't exist
        """
        row = self._conn.execute(
            "SELECT * FROM principals WHERE id = ?",
            (principal_id,)
        ).fetchone()

        if not row:
            raise ResourceNotFound(
                f"Principal '{principal_id}' not found",
                {"principal_id": principal_id}
            )

        return row

    def insert(
        self,
        username: str,
        password_hash: str,
        enabled: bool = True,
        nickname: str | None = None,
        avatar: str | None = None,
        description: str | None = None,
        created_by: str | None = None,
    ) -> str:
        """Insert a principal with an auto-generated UUID.

        The caller is responsible for hashing the password.

        Returns:
            The new principal ID

        Raises:
            sqlite3.IntegrityError: If the username is already taken
        """
        principal_id = uid.generate_uuid()
        now = isodatetime.now()

        self._conn.execute(
            """INSERT INTO principals (
                id, username, password_hash, enabled, nickname, avatar,
                description, created_by, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                principal_id, username, password_hash, 1 if enabled else 0,
                nickname, avatar, description, created_by, now, now
            )
        )

        return principal_id

    def set_enabled(self, principal_id: str, enabled: bool) -> None:
        """Enable or disable a principal's account."""
        self._conn.execute(
            "UPDATE principals SET enabled = ?, updated_at = ? WHERE id = ?",
            (1 if enabled else 0, isodatetime.now(), principal_id)
        )

    def count(self) -> int:
        """Count stored principals."""
        return self._conn.execute("SELECT COUNT(*) FROM principals").fetchone()[0]
