"""Database module for Gatehouse.

This module provides the Core API for database operations.
Core encapsulates connection management and provides access to the
credential store operations.

ARCHITECTURE:
- Core owns its connection (no Flask g.db dependency)
- Connection closes on context exit (atomic=True) or when the Core is released
- Each stored record type gets an encapsulated operations class

    # Autocommit usage:
    core = get_core()
    row = core.principal.find_by_username("alice")

    # Atomic usage:
    with get_core(atomic=True) as core:
        core.principal.insert(username="alice", password_hash=digest)
"""

from pathlib import Path
from typing import TYPE_CHECKING
import logging
import sqlite3

from ..config import settings
from ..schema import SCHEMA_PATH

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from .principal import PrincipalOperations


class Core:
    """
    Database Core with credential store operations.

    Maintains its own connection and transaction state.
    Provides access to operations through properties.

    Connection Lifecycle:
    - atomic=True: Connection closes on __exit__ from context manager
    - atomic=False: Caller commits; connection closes on close() or collection
    """

    def __init__(self, connection: sqlite3.Connection, atomic: bool = False):
        """Initialize Core with a database connection.

        Args:
            connection: SQLite connection with row_factory set to sqlite3.Row
            atomic: If True, Core MUST be used as context manager.
                    If False, Core has autocommit semantics.
        """
        self._conn = connection
        self._atomic = atomic
        self._principal_ops = None

    @property
    def connection(self) -> sqlite3.Connection:
        """The underlying SQLite connection."""
        return self._conn

    @property
    def principal(self) -> "PrincipalOperations":
        """Principal (credential store) operations.

        Lazy-loaded to avoid circular import issues.
        Operations are created on first access and cached.
        """
        if self._principal_ops is None:
            from .principal import PrincipalOperations
            self._principal_ops = PrincipalOperations(self._conn)
        return self._principal_ops

    def commit(self) -> None:
        """Commit pending changes on an autocommit Core."""
        self._conn.commit()

    def close(self) -> None:
        """Close the underlying connection."""
        self._conn.close()

    def __enter__(self) -> "Core":
        """Enter context manager for atomic transaction.

        Raises:
            RuntimeError: If Core was not created with atomic=True

        Returns:
            self for use in with-statement
        """
        if not self._atomic:
            raise RuntimeError(
                "Core must be created with atomic=True for context manager use. "
                "Use: with db.get_core(atomic=True) as core:"
            )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit context manager, committing or rolling back transaction."""
        try:
            if exc_type is None:
                self._conn.commit()
            else:
                self._conn.rollback()
        finally:
            # Always close the connection
            self._conn.close()

    def __del__(self):
        """Cleanup connection if not already closed.

        Called during garbage collection. Ignores errors since connection
        may already be closed or in an invalid state.
        """
        if hasattr(self, "_conn") and self._conn:
            try:
                self._conn.close()
            except sqlite3.Error:
                pass


def _create_connection() -> sqlite3.Connection:
    """Create a fresh database connection.

    Returns:
        SQLite connection with row_factory set to sqlite3.Row
        and foreign keys enabled.
    """
    db_path = Path(settings.database_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def get_core(atomic: bool = False) -> Core:
    """
    Get a database Core instance.

    Args:
        atomic: If True, returns a Core that MUST be used as context manager.
                Use for multi-operation transactions that need to commit together.
                If False (default), returns a Core whose caller commits.

    Returns:
        Core instance with principal operations
    """
    conn = _create_connection()
    return Core(conn, atomic=atomic)


# ============================================================================
# DATABASE INITIALIZATION
# ============================================================================

def apply_schema(conn: sqlite3.Connection) -> None:
    """Apply schema.sql to an open connection."""
    with open(SCHEMA_PATH, "r") as f:
        schema_sql = f.read()
    conn.executescript(schema_sql)
    conn.commit()


def init_db():
    """Initialize database by running schema.sql if not already initialized."""
    db_path = Path(settings.database_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    with sqlite3.connect(str(db_path)) as db:
        cursor = db.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='_schema_metadata'"
        )
        if cursor.fetchone():
            # Database already initialized, skip
            return

        apply_schema(db)
        logger.info(f"Applied schema to {db_path}")
