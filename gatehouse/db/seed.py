"""Seed the database with a bootstrap principal for development.

Usage:
    BOOTSTRAP_ADMIN_PASSWORD=... python -m gatehouse.db.seed
"""

import logging

from ..auth import service
from ..auth.schemas import PrincipalCreate
from ..config import settings
from . import get_core, init_db

logger = logging.getLogger(__name__)


def seed_bootstrap_admin(
    username: str | None = None,
    password: str | None = None,
) -> bool:
    """Create the bootstrap principal if it does not exist yet.

    Returns:
        True if a principal was created, False if it already existed

    Raises:
        ValueError: If no password is configured
    """
    username = username or settings.bootstrap_admin_username
    password = password or settings.bootstrap_admin_password
    if not password:
        raise ValueError("BOOTSTRAP_ADMIN_PASSWORD must be set to seed a principal")

    init_db()

    with get_core(atomic=True) as core:
        if core.principal.exists_by_username(username):
            logger.info(f"Principal '{username}' already exists, nothing to seed")
            return False
        service.create_principal(
            core.connection,
            PrincipalCreate(username=username, password=password),
            created_by="seed-script",
        )

    print(f"✅ Seeded principal '{username}'")
    return True


def main():
    """Main entry point."""
    try:
        seed_bootstrap_admin()
    except Exception as e:
        print(f"❌ Error seeding database: {e}")
        raise


if __name__ == "__main__":
    main()
