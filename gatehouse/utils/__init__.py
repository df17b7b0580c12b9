"""Utility functions for Gatehouse.

This package provides centralized utilities for common operations.
Import convention: use module-level imports for clarity.

    from gatehouse.utils import isodatetime, uid, secret
    timestamp = isodatetime.now()
    expires_ms = isodatetime.to_epoch_millis(some_datetime)
    principal_id = uid.generate_uuid()
    code = secret.generate_challenge_code(4)
"""

from . import isodatetime, secret, uid

__all__ = ["isodatetime", "secret", "uid"]
