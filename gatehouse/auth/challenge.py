"""One-time login challenge codes.

A challenge is a short code bound to a scope key (the HTTP layer uses a random
id kept in the caller's session cookie). The store maps scope -> code with an
explicit expiry instead of relying on ambient session state.

Consumption policy follows settings.challenge_one_shot: when enabled, the
stored code is discarded on the first verification attempt whether or not
it matched; otherwise it stays valid until it expires or is replaced.

There is no rate limiting or lockout; a one-shot store is the only brake on
repeated guessing.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

from ..config import settings
from ..utils import secret

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Challenge:
    """A code bound to a scope until expires_at (epoch seconds)."""

    scope: str
    code: str
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class ChallengeStore:
    """Thread-safe in-process scope -> challenge mapping."""

    def __init__(
        self,
        ttl_seconds: int | None = None,
        one_shot: bool | None = None,
        code_length: int | None = None,
        clock: Callable[[], float] = time.time,
        generator: Callable[[int], str] = secret.generate_challenge_code,
    ):
        self.ttl_seconds = settings.challenge_ttl_seconds if ttl_seconds is None else ttl_seconds
        self.one_shot = settings.challenge_one_shot if one_shot is None else one_shot
        self.code_length = settings.challenge_length if code_length is None else code_length
        self._clock = clock
        self._generator = generator
        self._challenges: dict[str, Challenge] = {}
        self._lock = threading.Lock()

    def issue_challenge(self, scope: str) -> Challenge:
        """Generate and store a new code for scope, replacing any previous one."""
        now = self._clock()
        challenge = Challenge(
            scope=scope,
            code=self._generator(self.code_length),
            expires_at=now + self.ttl_seconds,
        )
        with self._lock:
            self._purge_expired(now)
            self._challenges[scope] = challenge
        logger.debug(f"Issued challenge for scope {scope[:8]}...")
        return challenge

    def put(self, scope: str, code: str) -> Challenge:
        """Store a code produced elsewhere (e.g. an external OTP generator)."""
        challenge = Challenge(scope=scope, code=code, expires_at=self._clock() + self.ttl_seconds)
        with self._lock:
            self._challenges[scope] = challenge
        return challenge

    def expected_code(self, scope: str) -> str | None:
        """Return the live code for scope without consuming it."""
        now = self._clock()
        with self._lock:
            challenge = self._challenges.get(scope)
            if challenge is None:
                return None
            if challenge.is_expired(now):
                del self._challenges[scope]
                return None
            return challenge.code

    def take_expected_code(self, scope: str) -> str | None:
        """Return the live code for scope, consuming it if the store is one-shot."""
        now = self._clock()
        with self._lock:
            challenge = self._challenges.get(scope)
            if challenge is None:
                return None
            if challenge.is_expired(now) or self.one_shot:
                del self._challenges[scope]
            if challenge.is_expired(now):
                return None
            return challenge.code

    def verify(self, scope: str, supplied: str) -> bool:
        """Compare supplied to the stored code for scope (exact match)."""
        expected = self.take_expected_code(scope)
        if expected is None:
            return False
        return secret.constant_time_equals(expected, supplied)

    def discard(self, scope: str) -> None:
        """Forget any code held for scope."""
        with self._lock:
            self._challenges.pop(scope, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._challenges)

    def _purge_expired(self, now: float) -> None:
        # Caller holds the lock
        expired = [scope for scope, c in self._challenges.items() if c.is_expired(now)]
        for scope in expired:
            del self._challenges[scope]


# Process-wide store used by the HTTP layer
challenges = ChallengeStore()
