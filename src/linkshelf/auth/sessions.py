"""In-memory session store.

Maps opaque session tokens to usernames. Sessions live in process memory
only: they are not persisted and do not survive a restart.

One lock guards the whole map. Every operation is a dict access with no I/O
under the lock, so serializing them is cheap even with many concurrent
requests. The map itself is never handed out.

By default sessions never expire. Set ttl_seconds to give every session an
absolute lifetime; expired tokens then resolve to nothing, and SessionSweeper
can purge them periodically.
"""

import asyncio
import secrets
import string
import threading
import time
from typing import Callable, Optional

import structlog

logger = structlog.get_logger()

TOKEN_LENGTH = 32
TOKEN_ALPHABET = string.digits + string.ascii_lowercase + string.ascii_uppercase


def generate_token(length: int = TOKEN_LENGTH) -> str:
    """Random token drawn uniformly from [0-9a-zA-Z]."""
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


class SessionStore:
    """Thread-safe token → username map."""

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._sessions: dict[str, tuple[str, float]] = {}

    def create_session(self, username: str) -> str:
        """Issue a new token for username and return it.

        A collision with a live token (62**32 space) would overwrite it.
        """
        token = generate_token()
        issued_at = self._clock()
        with self._lock:
            self._sessions[token] = (username, issued_at)
        logger.info("session.created", username=username)
        return token

    def resolve(self, token: str) -> Optional[str]:
        """Username for token, or None if unknown, revoked or expired."""
        with self._lock:
            entry = self._sessions.get(token)
            if entry is None:
                return None
            if self._expired(entry):
                del self._sessions[token]
                return None
            return entry[0]

    def revoke(self, token: str) -> Optional[str]:
        """Remove token. Returns the username it belonged to, if any."""
        with self._lock:
            entry = self._sessions.pop(token, None)
        if entry is None or self._expired(entry):
            return None
        logger.info("session.revoked", username=entry[0])
        return entry[0]

    def revoke_user(self, username: str, keep: Optional[str] = None) -> int:
        """Remove every session of username except keep. Returns how many went."""
        with self._lock:
            tokens = [
                t for t, entry in self._sessions.items()
                if entry[0] == username and t != keep
            ]
            for token in tokens:
                del self._sessions[token]
        if tokens:
            logger.info("session.user_revoked", username=username, removed=len(tokens))
        return len(tokens)

    def contains(self, token: str) -> bool:
        with self._lock:
            entry = self._sessions.get(token)
            return entry is not None and not self._expired(entry)

    def sweep(self) -> int:
        """Drop every expired session. Returns how many were removed."""
        if self.ttl_seconds is None:
            return 0
        with self._lock:
            expired = [t for t, entry in self._sessions.items() if self._expired(entry)]
            for token in expired:
                del self._sessions[token]
        if expired:
            logger.info("session.swept", removed=len(expired))
        return len(expired)

    def _expired(self, entry: tuple[str, float]) -> bool:
        if self.ttl_seconds is None:
            return False
        return self._clock() - entry[1] >= self.ttl_seconds

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __repr__(self) -> str:
        return f"SessionStore with {len(self)} sessions"


class SessionSweeper:
    """Background loop purging expired sessions. Only useful with a TTL."""

    def __init__(self, store: SessionStore, interval: float = 60.0):
        self.store = store
        self.interval = interval
        self._running = False

    async def run_loop(self) -> None:
        self._running = True
        logger.info("session_sweeper.started", interval=self.interval)

        while self._running:
            try:
                self.store.sweep()
            except Exception:
                logger.exception("session_sweeper.error")
            await asyncio.sleep(self.interval)

    def stop(self) -> None:
        """Signal the sweeper to stop."""
        self._running = False
        logger.info("session_sweeper.stopping")
