"""
ResilienceHub Backend — Session Cache
=====================================

What:  In-process, time-bounded cache of session token → principal lookups.
Why:   Skips the session + user queries on every authenticated request.
How:   A dict keyed by token. Reads expire entries lazily; a background
       asyncio task sweeps stale entries periodically to bound memory.
Who:   Constructed once in `create_app()`, stored on `app.state`, and handed to
       the Authenticator through a dependency. Started/stopped by the lifespan.

Correctness contract:
    The cache is advisory. Clearing it at any time (or disabling it with
    SESSION_CACHE_ENABLED=false) changes latency, never an authorization
    outcome. A cached entry is never served past the stored session's expiry.

Concurrency:
    Single event loop, no awaits inside any mutation; each get/set/delete is
    atomic with respect to other requests.
"""

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from resilience_hub.auth.context import AuthContext, Principal, SessionView
from resilience_hub.database import utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    principal: Principal
    cached_at: datetime
    session_expires_at: datetime


class SessionCache:
    """
    TTL cache for resolved sessions.

    Args:
        ttl_seconds:             How long an entry is served after being cached.
        sweep_interval_seconds:  Period of the background sweep task.
        clock:                   Returns the current aware UTC time (injectable for tests).
    """

    def __init__(
        self,
        ttl_seconds: int = 300,
        sweep_interval_seconds: int = 600,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._ttl = timedelta(seconds=ttl_seconds)
        self._sweep_interval = sweep_interval_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._sweeper: Optional[asyncio.Task] = None

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, token: str) -> bool:
        return token in self._entries

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    # ── Lookups ───────────────────────────────────────────────────────────

    def _is_stale(self, entry: CacheEntry, now: datetime) -> bool:
        return now - entry.cached_at >= self._ttl or now >= entry.session_expires_at

    def get(self, token: str) -> Optional[AuthContext]:
        """
        Returns the cached context for `token`, or None.

        Stale entries are evicted on read. The returned SessionView carries
        `expires_at = min(cached_at + ttl, stored session expiry)`.
        """
        entry = self._entries.get(token)
        if entry is None:
            return None

        now = self._clock()
        if self._is_stale(entry, now):
            self._entries.pop(token, None)
            return None

        view = SessionView(
            token=token,
            user_id=entry.principal.id,
            expires_at=min(entry.cached_at + self._ttl, entry.session_expires_at),
            cached=True,
        )
        return AuthContext(principal=entry.principal, session=view)

    # ── Mutations ─────────────────────────────────────────────────────────

    def set(self, token: str, principal: Principal, session_expires_at: datetime) -> None:
        self._entries[token] = CacheEntry(
            principal=principal,
            cached_at=self._clock(),
            session_expires_at=session_expires_at,
        )

    def delete(self, token: str) -> None:
        self._entries.pop(token, None)

    def invalidate_user(self, user_id: int) -> int:
        """Evicts every entry whose principal is `user_id`. Returns the number evicted."""
        tokens = [t for t, e in self._entries.items() if e.principal.id == user_id]
        for token in tokens:
            del self._entries[token]
        return len(tokens)

    def clear(self) -> None:
        self._entries.clear()

    def sweep(self) -> int:
        """Removes all stale entries. Returns the number removed."""
        now = self._clock()
        stale = [t for t, e in self._entries.items() if self._is_stale(e, now)]
        for token in stale:
            del self._entries[token]
        if stale:
            logger.debug("Session cache sweep removed %d entries", len(stale))
        return len(stale)

    # ── Background sweep lifecycle ────────────────────────────────────────

    @property
    def running(self) -> bool:
        return self._sweeper is not None and not self._sweeper.done()

    async def start(self) -> None:
        if self.running:
            return
        self._sweeper = asyncio.create_task(self._sweep_forever(), name="session-cache-sweeper")
        logger.info(
            "Session cache started (ttl=%ss, sweep every %ss)",
            int(self._ttl.total_seconds()),
            self._sweep_interval,
        )

    async def stop(self) -> None:
        """Cancels the sweep task and drops all entries. Safe to call repeatedly."""
        task, self._sweeper = self._sweeper, None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self.clear()

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval)
            self.sweep()
