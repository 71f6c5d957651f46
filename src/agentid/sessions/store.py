"""Session store with status-dependent expiry.

One interface, two implementations selected by configuration:

- MemorySessionStore: single-process dict. Non-durable and NOT shared across
  instances - acceptable only for local development and tests. It is not a
  fallback for a distributed deployment.
- RedisSessionStore: networked key-value store. Durable and shared, required
  for any multi-instance deployment.

Both behave identically:
- create() stores a pending record with the pending TTL
- get() returns None for unknown and expired ids alike
- update() merges fields over the existing record (no-op if absent) and
  re-derives the TTL from the record's new status on every write
- transition() is update() conditioned on the stored status still matching
  an expected value; it is the single writer path for terminal states

Concurrent update() calls for one key are last-write-wins at the
field-merge level. transition() closes the race for terminal writes.
"""

from __future__ import annotations

__all__ = [
    "MemorySessionStore",
    "RedisSessionStore",
    "SessionStore",
    "create_session_store",
    "session_key",
]

import asyncio
import time
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from pydantic import ValidationError

from agentid.constants import APP_NAME
from agentid.sessions.models import Session, SessionStatus
from agentid.telemetry.system import get_system_logger

if TYPE_CHECKING:
    from redis.asyncio import Redis

    from agentid.config import AppConfig

# Optimistic transaction retries before giving up on a contended key
_MAX_WATCH_RETRIES = 5

# Minimum spacing between full expiry sweeps of the in-memory table
_SWEEP_INTERVAL_SECONDS: float = 60.0

_logger = get_system_logger()


def session_key(prefix: str, session_id: str) -> str:
    """Build the namespaced storage key: <prefix>:session:<session_id>."""
    return f"{prefix}:session:{session_id}"


def _new_session_id() -> str:
    return str(uuid.uuid4())


def _merge(session: Session, fields: dict[str, Any]) -> Session:
    """Merge fields over a session record, re-validating the result."""
    data = session.model_dump()
    data.update(fields)
    return Session.model_validate(data)


@runtime_checkable
class SessionStore(Protocol):
    """Protocol for session storage backends.

    Implementations must make expiry passive: once a TTL lapses the record
    is simply absent, with no way to tell it apart from an unknown id.
    """

    async def create(self, provider_session_id: str) -> str:
        """Create a pending session and return its new session id."""
        ...

    async def get(self, session_id: str) -> Session | None:
        """Return the session, or None if unknown or expired."""
        ...

    async def update(self, session_id: str, fields: dict[str, Any]) -> None:
        """Merge fields into the session. No-op if absent."""
        ...

    async def transition(
        self,
        session_id: str,
        expected: SessionStatus,
        fields: dict[str, Any],
    ) -> bool:
        """Merge fields only if the stored status equals expected.

        Returns:
            True if the write happened, False if the session is absent or
            its status no longer matches.
        """
        ...

    async def close(self) -> None:
        """Release backend resources."""
        ...


class _TTLPolicy:
    """Derives record TTL from status."""

    def __init__(self, pending_ttl_seconds: int, terminal_ttl_seconds: int) -> None:
        self.pending_ttl_seconds = pending_ttl_seconds
        self.terminal_ttl_seconds = terminal_ttl_seconds

    def ttl_for(self, session: Session) -> int:
        if session.is_terminal:
            return self.terminal_ttl_seconds
        return self.pending_ttl_seconds


# =============================================================================
# In-memory backend
# =============================================================================


class MemorySessionStore(_TTLPolicy):
    """In-process session store.

    Single-instance, non-durable. Expired entries are dropped on access,
    and create() sweeps the whole table at most once per sweep interval so
    abandoned sessions that are never read again are reclaimed too. An
    asyncio.Lock serializes writes within the event loop so transition()
    is atomic in this process.

    Attributes:
        pending_ttl_seconds: Lifetime of pending sessions.
        terminal_ttl_seconds: Lifetime of complete/failed sessions.
    """

    def __init__(
        self,
        pending_ttl_seconds: int,
        terminal_ttl_seconds: int,
        clock: "Any | None" = None,
    ) -> None:
        """Initialize the in-memory store.

        Args:
            pending_ttl_seconds: Lifetime of pending sessions.
            terminal_ttl_seconds: Lifetime of terminal sessions.
            clock: Monotonic clock callable (injectable for tests).
        """
        super().__init__(pending_ttl_seconds, terminal_ttl_seconds)
        self._clock = clock or time.monotonic
        self._records: dict[str, tuple[Session, float]] = {}
        self._lock = asyncio.Lock()
        self._next_sweep = self._clock() + _SWEEP_INTERVAL_SECONDS

    def _sweep(self, now: float) -> None:
        for session_id in [s for s, (_, expires_at) in self._records.items() if now >= expires_at]:
            del self._records[session_id]
        self._next_sweep = now + _SWEEP_INTERVAL_SECONDS

    def _read(self, session_id: str) -> Session | None:
        entry = self._records.get(session_id)
        if entry is None:
            return None
        session, expires_at = entry
        if self._clock() >= expires_at:
            del self._records[session_id]
            return None
        return session

    def _write(self, session: Session) -> None:
        self._records[session.session_id] = (session, self._clock() + self.ttl_for(session))

    async def create(self, provider_session_id: str) -> str:
        session = Session(
            session_id=_new_session_id(),
            provider_session_id=provider_session_id,
            created_at=datetime.now(timezone.utc),
        )
        async with self._lock:
            now = self._clock()
            if now >= self._next_sweep:
                self._sweep(now)
            self._write(session)
        return session.session_id

    async def get(self, session_id: str) -> Session | None:
        return self._read(session_id)

    async def update(self, session_id: str, fields: dict[str, Any]) -> None:
        async with self._lock:
            existing = self._read(session_id)
            if existing is None:
                return
            self._write(_merge(existing, fields))

    async def transition(
        self,
        session_id: str,
        expected: SessionStatus,
        fields: dict[str, Any],
    ) -> bool:
        async with self._lock:
            existing = self._read(session_id)
            if existing is None or existing.status is not expected:
                return False
            self._write(_merge(existing, fields))
            return True

    async def close(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        """Number of stored records (expired entries included until swept or accessed)."""
        return len(self._records)


# =============================================================================
# Redis backend
# =============================================================================


class RedisSessionStore(_TTLPolicy):
    """Redis-backed session store.

    Records are JSON strings with native key expiry (SET ... EX). The client
    is created once at startup and shared; helper methods take no global
    state. transition() uses WATCH/MULTI so the status check and the write
    are atomic across instances.
    """

    def __init__(
        self,
        client: "Redis",
        pending_ttl_seconds: int,
        terminal_ttl_seconds: int,
        key_prefix: str = APP_NAME,
    ) -> None:
        """Initialize the Redis store.

        Args:
            client: redis.asyncio client created with decode_responses=True.
            pending_ttl_seconds: Lifetime of pending sessions.
            terminal_ttl_seconds: Lifetime of terminal sessions.
            key_prefix: Namespace prefix for keys.
        """
        super().__init__(pending_ttl_seconds, terminal_ttl_seconds)
        self._client = client
        self._prefix = key_prefix

    @classmethod
    def from_url(
        cls,
        url: str,
        pending_ttl_seconds: int,
        terminal_ttl_seconds: int,
        key_prefix: str = APP_NAME,
    ) -> "RedisSessionStore":
        """Create a store with a pooled client for the given Redis URL."""
        import redis.asyncio as aioredis

        client = aioredis.from_url(url, encoding="utf-8", decode_responses=True, max_connections=20)
        return cls(client, pending_ttl_seconds, terminal_ttl_seconds, key_prefix)

    def _key(self, session_id: str) -> str:
        return session_key(self._prefix, session_id)

    def _decode(self, key: str, raw: str | bytes | None) -> Session | None:
        if raw is None:
            return None
        try:
            return Session.model_validate_json(raw)
        except ValidationError as e:
            # A record we cannot parse is treated as absent
            _logger.error(
                {
                    "event": "session_record_corrupt",
                    "message": f"Discarding unparseable session record: {e.error_count()} errors",
                    "key_prefix": self._prefix,
                }
            )
            return None

    async def create(self, provider_session_id: str) -> str:
        session = Session(
            session_id=_new_session_id(),
            provider_session_id=provider_session_id,
            created_at=datetime.now(timezone.utc),
        )
        await self._client.set(
            self._key(session.session_id),
            session.model_dump_json(),
            ex=self.ttl_for(session),
        )
        return session.session_id

    async def get(self, session_id: str) -> Session | None:
        key = self._key(session_id)
        raw = await self._client.get(key)
        return self._decode(key, raw)

    async def update(self, session_id: str, fields: dict[str, Any]) -> None:
        key = self._key(session_id)
        existing = self._decode(key, await self._client.get(key))
        if existing is None:
            return
        updated = _merge(existing, fields)
        await self._client.set(key, updated.model_dump_json(), ex=self.ttl_for(updated))

    async def transition(
        self,
        session_id: str,
        expected: SessionStatus,
        fields: dict[str, Any],
    ) -> bool:
        from redis.exceptions import WatchError

        key = self._key(session_id)
        async with self._client.pipeline(transaction=True) as pipe:
            for _ in range(_MAX_WATCH_RETRIES):
                try:
                    await pipe.watch(key)
                    existing = self._decode(key, await pipe.get(key))
                    if existing is None or existing.status is not expected:
                        await pipe.unwatch()
                        return False
                    updated = _merge(existing, fields)
                    pipe.multi()
                    pipe.set(key, updated.model_dump_json(), ex=self.ttl_for(updated))
                    await pipe.execute()
                    return True
                except WatchError:
                    # Another writer touched the key - re-read and re-check
                    continue
        _logger.warning(
            {
                "event": "session_transition_contended",
                "message": "Gave up on conditional session write after repeated contention",
                "retries": _MAX_WATCH_RETRIES,
            }
        )
        return False

    async def close(self) -> None:
        await self._client.aclose()


def create_session_store(config: "AppConfig") -> SessionStore:
    """Create the configured session store.

    Args:
        config: Application configuration.

    Returns:
        RedisSessionStore when store.redis_url is set, MemorySessionStore otherwise.
    """
    pending_ttl = config.store.pending_ttl_seconds
    terminal_ttl = config.terminal_ttl_seconds

    if config.store.redis_url:
        return RedisSessionStore.from_url(
            config.store.redis_url,
            pending_ttl,
            terminal_ttl,
            key_prefix=config.store.key_prefix,
        )

    _logger.warning(
        {
            "event": "memory_session_store",
            "message": "REDIS_URL not set - using in-memory session store (single instance only, not durable)",
        }
    )
    return MemorySessionStore(pending_ttl, terminal_ttl)
