"""Auth sessions: records, storage backends and the state machine.

- models: Session record and status enum
- store: SessionStore protocol with in-memory and Redis backends
- machine: AuthSessionMachine driving pending -> complete | failed
"""

from agentid.sessions.machine import (
    AuthSessionMachine,
    PollResult,
    StartResult,
    StatusResult,
)
from agentid.sessions.models import Session, SessionStatus, UserAttributes
from agentid.sessions.store import (
    MemorySessionStore,
    RedisSessionStore,
    SessionStore,
    create_session_store,
)

__all__ = [
    "AuthSessionMachine",
    "MemorySessionStore",
    "PollResult",
    "RedisSessionStore",
    "Session",
    "SessionStatus",
    "SessionStore",
    "StartResult",
    "StatusResult",
    "UserAttributes",
    "create_session_store",
]
