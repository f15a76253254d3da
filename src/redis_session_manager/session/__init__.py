"""Session management subpackage.

Provides the session registry, the per-session handle and the
collaborators they rely on.

Public surface
--------------
- SessionManager                  — create / look up / enumerate sessions
- Session                         — attribute CRUD, invalidation, id rotation
- SessionListener                 — lifecycle observer base class
- ListenerBus                     — thread-safe listener registry
- SessionIdGenerator              — abstract id source
- SecureRandomSessionIdGenerator  — default CSPRNG id source
- SessionConfig                   — web-layer id extraction and injection
- CookieSessionConfig             — cookie-carried session ids
- RequestContext                  — per-request state
"""
from __future__ import annotations

from redis_session_manager.session.attributes import AttributeValue, encode_attribute
from redis_session_manager.session.config import (
    CookieSessionConfig,
    RequestContext,
    SessionConfig,
)
from redis_session_manager.session.ids import (
    SecureRandomSessionIdGenerator,
    SessionIdGenerator,
)
from redis_session_manager.session.listeners import ListenerBus, SessionListener
from redis_session_manager.session.manager import SessionManager
from redis_session_manager.session.record import Session

__all__ = [
    "AttributeValue",
    "CookieSessionConfig",
    "ListenerBus",
    "RequestContext",
    "SecureRandomSessionIdGenerator",
    "Session",
    "SessionConfig",
    "SessionIdGenerator",
    "SessionListener",
    "SessionManager",
    "encode_attribute",
]
