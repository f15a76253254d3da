"""redis-session-manager — server-side HTTP sessions stored in Redis.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import redis_session_manager
>>> redis_session_manager.__version__
'0.1.0'
"""
from __future__ import annotations

# Errors
from redis_session_manager.errors import (
    ConfigurationError,
    IdAllocationExhausted,
    SessionStoreError,
    StoreError,
)

# Settings
from redis_session_manager.config import SessionManagerSettings

# Session core
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

# Store clients
from redis_session_manager.storage.base import StoreBatch, StoreClient, StoreCommand
from redis_session_manager.storage.memory import InMemoryStoreClient
from redis_session_manager.storage.redis import RedisStoreClient

# Middleware
from redis_session_manager.middleware.session_middleware import SessionMiddleware

__version__: str = "0.1.0"

__all__ = [
    "__version__",
    # Errors
    "ConfigurationError",
    "IdAllocationExhausted",
    "SessionStoreError",
    "StoreError",
    # Settings
    "SessionManagerSettings",
    # Session core
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
    # Store clients
    "InMemoryStoreClient",
    "RedisStoreClient",
    "StoreBatch",
    "StoreClient",
    "StoreCommand",
    # Middleware
    "SessionMiddleware",
]
