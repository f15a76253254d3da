"""Store client subpackage.

All clients implement the ``StoreClient`` ABC.

Public surface
--------------
- StoreClient          — abstract base class
- StoreBatch           — queued write commands for atomic execution
- StoreCommand         — a single queued command
- RedisStoreClient     — redis-py backed client
- InMemoryStoreClient  — in-process emulation (useful for testing)
"""
from __future__ import annotations

from redis_session_manager.storage.base import StoreBatch, StoreClient, StoreCommand
from redis_session_manager.storage.memory import InMemoryStoreClient
from redis_session_manager.storage.redis import RedisStoreClient

__all__ = [
    "InMemoryStoreClient",
    "RedisStoreClient",
    "StoreBatch",
    "StoreClient",
    "StoreCommand",
]
