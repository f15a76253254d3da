"""In-memory store client.

Emulates the Redis semantics the session manager depends on inside a
plain Python dict.  All data is lost when the process exits.  This client
is primarily useful for tests and local prototyping.

Classes
-------
- InMemoryStoreClient  — dict-backed store with TTL emulation
"""
from __future__ import annotations

import fnmatch
import math
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from redis_session_manager.errors import StoreError
from redis_session_manager.storage.base import StoreClient, StoreCommand


@dataclass
class _Entry:
    value: str | dict[str, str]
    expires_at: float | None = None


class InMemoryStoreClient(StoreClient):
    """Ephemeral, in-process store with Redis-like key semantics.

    - keys expire lazily once the clock passes their deadline
    - a hash whose last field is deleted disappears
    - ``rename`` keeps the TTL and fails on a missing source key
    - ``set`` clears any TTL on the key

    Parameters
    ----------
    clock:
        Zero-argument callable returning the current time in seconds.
        Defaults to ``time.time``; tests pass a controllable clock.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._data: dict[str, _Entry] = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _entry(self, key: str) -> _Entry | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        if entry.expires_at is not None and entry.expires_at <= self._clock():
            del self._data[key]
            return None
        return entry

    def _hash(self, key: str) -> dict[str, str] | None:
        entry = self._entry(key)
        if entry is None:
            return None
        if not isinstance(entry.value, dict):
            raise StoreError(f"Key {key!r} holds a string, not a hash.")
        return entry.value

    def _remaining_seconds(self, key: str) -> float | None:
        entry = self._entry(key)
        if entry is None or entry.expires_at is None:
            return None
        return entry.expires_at - self._clock()

    def _apply(self, command: StoreCommand) -> None:
        handler = getattr(self, command.name)
        handler(*command.args)

    # ------------------------------------------------------------------
    # StoreClient interface
    # ------------------------------------------------------------------

    def exists(self, key: str) -> bool:
        with self._lock:
            return self._entry(key) is not None

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._entry(key)
            if entry is None:
                return None
            if isinstance(entry.value, dict):
                raise StoreError(f"Key {key!r} holds a hash, not a string.")
            return entry.value

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = _Entry(value=str(value))

    def ttl(self, key: str) -> int | None:
        with self._lock:
            remaining = self._remaining_seconds(key)
            return None if remaining is None else int(round(remaining))

    def pttl(self, key: str) -> int | None:
        with self._lock:
            remaining = self._remaining_seconds(key)
            return None if remaining is None else int(math.floor(remaining * 1000))

    def expire(self, key: str, seconds: int) -> bool:
        with self._lock:
            entry = self._entry(key)
            if entry is None:
                return False
            if seconds <= 0:
                del self._data[key]
                return True
            entry.expires_at = self._clock() + seconds
            return True

    def persist(self, key: str) -> bool:
        with self._lock:
            entry = self._entry(key)
            if entry is None or entry.expires_at is None:
                return False
            entry.expires_at = None
            return True

    def hget(self, key: str, field: str) -> str | None:
        with self._lock:
            fields = self._hash(key)
            return None if fields is None else fields.get(field)

    def hset(self, key: str, field: str, value: str) -> None:
        with self._lock:
            fields = self._hash(key)
            if fields is None:
                self._data[key] = _Entry(value={field: str(value)})
            else:
                fields[field] = str(value)

    def hdel(self, key: str, field: str) -> None:
        with self._lock:
            fields = self._hash(key)
            if fields is None:
                return
            fields.pop(field, None)
            if not fields:
                del self._data[key]

    def hkeys(self, key: str) -> set[str]:
        with self._lock:
            fields = self._hash(key)
            return set() if fields is None else set(fields)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def rename(self, old_key: str, new_key: str) -> None:
        with self._lock:
            entry = self._entry(old_key)
            if entry is None:
                raise StoreError(f"Cannot rename {old_key!r}: no such key.")
            del self._data[old_key]
            self._data[new_key] = entry

    def keys(self, pattern: str = "*") -> set[str]:
        with self._lock:
            return {
                key
                for key in list(self._data)
                if self._entry(key) is not None and fnmatch.fnmatchcase(key, pattern)
            }

    def execute_batch(self, commands: Sequence[StoreCommand]) -> None:
        """Apply ``commands`` under one lock acquisition.

        Renames are checked up front so a batch that would fail part way
        leaves the store untouched.
        """
        with self._lock:
            present = {key for key in list(self._data) if self._entry(key) is not None}
            for command in commands:
                if command.name == "rename":
                    old_key, new_key = command.keys
                    if old_key not in present:
                        raise StoreError(f"Cannot rename {old_key!r}: no such key.")
                    present.discard(old_key)
                    present.add(new_key)
                elif command.name == "set":
                    present.add(command.keys[0])
                elif command.name == "delete":
                    present.discard(command.keys[0])
            for command in commands:
                self._apply(command)

    # ------------------------------------------------------------------
    # Extras
    # ------------------------------------------------------------------

    def clear(self) -> None:
        """Remove every key."""
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for key in list(self._data) if self._entry(key) is not None)

    def __repr__(self) -> str:
        return f"InMemoryStoreClient(keys={len(self)})"
