"""Abstract key-value store client used by the session core.

The command set mirrors the small subset of Redis the session manager
needs: plain string keys, hashes, TTL control, renames, pattern
enumeration and all-or-nothing batches of write commands.

Classes
-------
- StoreCommand  — one queued write command
- StoreBatch    — builder collecting commands for atomic execution
- StoreClient   — abstract base for all store clients
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass

# Number of leading arguments that are keys, per batchable command.
BATCH_COMMANDS: dict[str, int] = {
    "set": 1,
    "expire": 1,
    "persist": 1,
    "delete": 1,
    "rename": 2,
}


@dataclass(frozen=True)
class StoreCommand:
    """A single write command queued in a :class:`StoreBatch`."""

    name: str
    args: tuple[str | int, ...]

    def __post_init__(self) -> None:
        if self.name not in BATCH_COMMANDS:
            raise ValueError(f"Command {self.name!r} cannot be batched.")

    @property
    def keys(self) -> tuple[str, ...]:
        """The key arguments of this command."""
        return tuple(str(arg) for arg in self.args[: BATCH_COMMANDS[self.name]])


class StoreBatch:
    """Collects write commands to be executed as one atomic unit.

    Methods return the batch so calls can be chained.
    """

    def __init__(self) -> None:
        self._commands: list[StoreCommand] = []

    @property
    def commands(self) -> tuple[StoreCommand, ...]:
        return tuple(self._commands)

    def set(self, key: str, value: str) -> StoreBatch:
        self._commands.append(StoreCommand("set", (key, value)))
        return self

    def expire(self, key: str, seconds: int) -> StoreBatch:
        self._commands.append(StoreCommand("expire", (key, int(seconds))))
        return self

    def persist(self, key: str) -> StoreBatch:
        self._commands.append(StoreCommand("persist", (key,)))
        return self

    def delete(self, key: str) -> StoreBatch:
        self._commands.append(StoreCommand("delete", (key,)))
        return self

    def rename(self, old_key: str, new_key: str) -> StoreBatch:
        self._commands.append(StoreCommand("rename", (old_key, new_key)))
        return self

    def __len__(self) -> int:
        return len(self._commands)


class StoreClient(ABC):
    """Minimal key-value interface consumed by the session manager.

    ``ttl`` and ``pttl`` return ``None`` both when the key does not exist
    and when it exists without an expiry.  Every failure to reach or use
    the store surfaces as
    :class:`~redis_session_manager.errors.StoreError`.
    """

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Return True if ``key`` exists."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the string stored at ``key`` or None."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` at ``key``, clearing any previous TTL."""

    @abstractmethod
    def ttl(self, key: str) -> int | None:
        """Return the remaining time to live of ``key`` in seconds."""

    @abstractmethod
    def pttl(self, key: str) -> int | None:
        """Return the remaining time to live of ``key`` in milliseconds."""

    @abstractmethod
    def expire(self, key: str, seconds: int) -> bool:
        """Set a TTL on ``key``.  Returns False if the key does not exist."""

    @abstractmethod
    def persist(self, key: str) -> bool:
        """Remove the TTL from ``key``.  Returns True if a TTL was removed."""

    @abstractmethod
    def hget(self, key: str, field: str) -> str | None:
        """Return ``field`` of the hash at ``key`` or None."""

    @abstractmethod
    def hset(self, key: str, field: str, value: str) -> None:
        """Set ``field`` of the hash at ``key``, creating the hash if needed."""

    @abstractmethod
    def hdel(self, key: str, field: str) -> None:
        """Delete ``field`` from the hash at ``key``.

        A hash left without fields ceases to exist.
        """

    @abstractmethod
    def hkeys(self, key: str) -> set[str]:
        """Return the field names of the hash at ``key``."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete ``key`` if it exists."""

    @abstractmethod
    def rename(self, old_key: str, new_key: str) -> None:
        """Rename ``old_key`` to ``new_key``, keeping its TTL.

        Raises
        ------
        StoreError
            If ``old_key`` does not exist.
        """

    @abstractmethod
    def keys(self, pattern: str = "*") -> set[str]:
        """Return all keys matching the glob-style ``pattern``.

        This walks the whole key space and is meant for administrative
        use, not for the request path.
        """

    @abstractmethod
    def execute_batch(self, commands: Sequence[StoreCommand]) -> None:
        """Execute ``commands`` as one transaction.

        No other client sees a partial batch.  A command that fails at run
        time (for example ``rename`` of a key that has just expired) may not
        undo the commands before it, as with Redis ``EXEC``; the failure is
        raised as :class:`StoreError`.
        """

    @contextmanager
    def batch(self) -> Iterator[StoreBatch]:
        """Queue commands inside a ``with`` block and execute them on exit.

        Nothing is sent to the store if the block raises.

        Example
        -------
        ::

            with client.batch() as batch:
                batch.expire("abc", 60).expire("abc:created", 60)
        """
        pending = StoreBatch()
        yield pending
        if len(pending):
            self.execute_batch(pending.commands)
