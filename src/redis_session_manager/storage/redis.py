"""Redis store client.

Classes
-------
- RedisStoreClient  — :class:`StoreClient` backed by redis-py
"""
from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

import redis
from redis.exceptions import RedisError

from redis_session_manager.errors import StoreError
from redis_session_manager.storage.base import BATCH_COMMANDS, StoreClient, StoreCommand

logger = logging.getLogger(__name__)

_GLOB_SPECIALS = re.compile(r"([*?\[\]\\])")


def _text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


def _remaining(value: Any) -> int | None:
    # Redis answers -2 for a missing key and -1 for a key without expiry.
    if value is None:
        return None
    remaining = int(value)
    return remaining if remaining >= 0 else None


class RedisStoreClient(StoreClient):
    """Talks to a Redis server through redis-py.

    Every key is stored as ``<key_prefix><key>``; ``keys()`` strips the
    prefix again so callers only ever see their own key names.

    Parameters
    ----------
    url:
        Redis connection URL (e.g. ``"redis://localhost:6379/0"``).  When
        supplied, overrides host/port/db/password.
    host:
        Redis server hostname. Defaults to ``"localhost"``.
    port:
        Redis server port. Defaults to ``6379``.
    db:
        Redis logical database index. Defaults to ``0``.
    password:
        Optional authentication password.
    key_prefix:
        String prepended to all keys.  Defaults to ``""`` (no namespace).
    client:
        An already configured ``redis.Redis`` instance.  Overrides every
        connection parameter.
    scan_count:
        ``COUNT`` hint for each ``SCAN`` round trip in :meth:`keys`.
    """

    def __init__(
        self,
        url: str | None = None,
        *,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        password: str | None = None,
        key_prefix: str = "",
        client: Any = None,
        scan_count: int = 100,
    ) -> None:
        if client is not None:
            self._client = client
        elif url is not None:
            self._client = redis.Redis.from_url(url, decode_responses=True)
        else:
            self._client = redis.Redis(
                host=host,
                port=port,
                db=db,
                password=password,
                decode_responses=True,
            )
        self._key_prefix = key_prefix
        self._scan_count = scan_count

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    @contextmanager
    def _translate(self, command: str) -> Iterator[None]:
        try:
            yield
        except RedisError as exc:
            raise StoreError(f"Redis {command} failed: {exc}") from exc

    # ------------------------------------------------------------------
    # StoreClient interface
    # ------------------------------------------------------------------

    def exists(self, key: str) -> bool:
        with self._translate("EXISTS"):
            return bool(self._client.exists(self._key(key)))

    def get(self, key: str) -> str | None:
        with self._translate("GET"):
            return _text(self._client.get(self._key(key)))

    def set(self, key: str, value: str) -> None:
        with self._translate("SET"):
            self._client.set(self._key(key), value)

    def ttl(self, key: str) -> int | None:
        with self._translate("TTL"):
            return _remaining(self._client.ttl(self._key(key)))

    def pttl(self, key: str) -> int | None:
        with self._translate("PTTL"):
            return _remaining(self._client.pttl(self._key(key)))

    def expire(self, key: str, seconds: int) -> bool:
        with self._translate("EXPIRE"):
            return bool(self._client.expire(self._key(key), seconds))

    def persist(self, key: str) -> bool:
        with self._translate("PERSIST"):
            return bool(self._client.persist(self._key(key)))

    def hget(self, key: str, field: str) -> str | None:
        with self._translate("HGET"):
            return _text(self._client.hget(self._key(key), field))

    def hset(self, key: str, field: str, value: str) -> None:
        with self._translate("HSET"):
            self._client.hset(self._key(key), field, value)

    def hdel(self, key: str, field: str) -> None:
        with self._translate("HDEL"):
            self._client.hdel(self._key(key), field)

    def hkeys(self, key: str) -> set[str]:
        with self._translate("HKEYS"):
            return {str(_text(name)) for name in self._client.hkeys(self._key(key))}

    def delete(self, key: str) -> None:
        with self._translate("DEL"):
            self._client.delete(self._key(key))

    def rename(self, old_key: str, new_key: str) -> None:
        with self._translate("RENAME"):
            self._client.rename(self._key(old_key), self._key(new_key))

    def keys(self, pattern: str = "*") -> set[str]:
        """Return keys matching ``pattern`` using ``SCAN``.

        ``SCAN`` does not block the server the way ``KEYS`` does, but it
        still visits every key in the database.
        """
        prefix_len = len(self._key_prefix)
        match = _GLOB_SPECIALS.sub(r"\\\1", self._key_prefix) + pattern
        found: set[str] = set()
        cursor: int = 0
        with self._translate("SCAN"):
            while True:
                cursor, batch = self._client.scan(
                    cursor=cursor, match=match, count=self._scan_count
                )
                for key in batch:
                    found.add(str(_text(key))[prefix_len:])
                if cursor == 0:
                    break
        return found

    def execute_batch(self, commands: Sequence[StoreCommand]) -> None:
        """Send ``commands`` in one ``MULTI``/``EXEC`` transaction."""
        if not commands:
            return
        with self._translate("EXEC"):
            pipe = self._client.pipeline(transaction=True)
            for command in commands:
                key_count = BATCH_COMMANDS[command.name]
                args = [self._key(str(arg)) for arg in command.args[:key_count]]
                args.extend(command.args[key_count:])
                getattr(pipe, command.name)(*args)
            pipe.execute()
        logger.debug("RedisStoreClient: executed batch of %d commands", len(commands))

    def __repr__(self) -> str:
        return f"RedisStoreClient(key_prefix={self._key_prefix!r})"
