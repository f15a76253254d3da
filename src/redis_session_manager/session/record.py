"""Per-session handle.

A ``Session`` is a thin, short-lived view over two store records:

- the attribute hash, keyed by the session id
- the metadata string ``<session id>:created`` holding the creation time

Nothing but the id, the creation time and the max inactive interval is
held in memory; every attribute operation goes straight to the store and
refreshes the TTL of both records in one atomic batch.

Classes
-------
- Session  — attribute CRUD, TTL refresh, invalidation and id rotation
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from redis_session_manager.session.attributes import AttributeValue, encode_attribute
from redis_session_manager.session.config import RequestContext, SessionConfig
from redis_session_manager.storage.base import StoreClient

if TYPE_CHECKING:
    from redis_session_manager.session.manager import SessionManager

logger = logging.getLogger(__name__)

CREATED_SUFFIX = ":created"


def metadata_key(session_id: str) -> str:
    """Return the key of the creation-time record for ``session_id``."""
    return f"{session_id}{CREATED_SUFFIX}"


class Session:
    """Handle on one live session.

    Instances are created by :class:`SessionManager`; do not construct
    them directly.

    Parameters
    ----------
    session_id:
        Current session id.
    creation_time:
        Creation time in milliseconds since the epoch.
    max_inactive_interval:
        Seconds of inactivity after which the store expires the session.
        Zero or negative means the session never expires.
    session_config:
        Config used to clear the outbound id on invalidation.
    manager:
        The owning manager (store, listeners and id allocation).
    """

    def __init__(
        self,
        session_id: str,
        creation_time: int,
        max_inactive_interval: int,
        session_config: SessionConfig | None,
        manager: SessionManager,
    ) -> None:
        self._session_id = session_id
        self._creation_time = creation_time
        self._max_inactive_interval = max_inactive_interval
        self._session_config = session_config
        self._manager = manager

    # ------------------------------------------------------------------
    # Identity and timing
    # ------------------------------------------------------------------

    @property
    def id(self) -> str:
        return self._session_id

    @property
    def creation_time(self) -> int:
        """Creation time in milliseconds since the epoch."""
        return self._creation_time

    @property
    def last_accessed_time(self) -> int:
        """Approximate last access time in milliseconds since the epoch.

        Not stored anywhere: it is derived from how much of the TTL has
        elapsed, ``now - (max_inactive_interval - remaining_ttl)``.  This is
        only accurate while every access refreshes the TTL, which all
        attribute operations do.  Falls back to :attr:`creation_time` when
        neither record has a TTL (expired session or no expiry).
        """
        remaining = self._store.pttl(self._session_id)
        if remaining is None:
            # No attributes yet; the creation record carries the same TTL.
            remaining = self._store.pttl(metadata_key(self._session_id))
        if remaining is None:
            return self._creation_time
        elapsed = self._max_inactive_interval * 1000 - remaining
        return self._manager.now_millis() - elapsed

    @property
    def max_inactive_interval(self) -> int:
        return self._max_inactive_interval

    def set_max_inactive_interval(self, seconds: int) -> None:
        """Change the inactivity timeout and apply it to the store at once."""
        self._max_inactive_interval = int(seconds)
        self._bump_timeout()

    @property
    def session_manager(self) -> SessionManager:
        return self._manager

    # ------------------------------------------------------------------
    # Attributes
    # ------------------------------------------------------------------

    def get_attribute(self, name: str) -> str | None:
        """Return the stored string for ``name``.  Counts as activity."""
        self._bump_timeout()
        return self._store.hget(self._session_id, name)

    def get_attribute_names(self) -> set[str]:
        """Return the names of all attributes.  Counts as activity."""
        self._bump_timeout()
        return self._store.hkeys(self._session_id)

    def set_attribute(
        self, name: str, value: AttributeValue | None
    ) -> AttributeValue | None:
        """Store ``value`` under ``name`` and return it.

        Setting ``None`` removes the attribute.  Listeners receive
        ``attribute_added`` or ``attribute_updated`` depending on whether a
        value was present.  The read of the prior value and the write are
        separate store commands, so a concurrent writer can make the
        classification wrong.

        Raises
        ------
        TypeError
            If ``value`` is not a supported attribute type.
        """
        if value is None:
            self.remove_attribute(name)
            return None
        encoded = encode_attribute(value)
        existing = self._store.hget(self._session_id, name)
        self._store.hset(self._session_id, name, encoded)
        listeners = self._manager.listeners
        if existing is None:
            listeners.attribute_added(self, name, encoded)
        else:
            listeners.attribute_updated(self, name, encoded, existing)
        self._bump_timeout()
        return value

    def remove_attribute(self, name: str) -> str | None:
        """Delete ``name`` and return its previous value, if any.

        ``attribute_removed`` is only dispatched when a value was present.
        """
        existing = self._store.hget(self._session_id, name)
        self._store.hdel(self._session_id, name)
        if existing is not None:
            self._manager.listeners.attribute_removed(self, name, existing)
        self._bump_timeout()
        return existing

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def invalidate(self, context: RequestContext | None = None) -> None:
        """Delete both session records in one atomic batch.

        When ``context`` is given the outbound session id is cleared and
        the session is detached from the request.
        """
        with self._store.batch() as batch:
            batch.delete(self._session_id).delete(metadata_key(self._session_id))
        logger.debug("Session: invalidated %r", self._session_id)

        if context is not None:
            if self._session_config is not None:
                self._session_config.clear_session(context, self._session_id)
            self._manager.detach(context, self)

    def change_session_id(
        self,
        context: RequestContext | None,
        session_config: SessionConfig | None = None,
    ) -> str:
        """Move the session to a freshly allocated id and return it.

        The new id is checked for collisions like a newly created one.
        Both records are renamed in one batch; renames keep the TTL, so the
        pair stays in step.  The TTL is refreshed first so that neither
        record can expire between the existence check and the renames.
        Redis does not roll back a transaction whose commands fail at run
        time, so if a rename still fails the records may be left split and
        :class:`StoreError` is raised with the session keeping its old id.
        """
        old_id = self._session_id
        new_id = self._manager.allocate_session_id()
        self._bump_timeout()
        keys = [
            (old_id, new_id),
            (metadata_key(old_id), metadata_key(new_id)),
        ]
        # An attribute hash without fields does not exist and cannot be renamed.
        present = [(old, new) for old, new in keys if self._store.exists(old)]
        with self._store.batch() as batch:
            for old_key, new_key in present:
                batch.rename(old_key, new_key)
        self._session_id = new_id

        config = session_config or self._session_config
        if config is not None:
            config.set_session_id(context, new_id)
        self._manager.listeners.session_id_changed(self, old_id)
        logger.debug("Session: changed id %r -> %r", old_id, new_id)
        return new_id

    def request_done(self, context: RequestContext | None) -> None:
        """End-of-request hook.  Nothing is buffered, so nothing is flushed."""
        logger.debug("Session: request done for %r", self._session_id)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @property
    def _store(self) -> StoreClient:
        return self._manager.store

    def _bump_timeout(self) -> None:
        interval = self._max_inactive_interval
        with self._store.batch() as batch:
            for key in (self._session_id, metadata_key(self._session_id)):
                if interval > 0:
                    batch.expire(key, interval)
                else:
                    batch.persist(key)

    def __repr__(self) -> str:
        return (
            f"Session(id={self._session_id!r}, "
            f"max_inactive_interval={self._max_inactive_interval!r})"
        )
