"""Session lifecycle management.

Provides ``SessionManager``, which allocates session ids, creates and
looks up sessions in the backing store, enumerates them, and owns the
listener registry and the default inactivity timeout.

Classes
-------
- SessionManager  — registry of sessions stored in a ``StoreClient``
"""
from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from redis_session_manager.errors import ConfigurationError, IdAllocationExhausted
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
from redis_session_manager.session.record import CREATED_SUFFIX, Session, metadata_key
from redis_session_manager.storage.base import StoreClient
from redis_session_manager.storage.redis import RedisStoreClient

if TYPE_CHECKING:
    from redis_session_manager.config import SessionManagerSettings

logger = logging.getLogger(__name__)

DEFAULT_DEPLOYMENT_NAME = "SESSION_MANAGER"
DEFAULT_SESSION_TIMEOUT = 30 * 60
MAX_ID_ATTEMPTS = 100

# Request attachment holding the session created during the request.
NEW_SESSION_ATTACHMENT = "redis_session_manager.new_session"


class SessionManager:
    """Create, look up and enumerate sessions kept in a key-value store.

    The store is the only source of truth: sessions are rebuilt from it on
    every lookup and no session content is cached in the process.

    Parameters
    ----------
    store:
        The store client holding session records.
    session_config:
        Config attached to sessions looked up by id alone.
    id_generator:
        Source of candidate ids.  Defaults to
        :class:`SecureRandomSessionIdGenerator`.
    deployment_name:
        Name of the deployment this manager serves.
    default_session_timeout:
        Inactivity timeout in seconds applied to newly created sessions.
    clock:
        Zero-argument callable returning the current time in seconds.
    """

    def __init__(
        self,
        store: StoreClient,
        session_config: SessionConfig | None = None,
        *,
        id_generator: SessionIdGenerator | None = None,
        deployment_name: str = DEFAULT_DEPLOYMENT_NAME,
        default_session_timeout: int = DEFAULT_SESSION_TIMEOUT,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._session_config = session_config
        self._id_generator = id_generator or SecureRandomSessionIdGenerator()
        self._deployment_name = deployment_name
        self._default_session_timeout = int(default_session_timeout)
        self._clock = clock
        self._listeners = ListenerBus()
        self._start_time: int | None = None

    @classmethod
    def from_settings(
        cls,
        settings: SessionManagerSettings,
        store: StoreClient | None = None,
    ) -> SessionManager:
        """Build a manager, and unless given one a Redis client, from settings."""

        if store is None:
            store = RedisStoreClient(settings.redis_url, key_prefix=settings.key_prefix)
        return cls(
            store,
            CookieSessionConfig(settings.cookie_name),
            id_generator=SecureRandomSessionIdGenerator(settings.session_id_length),
            deployment_name=settings.deployment_name,
            default_session_timeout=settings.default_session_timeout,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def store(self) -> StoreClient:
        return self._store

    @property
    def listeners(self) -> ListenerBus:
        return self._listeners

    @property
    def deployment_name(self) -> str:
        return self._deployment_name

    @property
    def start_time(self) -> int | None:
        """Milliseconds since the epoch at which :meth:`start` was called."""
        return self._start_time

    @property
    def default_session_timeout(self) -> int:
        return self._default_session_timeout

    def set_default_session_timeout(self, seconds: int) -> None:
        """Change the timeout given to sessions created from now on.

        Existing sessions keep their current timeout.
        """
        self._default_session_timeout = int(seconds)

    def now_millis(self) -> int:
        return int(self._clock() * 1000)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        self._start_time = self.now_millis()
        logger.debug("SessionManager %r: started", self._deployment_name)

    def stop(self) -> None:
        logger.debug("SessionManager %r: stopped", self._deployment_name)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def register_listener(self, listener: SessionListener) -> None:
        self._listeners.add(listener)

    def remove_listener(self, listener: SessionListener) -> None:
        self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Creation and lookup
    # ------------------------------------------------------------------

    def allocate_session_id(self) -> str:
        """Return a generated id not used by any live session.

        Raises
        ------
        IdAllocationExhausted
            If :data:`MAX_ID_ATTEMPTS` candidates in a row were taken.
        """
        for _ in range(MAX_ID_ATTEMPTS):
            candidate = self._id_generator.create_session_id()
            if not self._store.exists(candidate):
                return candidate
            logger.debug("SessionManager: session id collision, retrying")
        logger.warning(
            "SessionManager: no unique session id after %d attempts", MAX_ID_ATTEMPTS
        )
        raise IdAllocationExhausted(MAX_ID_ATTEMPTS)

    def create_session(
        self,
        context: RequestContext | None,
        session_config: SessionConfig | None,
    ) -> Session:
        """Create a session, publish its id and return it.

        An id already carried by the request is reused as-is; otherwise a
        fresh id is allocated.  The creation record and the TTL of both
        session records are written in one atomic batch.

        Raises
        ------
        ConfigurationError
            If ``session_config`` is None.
        IdAllocationExhausted
            If no unused id could be generated.
        """
        if session_config is None:
            raise ConfigurationError("A session config is required to create a session.")

        session_id = session_config.find_session_id(context)
        if session_id is None:
            session_id = self.allocate_session_id()

        created = self.now_millis()
        timeout = self._default_session_timeout
        meta_key = metadata_key(session_id)
        with self._store.batch() as batch:
            batch.set(meta_key, str(created))
            for key in (session_id, meta_key):
                if timeout > 0:
                    batch.expire(key, timeout)
                else:
                    batch.persist(key)

        session = Session(session_id, created, timeout, session_config, self)
        session_config.set_session_id(context, session.id)
        self._listeners.session_created(session, context)
        if context is not None:
            context.attachments[NEW_SESSION_ATTACHMENT] = session
        logger.debug("SessionManager: created session %r", session_id)
        return session

    def get_session(
        self,
        context: RequestContext | None,
        session_config: SessionConfig,
    ) -> Session | None:
        """Return the request's session, or None.

        A session created earlier in the same request is returned as the
        same instance; otherwise the id found by ``session_config`` is
        looked up in the store.
        """
        if context is not None:
            created = context.attachments.get(NEW_SESSION_ATTACHMENT)
            if created is not None:
                return created
        return self.get_session_by_id(session_config.find_session_id(context))

    def get_session_by_id(self, session_id: str | None) -> Session | None:
        """Rebuild the session stored under ``session_id``, or return None.

        A session exists while its attribute record exists.  The returned
        session's max inactive interval is the live TTL of that record, or
        ``0`` (never expires) when the record has no TTL.
        """
        if session_id is None:
            return None
        if not self._store.exists(session_id):
            logger.debug("SessionManager: no session %r", session_id)
            return None

        raw_created = self._store.get(metadata_key(session_id))
        created = int(raw_created) if raw_created is not None else self.now_millis()
        ttl = self._store.ttl(session_id)
        # A persisted record keeps being persisted on every refresh.
        interval = ttl if ttl is not None else 0
        return Session(session_id, created, interval, self._session_config, self)

    def detach(self, context: RequestContext, session: Session) -> None:
        """Forget ``session`` as the session created during this request."""
        if context.attachments.get(NEW_SESSION_ATTACHMENT) is session:
            del context.attachments[NEW_SESSION_ATTACHMENT]

    def invalidate_by_id(self, session_id: str) -> bool:
        """Delete both records of ``session_id`` in one atomic batch.

        Unlike :meth:`get_session_by_id` this also reaches sessions that
        only have a creation record.  Returns False when neither record
        exists.
        """
        meta_key = metadata_key(session_id)
        if not (self._store.exists(session_id) or self._store.exists(meta_key)):
            return False
        with self._store.batch() as batch:
            batch.delete(session_id).delete(meta_key)
        logger.debug("SessionManager: invalidated session %r by id", session_id)
        return True

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    def all_sessions(self) -> set[str]:
        """Return the ids of every session in the store.

        Creation records are folded onto their session id, so each session
        is reported once, including sessions that have no attributes yet.
        This scans the entire key space; use it for administration and
        diagnostics, not on the request path.
        """
        session_ids: set[str] = set()
        for key in self._store.keys("*"):
            if key.endswith(CREATED_SUFFIX):
                key = key[: -len(CREATED_SUFFIX)]
            session_ids.add(key)
        return session_ids

    def active_sessions(self) -> set[str]:
        """Same as :meth:`all_sessions`: expiry is left to the store."""
        return self.all_sessions()

    def transient_sessions(self) -> set[str]:
        """Always empty: every session is durable in the store once created."""
        return set()

    def __repr__(self) -> str:
        return (
            f"SessionManager(deployment_name={self._deployment_name!r}, "
            f"store={self._store!r})"
        )
