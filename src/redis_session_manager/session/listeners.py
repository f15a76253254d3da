"""Session lifecycle listeners.

Classes
-------
- SessionListener  — base class with no-op lifecycle hooks
- ListenerBus      — thread-safe registry that dispatches to listeners
"""
from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from redis_session_manager.session.record import Session


class SessionListener:
    """Observer of session lifecycle events.

    Subclass and override the hooks you care about; the defaults do
    nothing.  Hooks run synchronously on the thread performing the session
    operation.  Notifications are advisory: attribute writes are not atomic
    against concurrent writers, so under contention an update may be
    reported as an addition.
    """

    def session_created(self, session: Session, context: Any) -> None:
        pass

    def attribute_added(self, session: Session, name: str, value: str) -> None:
        pass

    def attribute_updated(
        self, session: Session, name: str, new_value: str, old_value: str
    ) -> None:
        pass

    def attribute_removed(self, session: Session, name: str, old_value: str) -> None:
        pass

    def session_id_changed(self, session: Session, old_session_id: str) -> None:
        pass


class ListenerBus:
    """Registry of :class:`SessionListener` objects.

    Registration and removal are serialized by a lock.  The listener
    collection is replaced rather than mutated, so dispatch iterates a
    snapshot without taking the lock and a listener may (de)register
    listeners from inside a callback.  Listeners are called in
    registration order; an exception raised by a listener propagates to the
    caller and skips the remaining listeners.
    """

    def __init__(self) -> None:
        self._listeners: tuple[SessionListener, ...] = ()
        self._lock = threading.Lock()

    def add(self, listener: SessionListener) -> None:
        with self._lock:
            self._listeners = (*self._listeners, listener)

    def remove(self, listener: SessionListener) -> None:
        """Unregister ``listener``.  Unknown listeners are ignored."""
        with self._lock:
            self._listeners = tuple(
                registered for registered in self._listeners if registered is not listener
            )

    @property
    def listeners(self) -> tuple[SessionListener, ...]:
        return self._listeners

    def __len__(self) -> int:
        return len(self._listeners)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def session_created(self, session: Session, context: Any) -> None:
        for listener in self._listeners:
            listener.session_created(session, context)

    def attribute_added(self, session: Session, name: str, value: str) -> None:
        for listener in self._listeners:
            listener.attribute_added(session, name, value)

    def attribute_updated(
        self, session: Session, name: str, new_value: str, old_value: str
    ) -> None:
        for listener in self._listeners:
            listener.attribute_updated(session, name, new_value, old_value)

    def attribute_removed(self, session: Session, name: str, old_value: str) -> None:
        for listener in self._listeners:
            listener.attribute_removed(session, name, old_value)

    def session_id_changed(self, session: Session, old_session_id: str) -> None:
        for listener in self._listeners:
            listener.session_id_changed(session, old_session_id)
