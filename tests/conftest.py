"""Shared fixtures for the redis-session-manager test suite."""
from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any

import pytest

from redis_session_manager.session.config import CookieSessionConfig, RequestContext
from redis_session_manager.session.ids import SessionIdGenerator
from redis_session_manager.session.listeners import SessionListener
from redis_session_manager.session.manager import SessionManager
from redis_session_manager.storage.memory import InMemoryStoreClient

START_TIME = 1_700_000_000.0
TIMEOUT = 600


class FakeClock:
    """Controllable replacement for ``time.time``."""

    def __init__(self, start: float = START_TIME) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class SequenceIdGenerator(SessionIdGenerator):
    """Hands out ids from a fixed sequence, repeating the last one forever."""

    def __init__(self, ids: Iterable[str]) -> None:
        self._ids: Iterator[str] = iter(ids)
        self._last = ""
        self.calls = 0

    def create_session_id(self) -> str:
        self.calls += 1
        self._last = next(self._ids, self._last)
        return self._last


class RecordingListener(SessionListener):
    """Collects every event as a tuple for later assertions."""

    def __init__(self) -> None:
        self.events: list[tuple[Any, ...]] = []

    def session_created(self, session: Any, context: Any) -> None:
        self.events.append(("created", session.id))

    def attribute_added(self, session: Any, name: str, value: str) -> None:
        self.events.append(("added", name, value))

    def attribute_updated(self, session: Any, name: str, new_value: str, old_value: str) -> None:
        self.events.append(("updated", name, new_value, old_value))

    def attribute_removed(self, session: Any, name: str, old_value: str) -> None:
        self.events.append(("removed", name, old_value))

    def session_id_changed(self, session: Any, old_session_id: str) -> None:
        self.events.append(("id_changed", old_session_id, session.id))


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(clock: FakeClock) -> InMemoryStoreClient:
    return InMemoryStoreClient(clock=clock)


@pytest.fixture()
def session_config() -> CookieSessionConfig:
    return CookieSessionConfig("session")


@pytest.fixture()
def manager(
    store: InMemoryStoreClient,
    session_config: CookieSessionConfig,
    clock: FakeClock,
) -> SessionManager:
    return SessionManager(
        store,
        session_config,
        default_session_timeout=TIMEOUT,
        clock=clock,
    )


@pytest.fixture()
def context() -> RequestContext:
    return RequestContext()


@pytest.fixture()
def listener(manager: SessionManager) -> RecordingListener:
    recorder = RecordingListener()
    manager.register_listener(recorder)
    return recorder
