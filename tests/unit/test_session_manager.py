"""Unit tests for redis_session_manager.session.manager.

Tests cover session creation, id allocation, lookup, enumeration and
configuration of SessionManager, all against InMemoryStoreClient driven by
a fake clock.
"""
from __future__ import annotations

import pytest

from conftest import START_TIME, TIMEOUT, FakeClock, RecordingListener, SequenceIdGenerator
from redis_session_manager.config import SessionManagerSettings
from redis_session_manager.errors import (
    ConfigurationError,
    IdAllocationExhausted,
    SessionStoreError,
)
from redis_session_manager.session.config import CookieSessionConfig, RequestContext
from redis_session_manager.session.manager import (
    MAX_ID_ATTEMPTS,
    NEW_SESSION_ATTACHMENT,
    SessionManager,
)
from redis_session_manager.session.record import Session, metadata_key
from redis_session_manager.storage.memory import InMemoryStoreClient


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TestErrors:
    def test_exhausted_carries_attempts(self) -> None:
        err = IdAllocationExhausted(100)
        assert err.attempts == 100
        assert "100" in str(err)

    def test_hierarchy(self) -> None:
        assert issubclass(ConfigurationError, SessionStoreError)
        assert issubclass(IdAllocationExhausted, SessionStoreError)


# ---------------------------------------------------------------------------
# create_session
# ---------------------------------------------------------------------------


class TestSessionManagerCreate:
    def test_requires_session_config(
        self, manager: SessionManager, context: RequestContext
    ) -> None:
        with pytest.raises(ConfigurationError):
            manager.create_session(context, None)

    def test_returns_session(
        self,
        manager: SessionManager,
        context: RequestContext,
        session_config: CookieSessionConfig,
    ) -> None:
        session = manager.create_session(context, session_config)
        assert isinstance(session, Session)
        assert session.max_inactive_interval == TIMEOUT
        assert session.creation_time == int(START_TIME * 1000)

    def test_writes_creation_record_with_ttl(
        self,
        manager: SessionManager,
        store: InMemoryStoreClient,
        context: RequestContext,
        session_config: CookieSessionConfig,
    ) -> None:
        session = manager.create_session(context, session_config)
        assert store.get(f"{session.id}:created") == str(int(START_TIME * 1000))
        assert store.ttl(f"{session.id}:created") == TIMEOUT

    def test_publishes_id_to_response(
        self,
        manager: SessionManager,
        context: RequestContext,
        session_config: CookieSessionConfig,
    ) -> None:
        session = manager.create_session(context, session_config)
        assert context.response_cookies["session"] == session.id

    def test_reuses_id_carried_by_request(
        self,
        manager: SessionManager,
        session_config: CookieSessionConfig,
    ) -> None:
        context = RequestContext(cookies={"session": "given-id"})
        session = manager.create_session(context, session_config)
        assert session.id == "given-id"

    def test_attaches_session_to_request(
        self,
        manager: SessionManager,
        context: RequestContext,
        session_config: CookieSessionConfig,
    ) -> None:
        session = manager.create_session(context, session_config)
        assert context.attachments[NEW_SESSION_ATTACHMENT] is session

    def test_notifies_listeners(
        self,
        manager: SessionManager,
        listener: RecordingListener,
        context: RequestContext,
        session_config: CookieSessionConfig,
    ) -> None:
        session = manager.create_session(context, session_config)
        assert listener.events == [("created", session.id)]

    def test_without_context(
        self, manager: SessionManager, session_config: CookieSessionConfig
    ) -> None:
        session = manager.create_session(None, session_config)
        assert session.id

    def test_non_positive_timeout_never_expires(
        self,
        store: InMemoryStoreClient,
        session_config: CookieSessionConfig,
        clock: FakeClock,
    ) -> None:
        manager = SessionManager(store, session_config, default_session_timeout=0, clock=clock)
        session = manager.create_session(RequestContext(), session_config)
        assert store.ttl(f"{session.id}:created") is None


# ---------------------------------------------------------------------------
# Id allocation
# ---------------------------------------------------------------------------


class TestSessionManagerIdAllocation:
    def test_skips_ids_in_use(
        self,
        store: InMemoryStoreClient,
        session_config: CookieSessionConfig,
        clock: FakeClock,
    ) -> None:
        store.hset("taken", "k", "v")
        generator = SequenceIdGenerator(["taken", "taken", "free"])
        manager = SessionManager(store, session_config, id_generator=generator, clock=clock)
        session = manager.create_session(RequestContext(), session_config)
        assert session.id == "free"
        assert generator.calls == 3

    def test_gives_up_after_max_attempts(
        self,
        store: InMemoryStoreClient,
        session_config: CookieSessionConfig,
        clock: FakeClock,
    ) -> None:
        store.hset("taken", "k", "v")
        generator = SequenceIdGenerator(["taken"])
        manager = SessionManager(store, session_config, id_generator=generator, clock=clock)
        with pytest.raises(IdAllocationExhausted) as excinfo:
            manager.create_session(RequestContext(), session_config)
        assert excinfo.value.attempts == MAX_ID_ATTEMPTS
        assert generator.calls == MAX_ID_ATTEMPTS

    def test_last_attempt_can_succeed(
        self,
        store: InMemoryStoreClient,
        session_config: CookieSessionConfig,
        clock: FakeClock,
    ) -> None:
        store.hset("taken", "k", "v")
        generator = SequenceIdGenerator(["taken"] * (MAX_ID_ATTEMPTS - 1) + ["free"])
        manager = SessionManager(store, session_config, id_generator=generator, clock=clock)
        assert manager.allocate_session_id() == "free"

    def test_exhaustion_writes_nothing(
        self,
        store: InMemoryStoreClient,
        session_config: CookieSessionConfig,
        clock: FakeClock,
    ) -> None:
        store.hset("taken", "k", "v")
        manager = SessionManager(
            store, session_config, id_generator=SequenceIdGenerator(["taken"]), clock=clock
        )
        with pytest.raises(IdAllocationExhausted):
            manager.create_session(RequestContext(), session_config)
        assert store.keys() == {"taken"}


# ---------------------------------------------------------------------------
# get_session / get_session_by_id
# ---------------------------------------------------------------------------


class TestSessionManagerLookup:
    def test_same_request_returns_same_instance(
        self,
        manager: SessionManager,
        context: RequestContext,
        session_config: CookieSessionConfig,
    ) -> None:
        created = manager.create_session(context, session_config)
        assert manager.get_session(context, session_config) is created

    def test_later_request_reads_from_store(
        self,
        manager: SessionManager,
        session_config: CookieSessionConfig,
    ) -> None:
        created = manager.create_session(RequestContext(), session_config)
        created.set_attribute("shape", "square")
        later = RequestContext(cookies={"session": created.id})
        loaded = manager.get_session(later, session_config)
        assert loaded is not None
        assert loaded is not created
        assert loaded.id == created.id
        assert loaded.creation_time == created.creation_time
        assert loaded.get_attribute("shape") == "square"

    def test_request_without_cookie(
        self, manager: SessionManager, session_config: CookieSessionConfig
    ) -> None:
        assert manager.get_session(RequestContext(), session_config) is None

    def test_none_id(self, manager: SessionManager) -> None:
        assert manager.get_session_by_id(None) is None

    def test_unknown_id(self, manager: SessionManager) -> None:
        assert manager.get_session_by_id("nope") is None

    def test_session_without_attributes_is_not_found(
        self, manager: SessionManager, session_config: CookieSessionConfig
    ) -> None:
        # Existence is tied to the attribute record, which an empty hash lacks.
        created = manager.create_session(RequestContext(), session_config)
        assert manager.get_session_by_id(created.id) is None

    def test_interval_seeded_from_live_ttl(
        self,
        manager: SessionManager,
        session_config: CookieSessionConfig,
        clock: FakeClock,
    ) -> None:
        created = manager.create_session(RequestContext(), session_config)
        created.set_attribute("k", "v")
        created.set_max_inactive_interval(120)
        clock.advance(20)
        loaded = manager.get_session_by_id(created.id)
        assert loaded is not None
        assert loaded.max_inactive_interval == 100

    def test_interval_is_never_expiring_when_key_has_no_ttl(
        self,
        manager: SessionManager,
        store: InMemoryStoreClient,
    ) -> None:
        store.hset("manual", "k", "v")
        store.set("manual:created", "1000")
        loaded = manager.get_session_by_id("manual")
        assert loaded is not None
        assert loaded.max_inactive_interval == 0
        assert loaded.creation_time == 1000

    def test_never_expiring_session_stays_persisted_after_reload(
        self,
        manager: SessionManager,
        store: InMemoryStoreClient,
        session_config: CookieSessionConfig,
        clock: FakeClock,
    ) -> None:
        created = manager.create_session(RequestContext(), session_config)
        created.set_attribute("k", "v")
        created.set_max_inactive_interval(0)

        loaded = manager.get_session_by_id(created.id)
        assert loaded is not None
        assert loaded.get_attribute("k") == "v"
        assert store.ttl(created.id) is None
        assert store.ttl(metadata_key(created.id)) is None

        clock.advance(TIMEOUT * 20)
        assert store.exists(created.id) is True

    def test_expired_session_is_gone(
        self,
        manager: SessionManager,
        session_config: CookieSessionConfig,
        clock: FakeClock,
    ) -> None:
        created = manager.create_session(RequestContext(), session_config)
        created.set_attribute("k", "v")
        clock.advance(TIMEOUT)
        assert manager.get_session_by_id(created.id) is None


# ---------------------------------------------------------------------------
# Enumeration
# ---------------------------------------------------------------------------


class TestSessionManagerEnumeration:
    def test_two_sessions_enumerate_as_two_ids(
        self, manager: SessionManager, session_config: CookieSessionConfig
    ) -> None:
        first = manager.create_session(RequestContext(), session_config)
        second = manager.create_session(RequestContext(), session_config)
        first.set_attribute("k", "v")
        assert manager.all_sessions() == {first.id, second.id}

    def test_metadata_keys_are_not_reported(
        self, manager: SessionManager, session_config: CookieSessionConfig
    ) -> None:
        session = manager.create_session(RequestContext(), session_config)
        session.set_attribute("k", "v")
        assert not any(key.endswith(":created") for key in manager.all_sessions())

    def test_active_equals_all(
        self, manager: SessionManager, session_config: CookieSessionConfig
    ) -> None:
        manager.create_session(RequestContext(), session_config)
        assert manager.active_sessions() == manager.all_sessions()

    def test_transient_is_empty(
        self, manager: SessionManager, session_config: CookieSessionConfig
    ) -> None:
        manager.create_session(RequestContext(), session_config)
        assert manager.transient_sessions() == set()

    def test_expired_sessions_disappear(
        self,
        manager: SessionManager,
        session_config: CookieSessionConfig,
        clock: FakeClock,
    ) -> None:
        manager.create_session(RequestContext(), session_config)
        clock.advance(TIMEOUT + 1)
        assert manager.all_sessions() == set()


# ---------------------------------------------------------------------------
# Invalidation by id
# ---------------------------------------------------------------------------


class TestSessionManagerInvalidateById:
    def test_deletes_both_records(
        self,
        manager: SessionManager,
        store: InMemoryStoreClient,
        session_config: CookieSessionConfig,
    ) -> None:
        session = manager.create_session(RequestContext(), session_config)
        session.set_attribute("k", "v")
        assert manager.invalidate_by_id(session.id) is True
        assert store.exists(session.id) is False
        assert store.exists(metadata_key(session.id)) is False

    def test_reaches_session_without_attributes(
        self,
        manager: SessionManager,
        store: InMemoryStoreClient,
        session_config: CookieSessionConfig,
    ) -> None:
        session = manager.create_session(RequestContext(), session_config)
        assert manager.get_session_by_id(session.id) is None
        assert manager.invalidate_by_id(session.id) is True
        assert manager.all_sessions() == set()

    def test_unknown_id(self, manager: SessionManager) -> None:
        assert manager.invalidate_by_id("nope") is False


# ---------------------------------------------------------------------------
# Configuration and lifecycle
# ---------------------------------------------------------------------------


class TestSessionManagerConfiguration:
    def test_default_timeout_applies_to_new_sessions_only(
        self,
        manager: SessionManager,
        store: InMemoryStoreClient,
        session_config: CookieSessionConfig,
    ) -> None:
        before = manager.create_session(RequestContext(), session_config)
        manager.set_default_session_timeout(60)
        after = manager.create_session(RequestContext(), session_config)
        assert manager.default_session_timeout == 60
        assert before.max_inactive_interval == TIMEOUT
        assert after.max_inactive_interval == 60
        assert store.ttl(f"{before.id}:created") == TIMEOUT
        assert store.ttl(f"{after.id}:created") == 60

    def test_managers_do_not_share_timeout(self, store: InMemoryStoreClient) -> None:
        first, second = SessionManager(store), SessionManager(store)
        first.set_default_session_timeout(5)
        assert second.default_session_timeout == 30 * 60

    def test_start_records_time(self, manager: SessionManager) -> None:
        assert manager.start_time is None
        manager.start()
        assert manager.start_time == int(START_TIME * 1000)
        manager.stop()

    def test_deployment_name(self, store: InMemoryStoreClient) -> None:
        assert SessionManager(store).deployment_name == "SESSION_MANAGER"
        assert SessionManager(store, deployment_name="shop").deployment_name == "shop"

    def test_register_and_remove_listener(self, manager: SessionManager) -> None:
        recorder = RecordingListener()
        manager.register_listener(recorder)
        assert len(manager.listeners) == 1
        manager.remove_listener(recorder)
        assert len(manager.listeners) == 0

    def test_from_settings(self, store: InMemoryStoreClient) -> None:
        settings = SessionManagerSettings(
            deployment_name="api", default_session_timeout=90, cookie_name="sid"
        )
        manager = SessionManager.from_settings(settings, store=store)
        context = RequestContext()
        session = manager.create_session(context, CookieSessionConfig("sid"))
        assert manager.deployment_name == "api"
        assert manager.store is store
        assert session.max_inactive_interval == 90
        assert len(session.id) == 40

    def test_repr(self, manager: SessionManager) -> None:
        assert "SESSION_MANAGER" in repr(manager)
