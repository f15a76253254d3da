#!/usr/bin/env python3
"""Example: Quickstart — redis-session-manager

Minimal working example: two request cycles against an in-memory store,
showing session creation, attribute access, id rotation and invalidation.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install redis-session-manager
"""
from __future__ import annotations

import redis_session_manager
from redis_session_manager import (
    CookieSessionConfig,
    InMemoryStoreClient,
    RequestContext,
    SessionListener,
    SessionManager,
    SessionMiddleware,
)


class PrintingListener(SessionListener):
    def session_created(self, session, context) -> None:
        print(f"  [listener] created {session.id[:8]}")

    def attribute_added(self, session, name, value) -> None:
        print(f"  [listener] added {name}={value!r}")

    def attribute_updated(self, session, name, new_value, old_value) -> None:
        print(f"  [listener] updated {name}: {old_value!r} -> {new_value!r}")

    def session_id_changed(self, session, old_session_id) -> None:
        print(f"  [listener] id {old_session_id[:8]} -> {session.id[:8]}")


def main() -> None:
    print(f"redis-session-manager version: {redis_session_manager.__version__}")

    config = CookieSessionConfig("session")
    manager = SessionManager(InMemoryStoreClient(), config, default_session_timeout=600)
    manager.register_listener(PrintingListener())
    middleware = SessionMiddleware(manager, config)

    # Request 1: no cookie, a session is created.
    print("\nRequest 1:")
    first = RequestContext()
    session = middleware.before_request(first)
    session.set_attribute("shape", "triangle")
    session.set_attribute("shape", "square")
    middleware.after_request(first)
    print(f"  Set-Cookie: session={first.response_cookies['session'][:8]}...")

    # Request 2: the browser sends the cookie back.
    print("\nRequest 2:")
    second = RequestContext(cookies={"session": first.response_cookies["session"]})
    session = middleware.before_request(second, create=False)
    print(f"  shape = {session.get_attribute('shape')}")
    session.change_session_id(second, config)
    print(f"  live sessions: {len(manager.all_sessions())}")
    session.invalidate(second)
    middleware.after_request(second)
    print(f"  live sessions after invalidate: {len(manager.all_sessions())}")


if __name__ == "__main__":
    main()
