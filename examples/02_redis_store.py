#!/usr/bin/env python3
"""Example: Redis store

Builds a session manager from environment settings and talks to a real
Redis server.

Usage:
    REDIS_SESSION_URL=redis://localhost:6379/0 python examples/02_redis_store.py

Requirements:
    pip install redis-session-manager
    A Redis server reachable at REDIS_SESSION_URL.
"""
from __future__ import annotations

import logging

from redis_session_manager import (
    CookieSessionConfig,
    RequestContext,
    SessionManager,
    SessionManagerSettings,
    StoreError,
)


def main() -> None:
    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    settings = SessionManagerSettings.from_env()
    manager = SessionManager.from_settings(settings)
    cookie_config = CookieSessionConfig(settings.cookie_name)
    context = RequestContext()

    try:
        session = manager.create_session(context, cookie_config)
        session.set_attribute("user", "alice")
        session.set_attribute("visits", 1)
        print(f"Created {session.id}: ttl={manager.store.ttl(session.id)}s")

        loaded = manager.get_session_by_id(session.id)
        if loaded is not None:
            print(f"Reloaded visits={loaded.get_attribute('visits')}")

        session.invalidate(context)
        print(f"Invalidated; cookie now {context.response_cookies[settings.cookie_name]!r}")
    except StoreError as exc:
        print(f"Redis unavailable: {exc}")


if __name__ == "__main__":
    main()
