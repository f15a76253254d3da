"""Boundary between the session core and the web layer.

The session manager never parses requests itself.  It asks a
``SessionConfig`` to find the inbound session id and to set or clear the
outbound one, and it keeps request-scoped state in a ``RequestContext``.

Classes
-------
- RequestContext       — per-request attachments plus inbound/outbound cookies
- SessionConfig        — abstract id extraction and injection
- CookieSessionConfig  — carries the id in a named cookie
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class RequestContext:
    """The per-request state the session core needs from the web layer.

    Parameters
    ----------
    cookies:
        Cookies sent by the client.
    response_cookies:
        Cookies to send back.  A ``None`` value asks the web adapter to
        expire that cookie.
    attachments:
        Request-scoped scratch space.  The session manager keeps the
        session created during this request here.
    """

    cookies: dict[str, str] = field(default_factory=dict)
    response_cookies: dict[str, str | None] = field(default_factory=dict)
    attachments: dict[str, Any] = field(default_factory=dict)


class SessionConfig(ABC):
    """Locates and writes the session id at the transport boundary."""

    @abstractmethod
    def find_session_id(self, context: RequestContext | None) -> str | None:
        """Return the session id carried by the request, if any."""

    @abstractmethod
    def set_session_id(self, context: RequestContext | None, session_id: str) -> None:
        """Arrange for ``session_id`` to be sent back to the client."""

    @abstractmethod
    def clear_session(self, context: RequestContext | None, session_id: str) -> None:
        """Arrange for the client to forget ``session_id``."""


class CookieSessionConfig(SessionConfig):
    """Carries the session id in a single cookie.

    An id set during the request takes precedence over the inbound cookie,
    so a rotated id is seen by later lookups in the same request.

    Parameters
    ----------
    cookie_name:
        Name of the session cookie.  Defaults to ``"session"``.
    """

    def __init__(self, cookie_name: str = "session") -> None:
        if not cookie_name.strip():
            raise ValueError("cookie_name must not be empty.")
        self.cookie_name = cookie_name

    def find_session_id(self, context: RequestContext | None) -> str | None:
        if context is None:
            return None
        if self.cookie_name in context.response_cookies:
            return context.response_cookies[self.cookie_name]
        return context.cookies.get(self.cookie_name)

    def set_session_id(self, context: RequestContext | None, session_id: str) -> None:
        if context is not None:
            context.response_cookies[self.cookie_name] = session_id

    def clear_session(self, context: RequestContext | None, session_id: str) -> None:
        if context is None:
            return
        current = self.find_session_id(context)
        if current is None or current == session_id:
            context.response_cookies[self.cookie_name] = None

    def __repr__(self) -> str:
        return f"CookieSessionConfig(cookie_name={self.cookie_name!r})"
