"""Request-scope session middleware.

Framework-agnostic hooks that make the session available for the
duration of one request and release it afterwards.

Classes
-------
- SessionMiddleware  — before/after request hooks for session management
"""
from __future__ import annotations

import logging

from redis_session_manager.session.config import RequestContext, SessionConfig
from redis_session_manager.session.manager import NEW_SESSION_ATTACHMENT, SessionManager
from redis_session_manager.session.record import Session

logger = logging.getLogger(__name__)


class SessionMiddleware:
    """Attach the session to each request cycle.

    Callers are responsible for calling the hooks at the right points in
    their own request pipeline and for turning ``context.response_cookies``
    into response headers.

    Parameters
    ----------
    manager:
        The session manager to delegate to.
    session_config:
        How the session id travels with requests.
    """

    def __init__(self, manager: SessionManager, session_config: SessionConfig) -> None:
        self._manager = manager
        self._session_config = session_config

    @property
    def session_config(self) -> SessionConfig:
        return self._session_config

    def before_request(self, context: RequestContext, create: bool = True) -> Session | None:
        """Return the request's session, creating one if ``create`` is True.

        Parameters
        ----------
        context:
            The incoming request's context.
        create:
            When False, a request without a live session gets None.
        """
        session = self._manager.get_session(context, self._session_config)
        if session is not None:
            logger.debug("SessionMiddleware: loaded session %r", session.id)
            return session
        if not create:
            return None
        session = self._manager.create_session(context, self._session_config)
        logger.debug("SessionMiddleware: created new session %r", session.id)
        return session

    def after_request(self, context: RequestContext) -> None:
        """Signal the end of the request to its session and detach it."""
        session = self._manager.get_session(context, self._session_config)
        if session is not None:
            session.request_done(context)
        context.attachments.pop(NEW_SESSION_ATTACHMENT, None)
        logger.debug("SessionMiddleware: request finished")
