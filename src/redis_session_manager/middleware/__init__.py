"""Middleware subpackage.

Public surface
--------------
- SessionMiddleware  — before/after request hooks for session management
"""
from __future__ import annotations

from redis_session_manager.middleware.session_middleware import SessionMiddleware

__all__ = ["SessionMiddleware"]
