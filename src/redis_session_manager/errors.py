"""Exception hierarchy for redis-session-manager.

Classes
-------
- SessionStoreError      — root of every exception raised by this package
- ConfigurationError     — required session configuration is missing
- IdAllocationExhausted  — no unused session id could be allocated
- StoreError             — the backing key-value store failed a command
"""
from __future__ import annotations


class SessionStoreError(Exception):
    """Base class for all redis-session-manager errors."""


class ConfigurationError(SessionStoreError):
    """Raised when a session cannot be created for lack of configuration."""


class IdAllocationExhausted(SessionStoreError):
    """Raised when every generated session id was already taken.

    This should never happen with a sound generator; it guards against a
    degenerate one looping forever.
    """

    def __init__(self, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(
            f"Could not generate a unique session id after {attempts} attempts."
        )


class StoreError(SessionStoreError):
    """Raised when the backing store rejects or fails a command."""
