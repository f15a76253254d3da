"""Session identifier generation.

Classes
-------
- SessionIdGenerator              — abstract id source
- SecureRandomSessionIdGenerator  — ``secrets``-backed hex ids
"""
from __future__ import annotations

import secrets
from abc import ABC, abstractmethod

_MIN_ID_BYTES = 16


class SessionIdGenerator(ABC):
    """Produces candidate session ids.

    Generators only need to be collision resistant; uniqueness against
    live sessions is checked by the session manager.
    """

    @abstractmethod
    def create_session_id(self) -> str:
        """Return a new candidate session id."""


class SecureRandomSessionIdGenerator(SessionIdGenerator):
    """Unpredictable ids drawn from the operating system's CSPRNG.

    Ids are ``length`` random bytes rendered as lowercase hex, so they never
    contain ``:`` or glob metacharacters.

    Parameters
    ----------
    length:
        Number of random bytes per id.  Defaults to 20 (40 hex characters).
    """

    def __init__(self, length: int = 20) -> None:
        if length < _MIN_ID_BYTES:
            raise ValueError(f"length must be at least {_MIN_ID_BYTES} bytes, got {length}.")
        self._length = length

    @property
    def length(self) -> int:
        return self._length

    def create_session_id(self) -> str:
        return secrets.token_hex(self._length)

    def __repr__(self) -> str:
        return f"SecureRandomSessionIdGenerator(length={self._length})"
