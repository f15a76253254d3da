"""Settings for building a session manager.

Classes
-------
- SessionManagerSettings  — validated connection and session defaults
"""
from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "REDIS_SESSION_"


class SessionManagerSettings(BaseSettings):
    """Validated settings for :meth:`SessionManager.from_settings`.

    Values come from keyword arguments first, then from ``REDIS_SESSION_*``
    environment variables, then from the defaults below.
    ``REDIS_SESSION_URL`` (or ``REDIS_SESSION_REDIS_URL``) maps to
    ``redis_url``; every other field maps to its upper-cased name, e.g.
    ``REDIS_SESSION_KEY_PREFIX``.

    Parameters
    ----------
    redis_url:
        Redis connection URL.
    key_prefix:
        Namespace prepended to every session key.
    deployment_name:
        Name reported by the manager.
    default_session_timeout:
        Inactivity timeout in seconds for new sessions.  Zero or negative
        disables expiry.
    session_id_length:
        Random bytes per generated session id.
    cookie_name:
        Name of the cookie carrying the session id.
    """

    redis_url: str = Field(
        default="redis://localhost:6379/0",
        validation_alias=AliasChoices(f"{ENV_PREFIX}URL", f"{ENV_PREFIX}REDIS_URL"),
    )
    key_prefix: str = ""
    deployment_name: str = "SESSION_MANAGER"
    default_session_timeout: int = 30 * 60
    session_id_length: int = Field(default=20, ge=16)
    cookie_name: str = Field(default="session", min_length=1)

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    @classmethod
    def from_env(cls) -> SessionManagerSettings:
        """Build settings from the process environment alone."""
        return cls()
