"""Service configuration loaded from CHATSPACE_* environment variables."""

from __future__ import annotations

import secrets

from pydantic_settings import BaseSettings, SettingsConfigDict


class ChatspaceSettings(BaseSettings):
    """Chatspace workspace service settings.

    All fields are read from environment variables with the ``CHATSPACE_``
    prefix.  For example, ``CHATSPACE_LOG_LEVEL=DEBUG`` maps to ``log_level``.
    """

    model_config = SettingsConfigDict(
        env_prefix="CHATSPACE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- Logging ---------------------------------------------------------------
    log_level: str = "INFO"
    log_json: bool = False
    """Emit serialized JSON log records (for log shippers) instead of text."""

    # -- Infrastructure --------------------------------------------------------
    database_url: str | None = None
    """PostgreSQL connection string (psycopg3).  Required for full operation."""

    # -- Token accounting ------------------------------------------------------
    token_encoding: str = "o200k_base"
    """tiktoken encoding used to count instruction and file tokens."""

    # -- Pagination ------------------------------------------------------------
    list_default_limit: int = 20
    list_max_limit: int = 100
    conversations_default_limit: int = 25
    conversations_max_limit: int = 100

    # -- Auth ------------------------------------------------------------------
    auth_token: str | None = None
    """Bearer token for API access.  Auto-generated at startup if empty."""

    # -- Server ----------------------------------------------------------------
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8000

    # -- Helpers ---------------------------------------------------------------

    def resolve_auth_token(self) -> str:
        """Return the configured token or generate a random one."""
        if self.auth_token:
            return self.auth_token
        return secrets.token_urlsafe(32)


def get_settings() -> ChatspaceSettings:
    """Return a cached settings instance.

    Reads from environment variables and ``.env`` on first call, then returns
    the same object.  Call ``_get_settings_cached.cache_clear()`` in tests to force a
    re-read after overriding env vars.
    """
    return _get_settings_cached()


def _get_settings_cached() -> ChatspaceSettings:
    """Inner function wrapped by lru_cache (allows type-safe cache_clear)."""
    return ChatspaceSettings()


# Apply lru_cache at runtime so the function is only called once.
from functools import lru_cache  # noqa: E402

_get_settings_cached = lru_cache(maxsize=1)(_get_settings_cached)
