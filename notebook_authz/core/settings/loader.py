"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the process.

Usage:
    from notebook_authz.core.settings.loader import get_authorization_settings

    settings = get_authorization_settings()  # First call: loads and validates
    settings = get_authorization_settings()  # Subsequent calls: cached instance

Testing:
    In tests, clear the caches to force reload:
    clear_all_caches()

    Or construct settings directly:
    settings = AuthorizationSettings(anonymous_allowed=False)
"""

from __future__ import annotations

from functools import lru_cache

from .authorization import AuthorizationSettings
from .logs import LoggingSettings
from .storage import StorageSettings


@lru_cache(maxsize=1)
def get_authorization_settings() -> AuthorizationSettings:
    """Get cached authorization policy settings.

    Returns:
        Validated and frozen AuthorizationSettings instance.
    """
    return AuthorizationSettings()


@lru_cache(maxsize=1)
def get_storage_settings() -> StorageSettings:
    """Get cached object storage settings.

    Returns:
        Validated and frozen StorageSettings instance.
    """
    return StorageSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings.

    Returns:
        Validated and frozen LoggingSettings instance.
    """
    return LoggingSettings()


def clear_all_caches() -> None:
    """Clear all settings caches.

    Useful for testing or when you need to force reload settings.
    In production, prefer process restarts over cache clearing.
    """
    get_authorization_settings.cache_clear()
    get_storage_settings.cache_clear()
    get_logging_settings.cache_clear()
