"""Pydantic Settings v2 configuration for notebook authorization.

Import settings via cached loaders:
    from notebook_authz.core.settings import get_authorization_settings

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. YAML/conf.d files (optional, local/dev)
    3. Environment variables (production)
    4. .env file (development only)
    5. secrets_dir (Kubernetes/Docker secrets)
"""

from __future__ import annotations

from .authorization import AuthorizationSettings
from .loader import (
    clear_all_caches,
    get_authorization_settings,
    get_logging_settings,
    get_storage_settings,
)
from .logs import LoggingSettings
from .storage import StorageSettings

__all__ = [
    "AuthorizationSettings",
    "LoggingSettings",
    "StorageSettings",
    "clear_all_caches",
    "get_authorization_settings",
    "get_logging_settings",
    "get_storage_settings",
]
