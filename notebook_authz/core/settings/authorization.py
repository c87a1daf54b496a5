"""Notebook authorization policy and snapshot location settings.

Environment variables use AUTHZ_ prefix.
Example: AUTHZ_STORAGE_PATH="s3://notebooks/conf/notebook-authorization.json"
         AUTHZ_ANONYMOUS_ALLOWED=false
"""

from __future__ import annotations

import codecs
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .yaml_sources import create_authorization_yaml_source


class AuthorizationSettings(BaseSettings):
    """Policy flags and persistence location for note permissions.

    Environment variables use AUTHZ_ prefix.
    Example: AUTHZ_PUBLIC_BY_DEFAULT=false
    """

    # ──────────────────────────────────────────────────────────────
    # Snapshot location
    # ──────────────────────────────────────────────────────────────

    storage_path: str = Field(
        default="conf/notebook-authorization.json",
        min_length=1,
        description="Local path, file:// URI or s3://bucket/key of the permissions snapshot",
    )

    encoding: str = Field(
        default="utf-8",
        description="Text encoding used to read and write the snapshot",
    )

    # ──────────────────────────────────────────────────────────────
    # Policy flags
    # ──────────────────────────────────────────────────────────────

    anonymous_allowed: bool = Field(
        default=True,
        description="Grant every access without consulting note permissions",
    )

    public_by_default: bool = Field(
        default=True,
        description="New notes only record their creator as owner (readable/writable by everyone)",
    )

    # ──────────────────────────────────────────────────────────────
    # Validators
    # ──────────────────────────────────────────────────────────────

    @field_validator("storage_path")
    @classmethod
    def _strip_storage_path(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("storage_path must not be blank")
        return value

    @field_validator("encoding")
    @classmethod
    def _validate_encoding(cls, value: str) -> str:
        """Reject encodings Python cannot decode with."""
        try:
            codecs.lookup(value)
        except LookupError as e:
            raise ValueError(f"Unknown text encoding: {value}") from e
        return value

    model_config = SettingsConfigDict(
        env_prefix="AUTHZ_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        populate_by_name=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: Any,
        env_settings: Any,
        dotenv_settings: Any,
        file_secret_settings: Any,
    ) -> tuple[Any, ...]:
        """Customize settings source precedence: init > yaml > env > dotenv > secrets."""
        return (
            init_settings,
            create_authorization_yaml_source(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )
