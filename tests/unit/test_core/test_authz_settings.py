"""Unit tests for authorization, storage and logging settings."""

from __future__ import annotations

from pathlib import Path

from pydantic import ValidationError
import pytest

from notebook_authz.core.settings import (
    AuthorizationSettings,
    LoggingSettings,
    StorageSettings,
    clear_all_caches,
    get_authorization_settings,
    get_logging_settings,
    get_storage_settings,
)


@pytest.mark.unit
class TestAuthorizationSettings:
    """Test suite for AuthorizationSettings."""

    def test_defaults(self):
        settings = AuthorizationSettings()

        assert settings.storage_path == "conf/notebook-authorization.json"
        assert settings.encoding == "utf-8"
        assert settings.anonymous_allowed is True
        assert settings.public_by_default is True

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("AUTHZ_STORAGE_PATH", "s3://notebooks/conf/authorization.json")
        monkeypatch.setenv("AUTHZ_ANONYMOUS_ALLOWED", "false")

        settings = AuthorizationSettings()

        assert settings.storage_path == "s3://notebooks/conf/authorization.json"
        assert settings.anonymous_allowed is False

    def test_yaml_and_confd_files(self, tmp_path: Path):
        """conf.d files override the main YAML file."""
        conf = tmp_path / "conf"
        (conf / "authorization.d").mkdir(parents=True)
        (conf / "authorization.yaml").write_text(
            "anonymous_allowed: false\npublic_by_default: true\n", encoding="utf-8"
        )
        (conf / "authorization.d" / "10-private.yaml").write_text(
            "public_by_default: false\n", encoding="utf-8"
        )

        settings = AuthorizationSettings()

        assert settings.anonymous_allowed is False
        assert settings.public_by_default is False

    def test_init_kwargs_win(self):
        settings = AuthorizationSettings(public_by_default=False)

        assert settings.public_by_default is False

    def test_frozen(self):
        settings = AuthorizationSettings()

        with pytest.raises(ValidationError):
            settings.anonymous_allowed = False  # type: ignore[misc]

    def test_rejects_unknown_encoding(self):
        with pytest.raises(ValidationError):
            AuthorizationSettings(encoding="no-such-codec")

    def test_rejects_blank_storage_path(self):
        with pytest.raises(ValidationError):
            AuthorizationSettings(storage_path="   ")


@pytest.mark.unit
class TestStorageSettings:
    """Test suite for StorageSettings."""

    def test_defaults(self):
        settings = StorageSettings()

        assert settings.endpoint is None
        assert settings.region == "us-east-1"
        assert settings.server_side_encryption is False

    def test_rejects_one_sided_credentials(self):
        with pytest.raises(ValidationError, match="access_key and secret_key"):
            StorageSettings(access_key="AKIA")

        with pytest.raises(ValidationError, match="access_key and secret_key"):
            StorageSettings(secret_key="secret")

    def test_boto3_config_with_static_credentials(self):
        settings = StorageSettings(
            endpoint="http://localhost:9000",
            access_key="minioadmin",
            secret_key="minioadmin",
            use_ssl=False,
        )

        config = settings.get_boto3_config()

        assert config["endpoint_url"] == "http://localhost:9000"
        assert config["aws_access_key_id"] == "minioadmin"
        assert config["aws_secret_access_key"] == "minioadmin"
        assert config["use_ssl"] is False

    def test_boto3_config_uses_credential_chain_without_keys(self):
        config = StorageSettings().get_boto3_config()

        assert "aws_access_key_id" not in config
        assert "endpoint_url" not in config

    def test_secrets_hidden_in_repr(self):
        settings = StorageSettings(access_key="AKIA", secret_key="very-secret")

        assert "very-secret" not in repr(settings)


@pytest.mark.unit
class TestLoggingSettings:
    """Test suite for LoggingSettings."""

    def test_level_normalized(self):
        assert LoggingSettings(level="debug").level == "DEBUG"

    def test_file_path_only_when_enabled(self):
        assert LoggingSettings(file_enabled=False).effective_file_path is None
        enabled = LoggingSettings(file_enabled=True, file_path=Path("logs/x.jsonl"))
        assert enabled.effective_file_path == Path("logs/x.jsonl")

    def test_to_logging_kwargs(self):
        kwargs = LoggingSettings(level="WARNING", console_level="ERROR").to_logging_kwargs()

        assert kwargs["log_level"] == "WARNING"
        assert kwargs["console_level"] == "ERROR"
        assert kwargs["file_level"] == "WARNING"
        assert kwargs["service_name"] == "notebook-authz"


@pytest.mark.unit
class TestSettingsLoaders:
    """Test cached loaders."""

    def test_loaders_cache_instances(self):
        assert get_authorization_settings() is get_authorization_settings()
        assert get_storage_settings() is get_storage_settings()
        assert get_logging_settings() is get_logging_settings()

    def test_clear_all_caches_reloads(self, monkeypatch: pytest.MonkeyPatch):
        first = get_authorization_settings()
        monkeypatch.setenv("AUTHZ_PUBLIC_BY_DEFAULT", "false")

        assert get_authorization_settings().public_by_default is True

        clear_all_caches()
        second = get_authorization_settings()

        assert second is not first
        assert second.public_by_default is False
