"""Pytest configuration and shared fixtures.

Organization:
    - Environment Fixtures: isolate tests from host configuration
    - Persistence Fixtures: in-memory snapshot backend recording saves
    - Service Fixtures: authorization service factories
    - Application Fixtures: FastAPI app and HTTP client
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
import os
from pathlib import Path
from typing import Any

from httpx import ASGITransport, AsyncClient
import pytest

from notebook_authz.core.schemas.authorization import AuthorizationSnapshot
from notebook_authz.core.settings import AuthorizationSettings, clear_all_caches
from notebook_authz.features.authorization.service import NotebookAuthorizationService
from notebook_authz.infra.persistence.exceptions import SnapshotLoadError, SnapshotSaveError
from notebook_authz.infra.persistence.location import SnapshotBackendType, SnapshotLocation

_ENV_PREFIXES = ("AUTHZ_", "STORAGE_", "LOG_", "LOGGING_")


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Run every test in an empty directory without service env vars.

    Keeps conf/*.yaml, .env files and AUTHZ_/STORAGE_/LOG_ variables of the
    host out of the settings under test.
    """
    for name in list(os.environ):
        if name.startswith(_ENV_PREFIXES):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    clear_all_caches()
    yield
    clear_all_caches()


# ============================================================================
# Persistence Fixtures
# ============================================================================


class RecordingPersistence:
    """Snapshot backend keeping every saved snapshot in memory."""

    backend_name = "memory"

    def __init__(
        self,
        initial: AuthorizationSnapshot | None = None,
        *,
        fail_load: bool = False,
        fail_save: bool = False,
    ) -> None:
        self.location = SnapshotLocation(backend=SnapshotBackendType.FILE, path=Path("memory.json"))
        self.initial = initial
        self.fail_load = fail_load
        self.fail_save = fail_save
        self.saved: list[AuthorizationSnapshot] = []

    def load(self) -> AuthorizationSnapshot | None:
        if self.fail_load:
            raise SnapshotLoadError("Snapshot unreadable", metadata={"path": "memory.json"})
        return self.initial

    def save(self, snapshot: AuthorizationSnapshot) -> None:
        if self.fail_save:
            raise SnapshotSaveError("Disk full", metadata={"path": "memory.json"})
        self.saved.append(snapshot)


@pytest.fixture
def persistence() -> RecordingPersistence:
    """In-memory snapshot backend."""
    return RecordingPersistence()


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def make_service(
    persistence: RecordingPersistence,
) -> Callable[..., NotebookAuthorizationService]:
    """Factory building a service over the in-memory backend.

    Keyword arguments are passed to AuthorizationSettings.
    """

    def _make(**settings_kwargs: Any) -> NotebookAuthorizationService:
        settings = AuthorizationSettings(**settings_kwargs)
        return NotebookAuthorizationService(persistence, settings)

    return _make


@pytest.fixture
def service(make_service) -> NotebookAuthorizationService:
    """Service enforcing permissions, creating public notes."""
    return make_service(anonymous_allowed=False, public_by_default=True)


@pytest.fixture
def private_service(make_service) -> NotebookAuthorizationService:
    """Service enforcing permissions, creating private notes."""
    return make_service(anonymous_allowed=False, public_by_default=False)


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
def app(service: NotebookAuthorizationService):
    """FastAPI application bound to the enforcing service."""
    from notebook_authz.app.main import create_app

    return create_app(service)


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for the application."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
