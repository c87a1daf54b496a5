"""Backend factory resolving the configured storage path once."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .location import SnapshotBackendType, parse_snapshot_location

if TYPE_CHECKING:
    from notebook_authz.core.settings.authorization import AuthorizationSettings
    from notebook_authz.core.settings.storage import StorageSettings

    from .protocol import SnapshotPersistence

logger = logging.getLogger(__name__)


def create_snapshot_persistence(
    settings: AuthorizationSettings,
    storage_settings: StorageSettings | None = None,
    *,
    s3_client: Any | None = None,
) -> SnapshotPersistence:
    """Factory function to create the snapshot backend for a storage path.

    Args:
        settings: Authorization settings holding the storage path and encoding.
        storage_settings: S3 connection settings; loaded from the environment
            when omitted and the path targets object storage.
        s3_client: Pre-built boto3 client to use for the S3 backend.

    Returns:
        Backend implementing the SnapshotPersistence protocol.

    Raises:
        PersistenceNotConfiguredError: If the storage path is malformed.

    Example:
        settings = get_authorization_settings()
        persistence = create_snapshot_persistence(settings)
        snapshot = persistence.load()
    """
    location = parse_snapshot_location(settings.storage_path)

    match location.backend:
        case SnapshotBackendType.S3:
            from .s3 import S3SnapshotPersistence

            if storage_settings is None:
                from notebook_authz.core.settings import get_storage_settings

                storage_settings = get_storage_settings()

            backend: SnapshotPersistence = S3SnapshotPersistence(
                location,
                storage_settings,
                encoding=settings.encoding,
                client=s3_client,
            )

        case SnapshotBackendType.FILE:
            from .file import FileSnapshotPersistence

            backend = FileSnapshotPersistence(location, encoding=settings.encoding)

    logger.info(
        "Snapshot persistence resolved",
        extra={"backend": backend.backend_name, "location": str(location)},
    )
    return backend
