"""Authorization snapshot persistence.

Backends:
- FileSnapshotPersistence: local JSON file
- S3SnapshotPersistence: object in an S3-compatible bucket

Usage:
    from notebook_authz.infra.persistence import create_snapshot_persistence

    persistence = create_snapshot_persistence(get_authorization_settings())
"""

from .exceptions import (
    PersistenceError,
    PersistenceNotConfiguredError,
    SnapshotLoadError,
    SnapshotSaveError,
    map_boto_error,
)
from .factory import create_snapshot_persistence
from .file import FileSnapshotPersistence
from .location import SnapshotBackendType, SnapshotLocation, parse_snapshot_location
from .protocol import SnapshotPersistence
from .s3 import S3SnapshotPersistence

__all__ = [
    "FileSnapshotPersistence",
    "PersistenceError",
    "PersistenceNotConfiguredError",
    "S3SnapshotPersistence",
    "SnapshotBackendType",
    "SnapshotLoadError",
    "SnapshotLocation",
    "SnapshotPersistence",
    "SnapshotSaveError",
    "create_snapshot_persistence",
    "map_boto_error",
    "parse_snapshot_location",
]
