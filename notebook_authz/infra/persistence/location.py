"""Snapshot location parsing.

A storage path is resolved once into a SnapshotLocation:

- ``s3://bucket/key``      -> object storage
- ``file:///abs/path``     -> local file
- ``relative/or/abs/path`` -> local file
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
import re

from .exceptions import PersistenceNotConfiguredError

_S3_PATTERN = re.compile(r"^s3://([^/]+)/(.+)$")
_FILE_SCHEME = "file://"


class SnapshotBackendType(str, Enum):
    """Supported snapshot backends."""

    FILE = "file"
    S3 = "s3"


@dataclass(frozen=True)
class SnapshotLocation:
    """Resolved snapshot location.

    Attributes:
        backend: Which backend stores the snapshot.
        path: Local file path (file backend only).
        bucket: Bucket name (S3 backend only).
        key: Object key (S3 backend only).
    """

    backend: SnapshotBackendType
    path: Path | None = None
    bucket: str | None = None
    key: str | None = None

    def __str__(self) -> str:
        if self.backend is SnapshotBackendType.S3:
            return f"s3://{self.bucket}/{self.key}"
        return str(self.path)


def parse_snapshot_location(storage_path: str) -> SnapshotLocation:
    """Resolve a configured storage path to a snapshot location.

    Args:
        storage_path: Local path, ``file://`` URI or ``s3://bucket/key``.

    Returns:
        The resolved location.

    Raises:
        PersistenceNotConfiguredError: If the path is blank or an ``s3://``
            URI lacks a bucket or key.

    Example:
        >>> parse_snapshot_location("s3://notebooks/conf/authorization.json").key
        'conf/authorization.json'
    """
    value = storage_path.strip()
    if not value:
        raise PersistenceNotConfiguredError(
            "Snapshot storage path is empty",
            metadata={"storage_path": storage_path},
        )

    if value.startswith("s3://"):
        match = _S3_PATTERN.match(value)
        if match is None:
            raise PersistenceNotConfiguredError(
                f"Malformed S3 location {value!r}, expected s3://bucket/key",
                metadata={"storage_path": storage_path},
            )
        return SnapshotLocation(
            backend=SnapshotBackendType.S3,
            bucket=match.group(1),
            key=match.group(2),
        )

    if value.startswith(_FILE_SCHEME):
        value = value[len(_FILE_SCHEME) :]
        if not value:
            raise PersistenceNotConfiguredError(
                "file:// location has no path",
                metadata={"storage_path": storage_path},
            )

    return SnapshotLocation(backend=SnapshotBackendType.FILE, path=Path(value))
