"""Snapshot persistence protocol.

All backends persist the whole authorization snapshot; there are no deltas.
Uses structural typing (Protocol) rather than inheritance.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from notebook_authz.core.schemas.authorization import AuthorizationSnapshot

    from .location import SnapshotLocation


class SnapshotPersistence(Protocol):
    """Protocol interface for snapshot persistence backends.

    Example:
        class FileSnapshotPersistence:
            @property
            def backend_name(self) -> str:
                return "file"

            def load(self) -> AuthorizationSnapshot | None:
                ...
    """

    @property
    def backend_name(self) -> str:
        """Name of the backend (e.g., 'file', 's3')."""
        ...

    @property
    def location(self) -> SnapshotLocation:
        """Where the snapshot is stored."""
        ...

    def load(self) -> AuthorizationSnapshot | None:
        """Read the persisted snapshot.

        Returns:
            The snapshot, or None when nothing has been persisted yet.

        Raises:
            SnapshotLoadError: If the snapshot exists but cannot be read or parsed.
        """
        ...

    def save(self, snapshot: AuthorizationSnapshot) -> None:
        """Overwrite the persisted snapshot.

        Raises:
            SnapshotSaveError: If the snapshot cannot be written.
        """
        ...
