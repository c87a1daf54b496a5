"""Local filesystem snapshot backend."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from notebook_authz.core.schemas.authorization import AuthorizationSnapshot

from .exceptions import SnapshotLoadError, SnapshotSaveError

if TYPE_CHECKING:
    from .location import SnapshotLocation

logger = logging.getLogger(__name__)


class FileSnapshotPersistence:
    """Snapshot stored as a JSON document on the local filesystem.

    The file is truncated and rewritten on every save; parent directories are
    created on demand.
    """

    def __init__(self, location: SnapshotLocation, encoding: str = "utf-8") -> None:
        if location.path is None:
            msg = "File snapshot location requires a path"
            raise ValueError(msg)
        self._location = location
        self._path = location.path
        self._encoding = encoding

    @property
    def backend_name(self) -> str:
        """Backend name identifier."""
        return "file"

    @property
    def location(self) -> SnapshotLocation:
        return self._location

    def load(self) -> AuthorizationSnapshot | None:
        if not self._path.exists():
            logger.info(
                "Authorization snapshot not found, starting empty",
                extra={"path": str(self._path)},
            )
            return None

        try:
            payload = self._path.read_text(encoding=self._encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise SnapshotLoadError(
                f"Failed to read {self._path}: {e}",
                metadata={"path": str(self._path), "error": str(e)},
            ) from e

        try:
            snapshot = AuthorizationSnapshot.from_json(payload)
        except ValidationError as e:
            raise SnapshotLoadError(
                f"Malformed authorization snapshot in {self._path}",
                metadata={"path": str(self._path), "error": str(e)},
            ) from e

        logger.info(
            "Authorization snapshot loaded",
            extra={"path": str(self._path), "notes": len(snapshot.auth_info)},
        )
        return snapshot

    def save(self, snapshot: AuthorizationSnapshot) -> None:
        payload = snapshot.to_json()
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(payload, encoding=self._encoding)
        except (OSError, UnicodeEncodeError) as e:
            raise SnapshotSaveError(
                f"Failed to write {self._path}: {e}",
                metadata={"path": str(self._path), "error": str(e)},
            ) from e

        logger.debug(
            "Authorization snapshot saved",
            extra={"path": str(self._path), "notes": len(snapshot.auth_info)},
        )
