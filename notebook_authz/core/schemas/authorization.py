"""Schemas for note permissions and the persisted authorization snapshot.

The snapshot document keeps the historical notebook-server layout:

    {
      "authInfo": {
        "2A94M5J1Z": {
          "owners": ["user1"],
          "readers": ["user1", "user2"],
          "writers": ["user1"]
        }
      }
    }
"""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator

from notebook_authz.core.acl.membership import normalize_principals
from notebook_authz.core.schemas.base import CustomBase


def _coerce_principal_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple, set, frozenset)):
        # Left to the list[str] validation error
        return value
    return list(normalize_principals(value))


class NotePermissions(CustomBase):
    """Owners, readers and writers recorded for a single note.

    Missing or null relations load as empty lists, so every entry always
    carries all three relations.
    """

    owners: list[str] = Field(default_factory=list, description="Principals owning the note")
    readers: list[str] = Field(default_factory=list, description="Principals allowed to read")
    writers: list[str] = Field(default_factory=list, description="Principals allowed to write")

    @field_validator("owners", "readers", "writers", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> list[str]:
        return _coerce_principal_list(value)


class NotePermissionsResponse(NotePermissions):
    """Permissions of a note as returned by the API."""

    note_id: str = Field(description="Note identifier")


class NotePermissionsUpdate(CustomBase):
    """Request body replacing note relations.

    A relation left out (or sent as null) is kept unchanged; an empty list
    clears the relation and opens it to everyone.
    """

    owners: list[str] | None = Field(default=None, description="New owners")
    readers: list[str] | None = Field(default=None, description="New readers")
    writers: list[str] | None = Field(default=None, description="New writers")


class AuthorizationSnapshot(CustomBase):
    """Full image of the ACL store; the only unit of persistence."""

    auth_info: dict[str, NotePermissions] = Field(
        default_factory=dict,
        alias="authInfo",
        description="Note ID to permissions mapping",
    )

    @field_validator("auth_info", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    def to_json(self) -> str:
        """Serialize as pretty-printed JSON with the persisted key names."""
        return self.model_dump_json(by_alias=True, indent=2)

    @classmethod
    def from_json(cls, payload: str | bytes) -> AuthorizationSnapshot:
        """Parse a persisted snapshot document.

        Raises:
            pydantic.ValidationError: If the document is not valid JSON or
                does not match the snapshot layout.
        """
        return cls.model_validate_json(payload)


class NoteInfo(CustomBase):
    """Minimal note descriptor used when filtering note listings."""

    id: str = Field(description="Note identifier")
    name: str | None = Field(default=None, description="Display name")
