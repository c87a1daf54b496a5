"""Utility helpers for route handlers."""

from notebook_authz.core.utils.note_access import (
    require_note_owner,
    require_note_reader,
    require_note_writer,
)

__all__ = [
    "require_note_owner",
    "require_note_reader",
    "require_note_writer",
]
