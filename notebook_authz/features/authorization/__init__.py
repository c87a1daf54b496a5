"""Notebook authorization.

Per-note owners/readers/writers, user roles and the authorization
queries consulted on every note access.

Usage:
    from notebook_authz.features.authorization import NotebookAuthorizationService

    service = NotebookAuthorizationService.from_settings()

    # On note creation / deletion
    service.set_new_note_permissions(note_id, subject)
    service.remove_note(note_id)

    # On note access
    principals = service.expand_principals(subject)
    if service.has_write_authorization(principals, note_id):
        ...
"""

from .service import NotebookAuthorizationService, NoteEntry

__all__ = [
    "NoteEntry",
    "NotebookAuthorizationService",
]
