"""Note access checks for route handlers.

These raise InsufficientPermissionsError, rendered as an RFC 7807 ``403``
by the application exception handlers.

Example Usage:
    ```python
    @router.delete("/notebooks/{note_id}")
    async def delete_note(
        note_id: str,
        service: AuthorizationServiceDep,
        subject: CurrentSubjectDep,
        request: Request,
    ):
        require_note_owner(service, subject, note_id, request.url.path)
        ...
    ```

All checks honor the anonymous-access policy and expand the subject with
the roles registered for it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from notebook_authz.core.acl import NoteRelation
from notebook_authz.core.exceptions import InsufficientPermissionsError

if TYPE_CHECKING:
    from notebook_authz.core.schemas.auth import AuthenticationInfo
    from notebook_authz.features.authorization.service import NotebookAuthorizationService

logger = logging.getLogger(__name__)


def _deny(
    relation: NoteRelation,
    note_id: str,
    principals: frozenset[str] | None,
    request_path: str | None,
) -> InsufficientPermissionsError:
    logger.info(
        "Note access denied",
        extra={
            "note_id": note_id,
            "required_relation": relation.value,
            "principals": sorted(principals) if principals is not None else None,
        },
    )
    return InsufficientPermissionsError(
        required_relation=relation.value,
        note_id=note_id,
        instance=request_path,
    )


def _principals(
    service: NotebookAuthorizationService,
    subject: AuthenticationInfo | None,
) -> frozenset[str] | None:
    # No subject means an undefined principal set, which fails closed
    if subject is None:
        return None
    return service.expand_principals(subject)


def require_note_reader(
    service: NotebookAuthorizationService,
    subject: AuthenticationInfo | None,
    note_id: str,
    request_path: str | None = None,
) -> None:
    """Require read access to a note.

    Raises:
        InsufficientPermissionsError: If the subject may not read the note.
    """
    principals = _principals(service, subject)
    if not service.has_read_authorization(principals, note_id):
        raise _deny(NoteRelation.READERS, note_id, principals, request_path)


def require_note_writer(
    service: NotebookAuthorizationService,
    subject: AuthenticationInfo | None,
    note_id: str,
    request_path: str | None = None,
) -> None:
    """Require write access to a note.

    Raises:
        InsufficientPermissionsError: If the subject may not write the note.
    """
    principals = _principals(service, subject)
    if not service.has_write_authorization(principals, note_id):
        raise _deny(NoteRelation.WRITERS, note_id, principals, request_path)


def require_note_owner(
    service: NotebookAuthorizationService,
    subject: AuthenticationInfo | None,
    note_id: str,
    request_path: str | None = None,
) -> None:
    """Require ownership of a note.

    Raises:
        InsufficientPermissionsError: If the subject does not own the note.
    """
    principals = _principals(service, subject)
    if not service.has_owner_authorization(principals, note_id):
        raise _deny(NoteRelation.OWNERS, note_id, principals, request_path)
