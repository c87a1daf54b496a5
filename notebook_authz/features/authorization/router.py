"""Note permission REST API endpoints.

Handlers are plain functions: the authorization service performs blocking
persistence I/O, so FastAPI runs them in its threadpool.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from notebook_authz.core.acl import NoteRelation
from notebook_authz.core.dependencies.authorization import (
    AuthorizationServiceDep,
    CurrentSubjectDep,
    require_note_access,
)
from notebook_authz.core.schemas.authorization import (
    NotePermissionsResponse,
    NotePermissionsUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notebooks", tags=["notebook-permissions"])


@router.get(
    "/{note_id}/permissions",
    response_model=NotePermissionsResponse,
    summary="Get note permissions",
    description="Owners, readers and writers of a note. Empty relations are open to everyone.",
    dependencies=[Depends(require_note_access(NoteRelation.READERS))],
)
def get_note_permissions(
    note_id: str,
    service: AuthorizationServiceDep,
) -> NotePermissionsResponse:
    """Get the permissions of a note.

    Args:
        note_id: Note identifier.

    Returns:
        The note's relations; all empty for a note without recorded permissions.
    """
    permissions = service.get_permissions(note_id)
    return NotePermissionsResponse(note_id=note_id, **permissions.model_dump())


@router.put(
    "/{note_id}/permissions",
    response_model=NotePermissionsResponse,
    summary="Replace note permissions",
    description="Replace the relations present in the body. Requires ownership of the note.",
    dependencies=[Depends(require_note_access(NoteRelation.OWNERS))],
)
def update_note_permissions(
    note_id: str,
    data: NotePermissionsUpdate,
    service: AuthorizationServiceDep,
    subject: CurrentSubjectDep,
) -> NotePermissionsResponse:
    """Replace the permissions of a note.

    Args:
        note_id: Note identifier.
        data: Relations to replace; omitted relations stay unchanged.

    Returns:
        The permissions stored after the update.
    """
    permissions = service.set_permissions(
        note_id,
        owners=data.owners,
        readers=data.readers,
        writers=data.writers,
    )
    logger.info(
        "Note permissions replaced via API",
        extra={"note_id": note_id, "user": subject.user},
    )
    return NotePermissionsResponse(note_id=note_id, **permissions.model_dump())
