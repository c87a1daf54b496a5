"""Authorization dependencies for FastAPI route handlers.

Usage:
    from notebook_authz.core.dependencies.authorization import (
        AuthorizationServiceDep,
        CurrentSubjectDep,
        require_note_access,
    )

    @router.get(
        "/notebooks/{note_id}",
        dependencies=[Depends(require_note_access(NoteRelation.READERS))],
    )
    async def get_note(note_id: str, service: AuthorizationServiceDep):
        ...

The current subject is anonymous by default. Hosting applications plug in
their identity layer with ``app.dependency_overrides[get_current_subject]``.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from typing import Annotated

from fastapi import Depends, Request

from notebook_authz.core.acl import NoteRelation
from notebook_authz.core.exceptions import AppException
from notebook_authz.core.schemas.auth import AuthenticationInfo
from notebook_authz.core.utils.note_access import (
    require_note_owner,
    require_note_reader,
    require_note_writer,
)
from notebook_authz.features.authorization.service import NotebookAuthorizationService
from notebook_authz.infra.logging.context import clear_log_context, set_log_context


def get_authorization_service(request: Request) -> NotebookAuthorizationService:
    """Return the service created by the application lifespan.

    Raises:
        AppException: 503 if the application has not finished starting.
    """
    service = getattr(request.app.state, "authorization_service", None)
    if service is None:
        raise AppException(
            status_code=503,
            detail="Notebook authorization service is not initialized",
            type="authorization-unavailable",
        )
    return service


def get_current_subject() -> AuthenticationInfo:
    """Identity of the caller; anonymous unless the host overrides this dependency."""
    return AuthenticationInfo.anonymous()


AuthorizationServiceDep = Annotated[NotebookAuthorizationService, Depends(get_authorization_service)]
CurrentSubjectDep = Annotated[AuthenticationInfo, Depends(get_current_subject)]

_GUARDS = {
    NoteRelation.READERS: require_note_reader,
    NoteRelation.WRITERS: require_note_writer,
    NoteRelation.OWNERS: require_note_owner,
}


def require_note_access(relation: NoteRelation) -> Callable[..., AsyncIterator[None]]:
    """Dependency factory enforcing a note relation on ``{note_id}`` routes.

    The note id and user are added to the log context for the rest of the
    request.

    Args:
        relation: READERS, WRITERS or OWNERS.

    Returns:
        A dependency raising InsufficientPermissionsError on denial.
    """
    guard = _GUARDS[relation]

    async def _check(
        note_id: str,
        request: Request,
        service: AuthorizationServiceDep,
        subject: CurrentSubjectDep,
    ) -> AsyncIterator[None]:
        set_log_context(note_id=note_id, user=subject.user)
        try:
            guard(service, subject, note_id, request.url.path)
            yield
        finally:
            clear_log_context()

    return _check
