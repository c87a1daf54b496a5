"""FastAPI dependencies for route handlers.

Usage:
    from notebook_authz.core.dependencies import AuthorizationServiceDep, CurrentSubjectDep
"""

from notebook_authz.core.dependencies.authorization import (
    AuthorizationServiceDep,
    CurrentSubjectDep,
    get_authorization_service,
    get_current_subject,
    require_note_access,
)

__all__ = [
    "AuthorizationServiceDep",
    "CurrentSubjectDep",
    "get_authorization_service",
    "get_current_subject",
    "require_note_access",
]
