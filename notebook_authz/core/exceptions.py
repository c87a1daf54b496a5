"""Custom exception classes for the notebook authorization service."""

from __future__ import annotations

from typing import Any


class AppException(Exception):
    """Base application exception.

    All custom exceptions should inherit from this class.
    Follows RFC 7807 Problem Details for HTTP APIs.

    Attributes:
        status_code: HTTP status code for the error.
        detail: Human-readable error message.
        type: Error type identifier (used in RFC 7807 problem details).
        title: Short, human-readable summary of the problem type.
        instance: URI reference that identifies the specific occurrence of the problem.
        extra: Additional context-specific information about the error.

    Example:
        raise AppException(
            status_code=503,
            detail="Authorization snapshot unavailable",
            type="snapshot-unavailable",
            extra={"location": "s3://notebooks/authorization.json"}
        )
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        type: str = "about:blank",
        title: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize application exception.

        Args:
            status_code: HTTP status code.
            detail: Human-readable error message.
            type: Error type identifier.
            title: Short summary of the problem type.
            instance: URI reference identifying this specific occurrence.
            extra: Additional context about the error.
        """
        self.status_code = status_code
        self.detail = detail
        self.type = type
        self.title = title or self._default_title(status_code)
        self.instance = instance
        self.extra = extra or {}
        super().__init__(detail)

    @staticmethod
    def _default_title(status_code: int) -> str:
        """Get default title for HTTP status code."""
        titles = {
            400: "Bad Request",
            401: "Unauthorized",
            403: "Forbidden",
            404: "Not Found",
            422: "Unprocessable Entity",
            500: "Internal Server Error",
            503: "Service Unavailable",
        }
        return titles.get(status_code, "Error")


class ForbiddenException(AppException):
    """Exception raised for authorization failures.

    Example:
        raise ForbiddenException(
            detail="Only note owners may change permissions",
            type="forbidden",
            extra={"note_id": "2A94M5J1Z"}
        )
    """

    def __init__(
        self,
        detail: str,
        type: str = "forbidden",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize forbidden exception.

        Args:
            detail: Human-readable error message.
            type: Error type identifier.
            instance: URI reference identifying this specific occurrence.
            extra: Additional context about the error.
        """
        super().__init__(
            status_code=403,
            detail=detail,
            type=type,
            title="Forbidden",
            instance=instance,
            extra=extra,
        )


class InsufficientPermissionsError(ForbiddenException):
    """Exception raised when a subject lacks a note relation.

    Example:
        raise InsufficientPermissionsError("writers", note_id="2A94M5J1Z")
    """

    def __init__(
        self,
        required_relation: str | None = None,
        note_id: str | None = None,
        detail: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize insufficient permissions exception."""
        if detail is None:
            detail = "Insufficient permissions"
            if required_relation and note_id:
                detail = f"Insufficient privileges: {required_relation} of note {note_id} required"
        final_extra: dict[str, Any] = {}
        if required_relation:
            final_extra["required_relation"] = required_relation
        if note_id:
            final_extra["note_id"] = note_id
        if extra:
            final_extra.update(extra)
        super().__init__(
            detail=detail,
            type="insufficient-permissions",
            instance=instance,
            extra=final_extra or None,
        )
