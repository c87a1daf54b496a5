"""Persistence-specific exceptions for authorization snapshots.

Structured errors with HTTP status codes and metadata following
RFC 7807 Problem Details for HTTP APIs.

Example:
    ```python
    from notebook_authz.infra.persistence.exceptions import map_boto_error

    try:
        client.put_object(Bucket=bucket, Key=key, Body=body)
    except ClientError as e:
        raise map_boto_error(e, operation="save", location=location) from e
    ```
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from notebook_authz.core.exceptions import AppException

if TYPE_CHECKING:
    from botocore.exceptions import ClientError


class PersistenceError(AppException):
    """Base exception for all snapshot persistence errors.

    Attributes:
        code: Error code identifier for programmatic error handling.
        message: Human-readable error message.

    Example:
        ```python
        raise PersistenceError(
            message="Snapshot backend unreachable",
            code="PERSISTENCE_ERROR",
            metadata={"location": "s3://notebooks/authorization.json"},
        )
        ```
    """

    def __init__(
        self,
        message: str,
        code: str = "PERSISTENCE_ERROR",
        status_code: int = 500,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Initialize persistence error.

        Args:
            message: Human-readable error message.
            code: Error code for programmatic handling.
            status_code: HTTP status code (default: 500).
            metadata: Additional error context.
        """
        self.code = code
        self.message = message
        super().__init__(
            status_code=status_code,
            detail=message,
            type=code.lower().replace("_", "-"),
            extra=metadata or {},
        )


class PersistenceNotConfiguredError(PersistenceError):
    """Raised when the snapshot location cannot be resolved to a backend.

    Example:
        ```python
        raise PersistenceNotConfiguredError(
            "Malformed S3 location: s3://bucket-only",
            metadata={"storage_path": "s3://bucket-only"},
        )
        ```
    """

    def __init__(
        self,
        message: str = "Snapshot persistence is not configured",
        metadata: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="PERSISTENCE_NOT_CONFIGURED",
            status_code=503,
            metadata=metadata,
        )


class SnapshotLoadError(PersistenceError):
    """Raised when an existing snapshot cannot be read or parsed."""

    def __init__(
        self,
        message: str,
        metadata: dict[str, Any] | None = None,
        status_code: int = 500,
    ) -> None:
        super().__init__(
            message=message,
            code="SNAPSHOT_LOAD_ERROR",
            status_code=status_code,
            metadata=metadata,
        )


class SnapshotSaveError(PersistenceError):
    """Raised when a snapshot cannot be written to its backend."""

    def __init__(
        self,
        message: str,
        metadata: dict[str, Any] | None = None,
        status_code: int = 500,
    ) -> None:
        super().__init__(
            message=message,
            code="SNAPSHOT_SAVE_ERROR",
            status_code=status_code,
            metadata=metadata,
        )


_PERMISSION_CODES = frozenset(
    {
        "AccessDenied",
        "ExpiredToken",
        "InvalidAccessKeyId",
        "SignatureDoesNotMatch",
        "InvalidToken",
        "TokenRefreshRequired",
    }
)
_TIMEOUT_CODES = frozenset({"RequestTimeout", "RequestTimeTooSkewed", "SlowDown"})
_NOT_FOUND_CODES = frozenset({"NoSuchKey", "NoSuchBucket"})


def map_boto_error(
    error: ClientError,
    operation: str,
    location: str | None = None,
) -> PersistenceError:
    """Map a botocore ClientError to a snapshot persistence error.

    Args:
        error: The botocore ClientError to map.
        operation: Either "load" or "save".
        location: Snapshot location being accessed.

    Returns:
        SnapshotLoadError for loads, SnapshotSaveError for saves, with the
        status code derived from the AWS error code.

    Error Code Mappings:
        - NoSuchKey, NoSuchBucket -> 404
        - AccessDenied, ExpiredToken, InvalidAccessKeyId, ... -> 403
        - RequestTimeout, RequestTimeTooSkewed, SlowDown -> 504
        - Others -> 500
    """
    error_code = error.response.get("Error", {}).get("Code", "Unknown")
    error_message = error.response.get("Error", {}).get("Message", str(error))

    metadata: dict[str, Any] = {
        "operation": operation,
        "aws_error_code": error_code,
        "aws_error_message": error_message,
        "request_id": error.response.get("ResponseMetadata", {}).get("RequestId"),
    }
    if location:
        metadata["location"] = location

    if error_code in _NOT_FOUND_CODES:
        status_code = 404
    elif error_code in _PERMISSION_CODES:
        status_code = 403
    elif error_code in _TIMEOUT_CODES:
        status_code = 504
    else:
        status_code = 500

    message = f"{operation.capitalize()} failed: {error_message}"
    if operation == "save":
        return SnapshotSaveError(message, metadata=metadata, status_code=status_code)
    return SnapshotLoadError(message, metadata=metadata, status_code=status_code)
