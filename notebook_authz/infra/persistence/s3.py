"""S3-compatible snapshot backend.

Works with AWS S3, MinIO and other S3-compatible services through boto3.
"""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from typing import TYPE_CHECKING, Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError

from notebook_authz.core.schemas.authorization import AuthorizationSnapshot

from .exceptions import SnapshotLoadError, SnapshotSaveError, map_boto_error

if TYPE_CHECKING:
    from notebook_authz.core.settings.storage import StorageSettings

    from .location import SnapshotLocation

logger = logging.getLogger(__name__)

_MISSING_OBJECT_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


class S3SnapshotPersistence:
    """Snapshot stored as a single object in an S3 bucket.

    Saves stage the serialized snapshot in a local temporary file, upload it
    with ``put_object`` and always remove the temporary file afterwards.

    Example:
        backend = S3SnapshotPersistence(location, storage_settings)
        snapshot = backend.load()
        backend.save(snapshot)
    """

    def __init__(
        self,
        location: SnapshotLocation,
        settings: StorageSettings,
        encoding: str = "utf-8",
        client: Any | None = None,
    ) -> None:
        """Initialize S3 backend.

        Args:
            location: Resolved s3://bucket/key location.
            settings: Storage settings with S3 connection configuration.
            encoding: Text encoding of the snapshot document.
            client: Pre-built boto3 S3 client; one is created from settings if omitted.
        """
        if location.bucket is None or location.key is None:
            msg = "S3 snapshot location requires a bucket and a key"
            raise ValueError(msg)
        self._location = location
        self._bucket = location.bucket
        self._key = location.key
        self.settings = settings
        self._encoding = encoding
        self._client = client

    @property
    def backend_name(self) -> str:
        """Backend name identifier."""
        return "s3"

    @property
    def location(self) -> SnapshotLocation:
        return self._location

    @property
    def client(self) -> Any:
        """boto3 S3 client, created on first use."""
        if self._client is None:
            logger.info(
                "Initializing S3 client",
                extra={
                    "bucket": self._bucket,
                    "endpoint": self.settings.endpoint,
                    "region": self.settings.region,
                },
            )
            self._client = boto3.client("s3", **self.settings.get_boto3_config())
        return self._client

    def load(self) -> AuthorizationSnapshot | None:
        try:
            response = self.client.get_object(Bucket=self._bucket, Key=self._key)
            payload = response["Body"].read()
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in _MISSING_OBJECT_CODES:
                logger.info(
                    "Authorization snapshot not found in S3, starting empty",
                    extra={"bucket": self._bucket, "key": self._key},
                )
                return None
            raise map_boto_error(e, operation="load", location=str(self._location)) from e
        except (BotoCoreError, ValueError) as e:
            # boto3 rejects a malformed endpoint with ValueError when building the client
            raise SnapshotLoadError(
                f"Failed to download {self._location}: {e}",
                metadata={"bucket": self._bucket, "key": self._key, "error": str(e)},
            ) from e

        try:
            if isinstance(payload, bytes):
                payload = payload.decode(self._encoding)
            snapshot = AuthorizationSnapshot.from_json(payload)
        except (UnicodeDecodeError, ValidationError) as e:
            raise SnapshotLoadError(
                f"Malformed authorization snapshot in {self._location}",
                metadata={"bucket": self._bucket, "key": self._key, "error": str(e)},
            ) from e

        logger.info(
            "Authorization snapshot downloaded from S3",
            extra={"bucket": self._bucket, "key": self._key, "notes": len(snapshot.auth_info)},
        )
        return snapshot

    def save(self, snapshot: AuthorizationSnapshot) -> None:
        tmp_path: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding=self._encoding,
                prefix="notebook-authorization-",
                suffix=".json",
                delete=False,
            ) as tmp:
                tmp_path = tmp.name
                tmp.write(snapshot.to_json())

            put_kwargs: dict[str, Any] = {
                "Bucket": self._bucket,
                "Key": self._key,
                "ContentType": "application/json",
            }
            if self.settings.server_side_encryption:
                put_kwargs["ServerSideEncryption"] = "AES256"

            with open(tmp_path, "rb") as body:
                self.client.put_object(Body=body, **put_kwargs)

        except ClientError as e:
            raise map_boto_error(e, operation="save", location=str(self._location)) from e
        except (BotoCoreError, OSError, ValueError) as e:
            raise SnapshotSaveError(
                f"Failed to upload {self._location}: {e}",
                metadata={"bucket": self._bucket, "key": self._key, "error": str(e)},
            ) from e
        finally:
            if tmp_path is not None:
                with contextlib.suppress(FileNotFoundError):
                    os.unlink(tmp_path)

        logger.debug(
            "Authorization snapshot uploaded to S3",
            extra={"bucket": self._bucket, "key": self._key, "notes": len(snapshot.auth_info)},
        )
