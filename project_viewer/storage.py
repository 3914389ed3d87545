"""Read-only object storage backends."""

from __future__ import annotations

from typing import Protocol

import boto3
import structlog
from botocore.client import BaseClient
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from google.api_core.exceptions import GoogleAPIError, NotFound
from google.auth.exceptions import GoogleAuthError
from google.cloud import storage

try:
    from google.cloud.storage.exceptions import DataCorruption
except ImportError:  # google-cloud-storage < 3 raises the resumable-media class
    from google.resumable_media.common import DataCorruption

from project_viewer.config import Settings

LOGGER = structlog.get_logger(__name__)

S3_MISSING_CODES = {"NoSuchKey", "NotFound", "404"}


class StorageError(Exception):
    """A get-object call failed for a reason other than the object being absent."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(f"{key}: {message}")
        self.key = key


class ObjectStore(Protocol):
    """Minimal read interface used by the resolver."""

    def get(self, key: str) -> bytes | None:
        """Return the object's bytes, or ``None`` when no such object exists."""


class GCSObjectStore:
    def __init__(self, bucket, timeout: float = 5.0) -> None:
        self.bucket = bucket
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "GCSObjectStore":
        client = storage.Client()
        return cls(client.bucket(settings.bucket), timeout=settings.storage_timeout)

    def get(self, key: str) -> bytes | None:
        blob = self.bucket.blob(key)
        try:
            if not blob.exists(timeout=self.timeout, retry=None):
                return None
            return blob.download_as_bytes(timeout=self.timeout, retry=None)
        except NotFound:
            # deleted between the exists() check and the download
            return None
        except (GoogleAPIError, GoogleAuthError, DataCorruption, OSError) as exc:
            raise StorageError(key, str(exc)) from exc


class S3ObjectStore:
    def __init__(self, client: BaseClient, bucket: str) -> None:
        self.client = client
        self.bucket = bucket

    @classmethod
    def from_settings(cls, settings: Settings) -> "S3ObjectStore":
        client_kwargs: dict[str, object] = {
            "region_name": settings.aws_region,
            "config": Config(
                signature_version="s3v4",
                connect_timeout=settings.storage_timeout,
                read_timeout=settings.storage_timeout,
                retries={"total_max_attempts": 1, "mode": "standard"},
            ),
        }
        if settings.aws_access_key_id and settings.aws_secret_access_key:
            client_kwargs["aws_access_key_id"] = settings.aws_access_key_id
            client_kwargs["aws_secret_access_key"] = settings.aws_secret_access_key
        return cls(boto3.client("s3", **client_kwargs), settings.bucket)

    def get(self, key: str) -> bytes | None:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
            return response["Body"].read()
        except ClientError as exc:
            code = str(exc.response.get("Error", {}).get("Code", ""))
            if code in S3_MISSING_CODES:
                return None
            raise StorageError(key, str(exc)) from exc
        except (BotoCoreError, OSError) as exc:
            raise StorageError(key, str(exc)) from exc


def build_store(settings: Settings) -> ObjectStore:
    """Create the configured backend once at process start."""

    if settings.storage_backend == "s3":
        store: ObjectStore = S3ObjectStore.from_settings(settings)
    else:
        store = GCSObjectStore.from_settings(settings)
    LOGGER.info(
        "object_store_ready",
        backend=settings.storage_backend,
        bucket=settings.bucket,
    )
    return store
