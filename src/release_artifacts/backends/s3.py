"""S3 object storage backend.

Bundles are objects named ``<prefix>/<bundle>`` (or just ``<bundle>``) in one
bucket. When an exact key is missing, ``fetch`` falls back to the most recently
modified object under the same key prefix, so a process that does not know the
current release identifier can still load the latest bundle.
"""

from __future__ import annotations

import re
import shutil
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from release_artifacts.backends.base import EPOCH, BackendKind, StoredArtifact, newest_first
from release_artifacts.errors import (
    ArchiveError,
    NotFound,
    StorageError,
    StorageURLHostMissing,
    StorageURLInvalid,
)
from release_artifacts.observability import StructuredLogger

DEFAULT_REGION = "us-east-1"

S3_HOST_PATTERN = re.compile(r"^(?P<bucket>[^.]+)\.s3\.(?P<region>[^.]+)\.amazonaws\.com$")

MISSING_KEY_CODES = frozenset({"NoSuchKey"})

ClientFactory = Callable[..., Any]


@dataclass(frozen=True, slots=True)
class S3Location:
    bucket: str
    region: str | None = None
    prefix: str | None = None

    def key_for(self, name: str) -> str:
        if self.prefix:
            return f"{self.prefix}/{name}"
        return name

    def list_prefix(self) -> str:
        return f"{self.prefix}/" if self.prefix else ""


def parse_s3_url(url: str) -> S3Location:
    """Split an ``s3://`` URL into bucket, optional region and optional key prefix.

    ``s3://bucket.s3.us-west-2.amazonaws.com/sub/path`` carries its region in the
    host; any other host is taken as the bare bucket name.
    """
    try:
        parts = urlsplit(url)
        host = parts.hostname
    except ValueError as exc:
        raise StorageURLInvalid(
            "Storage URL could not be parsed.",
            context={"url": url, "error": str(exc)},
        ) from exc
    if not host:
        raise StorageURLHostMissing(
            "S3 URL is missing host.",
            hint=(
                "Use s3://<bucket>/<prefix> or "
                "s3://<bucket>.s3.<region>.amazonaws.com/<prefix>."
            ),
            context={"url": url},
        )

    region: str | None = None
    match = S3_HOST_PATTERN.match(host)
    if match is not None:
        bucket = match.group("bucket")
        region = match.group("region")
    else:
        bucket = host
    prefix = parts.path.strip("/") or None
    return S3Location(bucket=bucket, region=region, prefix=prefix)


def key_prefix_of(key: str) -> str:
    """Return every ``/`` segment of *key* but the last, with a trailing ``/``."""
    head, sep, _ = key.rpartition("/")
    return f"{head}{sep}" if sep else ""


@dataclass(slots=True)
class S3Backend:
    location: S3Location
    client: Any
    logger: StructuredLogger | None = None
    kind: BackendKind = field(default="s3", init=False)

    @classmethod
    def connect(
        cls,
        location: S3Location,
        *,
        access_key_id: str,
        secret_access_key: str,
        region: str | None = None,
        client_factory: ClientFactory = boto3.client,
        logger: StructuredLogger | None = None,
    ) -> S3Backend:
        """Build a client for *location*.

        Region precedence: the URL host, then *region*, then ``us-east-1``.
        """
        client = client_factory(
            "s3",
            region_name=location.region or region or DEFAULT_REGION,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
        )
        return cls(location=location, client=client, logger=logger)

    @property
    def bucket(self) -> str:
        return self.location.bucket

    def put(self, name: str, archive: Path) -> None:
        key = self.location.key_for(name)
        try:
            with archive.open("rb") as body:
                self._call("put_object", Bucket=self.bucket, Key=key, Body=body)
        except OSError as exc:
            raise ArchiveError(
                "streaming the archive body",
                context={"operation": "put", "path": str(archive), "error": str(exc)},
            ) from exc

    def get(self, name: str, destination: Path) -> None:
        self.download(self.location.key_for(name), destination)

    def fetch(self, name: str, destination: Path) -> str:
        key = self.location.key_for(name)
        try:
            self.download(key, destination)
        except StorageError as exc:
            if exc.provider_code not in MISSING_KEY_CODES:
                raise
        else:
            return key

        self._log(
            "fetch",
            f"specific artifact not found '{key}', instead getting latest artifact",
        )
        prefix = key_prefix_of(key)
        latest = self.find_latest(prefix)
        if latest is None:
            raise NotFound(
                f"Nothing found in bucket '{self.bucket}' prefix '{prefix}'.",
                context={"operation": "fetch", "bucket": self.bucket, "prefix": prefix},
            )
        self._log("fetch", f"getting latest artifact '{latest}'")
        self.download(latest, destination)
        return latest

    def download(self, key: str, destination: Path) -> int:
        response = self._call("get_object", Bucket=self.bucket, Key=key)
        body = response["Body"]
        try:
            with destination.open("wb") as handle:
                shutil.copyfileobj(body, handle)
                byte_count = handle.tell()
        except OSError as exc:
            raise ArchiveError(
                "writing the downloaded archive",
                context={"operation": "download", "path": str(destination), "error": str(exc)},
            ) from exc
        except BotoCoreError as exc:
            raise _transport_error(exc, operation="get_object", key=key) from exc
        finally:
            body.close()
        self._log("download", f"received {byte_count}-bytes", extra={"key": key})
        return byte_count

    def find_latest(self, prefix: str) -> str | None:
        objects = self.list_objects(prefix)
        if not objects:
            return None
        return newest_first(objects)[0].key

    def list(self) -> list[StoredArtifact]:
        return newest_first(self.list_objects(self.location.list_prefix()))

    def list_objects(self, prefix: str) -> list[StoredArtifact]:
        artifacts: list[StoredArtifact] = []
        paginator = self.client.get_paginator("list_objects_v2")
        try:
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                for obj in page.get("Contents", []):
                    artifacts.append(
                        StoredArtifact(key=obj["Key"], modified=obj.get("LastModified") or EPOCH)
                    )
        except ClientError as exc:
            raise _storage_error(exc, operation="list_objects_v2", key=prefix) from exc
        except BotoCoreError as exc:
            raise _transport_error(exc, operation="list_objects_v2", key=prefix) from exc
        return artifacts

    def delete(self, key: str) -> None:
        response = self._call("delete_object", Bucket=self.bucket, Key=key)
        # DeleteMarker is only reported by versioned buckets; it is not acted on.
        if "DeleteMarker" in response:
            self._log(
                "delete",
                f"deleted '{key}'",
                extra={"delete_marker": bool(response["DeleteMarker"])},
            )

    def _call(self, operation: str, **params: Any) -> dict[str, Any]:
        try:
            return getattr(self.client, operation)(**params)
        except ClientError as exc:
            raise _storage_error(exc, operation=operation, key=params.get("Key", "")) from exc
        except BotoCoreError as exc:
            raise _transport_error(exc, operation=operation, key=params.get("Key", "")) from exc

    def _log(self, operation: str, message: str, *, extra: dict[str, Any] | None = None) -> None:
        if self.logger is not None:
            self.logger.log(operation=operation, backend=self.kind, message=message, extra=extra)


def _storage_error(exc: ClientError, *, operation: str, key: str) -> StorageError:
    error = exc.response.get("Error", {})
    return StorageError(
        error.get("Code"),
        error.get("Message"),
        context={"operation": operation, "key": key},
    )


def _transport_error(exc: BotoCoreError, *, operation: str, key: str) -> StorageError:
    return StorageError(
        type(exc).__name__,
        str(exc),
        context={"operation": operation, "key": key},
    )


__all__ = [
    "DEFAULT_REGION",
    "ClientFactory",
    "S3Backend",
    "S3Location",
    "key_prefix_of",
    "parse_s3_url",
]
