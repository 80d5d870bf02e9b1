"""Shared test fixtures."""

from __future__ import annotations

import io
import os
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest
from botocore.exceptions import ClientError

from release_artifacts.env import ArtifactEnv
from release_artifacts.observability import StructuredLogger

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


class FakePaginator:
    def __init__(self, client: FakeS3Client) -> None:
        self._client = client

    def paginate(self, *, Bucket: str, Prefix: str = "") -> Iterator[dict[str, Any]]:  # noqa: N803
        self._client.calls.append(("list_objects_v2", {"Bucket": Bucket, "Prefix": Prefix}))
        self._client.raise_if_failing("list_objects_v2", "ListObjectsV2")
        keys = sorted(key for key in self._client.objects if key.startswith(Prefix))
        size = self._client.page_size
        if not keys:
            yield {"KeyCount": 0}
            return
        for start in range(0, len(keys), size):
            chunk = keys[start : start + size]
            yield {
                "KeyCount": len(chunk),
                "Contents": [
                    {
                        "Key": key,
                        "LastModified": self._client.objects[key][1],
                        "Size": len(self._client.objects[key][0]),
                    }
                    for key in chunk
                ],
            }


class FakeS3Client:
    """In-memory stand-in for the subset of the boto3 S3 client the backend uses."""

    def __init__(self, *, page_size: int = 1000) -> None:
        self.objects: dict[str, tuple[bytes, datetime]] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.failures: dict[str, tuple[str, str]] = {}
        self.page_size = page_size
        self._tick = 0

    def add(self, key: str, body: bytes = b"", *, modified: datetime | None = None) -> None:
        self.objects[key] = (body, modified or self._now())

    def fail(self, operation: str, code: str, message: str = "injected failure") -> None:
        self.failures[operation] = (code, message)

    def raise_if_failing(self, operation: str, operation_name: str) -> None:
        if operation in self.failures:
            code, message = self.failures[operation]
            raise ClientError({"Error": {"Code": code, "Message": message}}, operation_name)

    def put_object(self, *, Bucket: str, Key: str, Body: Any) -> dict[str, Any]:  # noqa: N803
        self.calls.append(("put_object", {"Bucket": Bucket, "Key": Key}))
        self.raise_if_failing("put_object", "PutObject")
        self.objects[Key] = (Body.read(), self._now())
        return {"ETag": '"fake"'}

    def get_object(self, *, Bucket: str, Key: str) -> dict[str, Any]:  # noqa: N803
        self.calls.append(("get_object", {"Bucket": Bucket, "Key": Key}))
        self.raise_if_failing("get_object", "GetObject")
        if Key not in self.objects:
            raise ClientError(
                {"Error": {"Code": "NoSuchKey", "Message": "The specified key does not exist."}},
                "GetObject",
            )
        body, _ = self.objects[Key]
        return {"Body": io.BytesIO(body), "ContentLength": len(body)}

    def delete_object(self, *, Bucket: str, Key: str) -> dict[str, Any]:  # noqa: N803
        self.calls.append(("delete_object", {"Bucket": Bucket, "Key": Key}))
        self.raise_if_failing("delete_object", "DeleteObject")
        self.objects.pop(Key, None)
        return {}

    def get_paginator(self, name: str) -> FakePaginator:
        assert name == "list_objects_v2"
        return FakePaginator(self)

    def keys(self) -> list[str]:
        return sorted(self.objects)

    def _now(self) -> datetime:
        self._tick += 1
        return T0 + timedelta(minutes=self._tick)


@pytest.fixture
def fake_s3() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def client_factory(fake_s3: FakeS3Client) -> Any:
    """Client factory that records its keyword arguments and returns ``fake_s3``."""

    def factory(service: str, **kwargs: Any) -> FakeS3Client:
        assert service == "s3"
        factory.kwargs = kwargs  # type: ignore[attr-defined]
        return fake_s3

    return factory


@pytest.fixture
def quiet_logger() -> StructuredLogger:
    return StructuredLogger(program="test-release-artifacts", stream=None)


@pytest.fixture
def s3_env() -> ArtifactEnv:
    return ArtifactEnv(
        {
            "RELEASE_ID": "v42",
            "STATIC_ARTIFACTS_URL": "s3://test-bucket.s3.us-east-1.amazonaws.com/sub/path",
            "STATIC_ARTIFACTS_ACCESS_KEY_ID": "ATESTCLIENT",
            "STATIC_ARTIFACTS_SECRET_ACCESS_KEY": "atestsecretkey",
        }
    )


@pytest.fixture
def artifact_tree(tmp_path: Path) -> Path:
    """A small static-artifacts directory with nesting, an empty dir and a symlink."""
    root = tmp_path / "static-artifacts"
    (root / "assets" / "nested").mkdir(parents=True)
    (root / "empty").mkdir()
    (root / "index.html").write_text("<h1>hello</h1>\n", encoding="utf-8")
    (root / "assets" / "app.js").write_text("console.log('hi');\n", encoding="utf-8")
    (root / "assets" / "nested" / "logo.bin").write_bytes(bytes(range(256)))
    os.symlink("index.html", root / "latest.html")
    return root


def snapshot_tree(root: Path) -> dict[str, str]:
    """Capture every entry under *root* as ``{relative_path: description}``."""
    tree: dict[str, str] = {}
    for path in sorted(root.rglob("*")):
        relative = path.relative_to(root).as_posix()
        if path.is_symlink():
            tree[relative] = f"-> {os.readlink(path)}"
        elif path.is_dir():
            tree[relative] = "<dir>"
        else:
            tree[relative] = path.read_bytes().hex()
    return tree


def set_mtime(path: Path, moment: datetime) -> None:
    stamp = moment.timestamp()
    os.utime(path, (stamp, stamp))
