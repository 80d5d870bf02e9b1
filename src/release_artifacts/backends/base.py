"""Protocol for artifact storage backends."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Literal, Protocol

BackendKind = Literal["file", "s3"]

EPOCH = datetime.fromtimestamp(0, tz=UTC)


@dataclass(frozen=True, slots=True)
class StoredArtifact:
    """A stored bundle as reported by ``list()``.

    ``key`` is the backend-native identifier accepted by ``delete()``: a file name
    for the local backend, a full object key for S3.
    """

    key: str
    modified: datetime


class ArtifactBackend(Protocol):
    kind: BackendKind

    def put(self, name: str, archive: Path) -> None:
        """Persist the archive file at *archive* under bundle *name*."""

    def get(self, name: str, destination: Path) -> None:
        """Write bundle *name* to *destination*; raise ``NotFound`` when absent."""

    def fetch(self, name: str, destination: Path) -> str:
        """Like ``get`` but applies the backend's resolution policy.

        Returns the name actually retrieved.
        """

    def list(self) -> list[StoredArtifact]:
        """Return every stored bundle with its last-modified time."""

    def delete(self, key: str) -> None:
        """Remove the stored bundle identified by *key*."""


def newest_first(artifacts: list[StoredArtifact]) -> list[StoredArtifact]:
    """Sort *artifacts* by descending modification time."""
    return sorted(artifacts, key=lambda artifact: artifact.modified, reverse=True)


__all__ = ["EPOCH", "ArtifactBackend", "BackendKind", "StoredArtifact", "newest_first"]
