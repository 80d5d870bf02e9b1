"""Local filesystem backend: bundles are ``.tgz`` files in one directory.

There is no latest-fallback here; a missing bundle is a hard ``NotFound``.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from release_artifacts.backends.base import BackendKind, StoredArtifact, newest_first
from release_artifacts.errors import ArchiveError, NotFound
from release_artifacts.naming import ARCHIVE_SUFFIX


@dataclass(slots=True)
class LocalBackend:
    directory: Path
    kind: BackendKind = "file"

    def path_for(self, name: str) -> Path:
        return self.directory / name

    def put(self, name: str, archive: Path) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ArchiveError(
                "creating the filesystem destination directory",
                context={"operation": "put", "path": str(self.directory), "error": str(exc)},
            ) from exc
        destination = self.path_for(name)
        try:
            shutil.copyfile(archive, destination)
        except OSError as exc:
            raise ArchiveError(
                "writing the archive file",
                context={"operation": "put", "path": str(destination), "error": str(exc)},
            ) from exc

    def get(self, name: str, destination: Path) -> None:
        source = self.path_for(name)
        if not source.is_file():
            raise NotFound(
                f"Archive `{name}` does not exist.",
                hint="Run save first, or check RELEASE_ID and STATIC_ARTIFACTS_URL.",
                context={"operation": "get", "path": str(source)},
            )
        try:
            shutil.copyfile(source, destination)
        except OSError as exc:
            raise ArchiveError(
                "reading the archive file",
                context={"operation": "get", "path": str(source), "error": str(exc)},
            ) from exc

    def fetch(self, name: str, destination: Path) -> str:
        self.get(name, destination)
        return name

    def list(self) -> list[StoredArtifact]:
        try:
            entries = list(self.directory.iterdir())
        except OSError as exc:
            raise ArchiveError(
                "reading directory entries",
                context={"operation": "list", "path": str(self.directory), "error": str(exc)},
            ) from exc

        artifacts: list[StoredArtifact] = []
        for entry in entries:
            if entry.suffix != ARCHIVE_SUFFIX:
                continue
            try:
                if not entry.is_file():
                    continue
                modified = entry.stat().st_mtime
            except OSError:
                # vanished between listing and stat
                continue
            artifacts.append(
                StoredArtifact(key=entry.name, modified=datetime.fromtimestamp(modified, tz=UTC))
            )
        return newest_first(artifacts)

    def delete(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink()
        except OSError as exc:
            raise ArchiveError(
                f"removing {key} during artifact garbage collection",
                context={"operation": "delete", "path": str(path), "error": str(exc)},
            ) from exc


__all__ = ["LocalBackend"]
