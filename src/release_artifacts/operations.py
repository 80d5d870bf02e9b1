"""Save, load and garbage-collect release artifact bundles.

Each operation selects its backend once from the snapshot and runs strictly
sequentially: archive then upload, download then extract, list then delete.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

import boto3

from release_artifacts.archive import create_archive, extract_archive
from release_artifacts.backends.s3 import ClientFactory
from release_artifacts.env import ArtifactEnv
from release_artifacts.locator import require_storage_url, select_backend
from release_artifacts.naming import archive_name
from release_artifacts.observability import StructuredLogger
from release_artifacts.retention import DEFAULT_KEEP, expired

SAVE_PROGRAM = "save-release-artifacts"
LOAD_PROGRAM = "load-release-artifacts"
GC_PROGRAM = "gc-release-artifacts"


def save(
    env: ArtifactEnv,
    source_dir: str | Path,
    *,
    logger: StructuredLogger | None = None,
    client_factory: ClientFactory = boto3.client,
) -> str:
    """Archive *source_dir* and persist it; return the bundle name."""
    logger = logger or StructuredLogger(program=SAVE_PROGRAM)
    backend = select_backend(env, client_factory=client_factory, logger=logger)
    name = archive_name(env)
    verb = "writing" if backend.kind == "file" else "uploading"
    logger.log(operation="save", backend=backend.kind, message=f"{verb} archive: {name}")

    with tempfile.TemporaryDirectory(prefix="release-artifacts-") as scratch:
        archive = create_archive(source_dir, Path(scratch) / name)
        backend.put(name, archive)
    return name


def load(
    env: ArtifactEnv,
    dest_dir: str | Path,
    *,
    logger: StructuredLogger | None = None,
    client_factory: ClientFactory = boto3.client,
) -> str:
    """Retrieve the bundle for this release (or the latest one on S3) into *dest_dir*.

    Returns the name actually loaded: the bundle name for ``file://`` storage, the
    object key for S3.
    """
    logger = logger or StructuredLogger(program=LOAD_PROGRAM)
    require_storage_url(env)
    backend = select_backend(env, guarded=False, client_factory=client_factory, logger=logger)
    name = archive_name(env)
    verb = "reading" if backend.kind == "file" else "downloading"
    logger.log(operation="load", backend=backend.kind, message=f"{verb} archive: {name}")

    with tempfile.TemporaryDirectory(prefix="release-artifacts-") as scratch:
        archive = Path(scratch) / "download.tgz"
        resolved = backend.fetch(name, archive)
        extract_archive(archive, dest_dir)
    return resolved


def gc(
    env: ArtifactEnv,
    *,
    keep: int = DEFAULT_KEEP,
    logger: StructuredLogger | None = None,
    client_factory: ClientFactory = boto3.client,
) -> list[str]:
    """Delete every stored bundle except the *keep* newest; return the deleted keys.

    Stops at the first failed deletion.
    """
    logger = logger or StructuredLogger(program=GC_PROGRAM)
    require_storage_url(env)
    backend = select_backend(
        env,
        guarded=False,
        require_release_id=False,
        client_factory=client_factory,
        logger=logger,
    )
    logger.log(operation="gc", backend=backend.kind, message="listing archives")
    stale = expired(backend.list(), keep=keep)

    deleted: list[str] = []
    for artifact in stale:
        logger.log(
            operation="gc", backend=backend.kind, message=f"removing archive: {artifact.key}"
        )
        backend.delete(artifact.key)
        deleted.append(artifact.key)
    return deleted


__all__ = ["GC_PROGRAM", "LOAD_PROGRAM", "SAVE_PROGRAM", "gc", "load", "save"]
