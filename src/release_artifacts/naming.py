"""Bundle naming."""

from __future__ import annotations

import uuid

from release_artifacts.env import ArtifactEnv

ARCHIVE_SUFFIX = ".tgz"


def archive_name(env: ArtifactEnv) -> str:
    """Return ``release-<RELEASE_ID>.tgz``, or a unique ``artifact-<uuid>.tgz``."""
    release_id = env.release_id
    if release_id:
        return f"release-{release_id}{ARCHIVE_SUFFIX}"
    return f"artifact-{uuid.uuid4()}{ARCHIVE_SUFFIX}"


__all__ = ["ARCHIVE_SUFFIX", "archive_name"]
