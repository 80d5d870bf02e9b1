"""Retention policy for stored bundles."""

from __future__ import annotations

from collections.abc import Iterable

from release_artifacts.backends.base import StoredArtifact, newest_first

DEFAULT_KEEP = 2


def expired(
    artifacts: Iterable[StoredArtifact],
    *,
    keep: int = DEFAULT_KEEP,
) -> list[StoredArtifact]:
    """Return every bundle except the *keep* most recently modified, newest first."""
    if keep < 0:
        raise ValueError(f"keep must be non-negative, got {keep}")
    return newest_first(list(artifacts))[keep:]


__all__ = ["DEFAULT_KEEP", "expired"]
