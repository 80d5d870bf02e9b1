"""Artifact storage backend interfaces and implementations."""

from .base import ArtifactBackend, BackendKind, StoredArtifact, newest_first
from .local import LocalBackend
from .s3 import DEFAULT_REGION, S3Backend, S3Location, key_prefix_of, parse_s3_url

__all__ = [
    "DEFAULT_REGION",
    "ArtifactBackend",
    "BackendKind",
    "LocalBackend",
    "S3Backend",
    "S3Location",
    "StoredArtifact",
    "key_prefix_of",
    "newest_first",
    "parse_s3_url",
]
