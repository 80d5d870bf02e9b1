"""Public package entrypoint for release artifact storage."""

from .archive import create_archive, extract_archive
from .backends import LocalBackend, S3Backend, S3Location, StoredArtifact, parse_s3_url
from .env import ArtifactEnv, capture_env
from .errors import (
    ArchiveError,
    ConfigurationMissing,
    ErrorCode,
    NotFound,
    ReleaseArtifactsError,
    StorageError,
    StorageURLHostMissing,
    StorageURLInvalid,
    UnsupportedScheme,
)
from .locator import FileLocation, StorageLocator, guard, parse_storage_url, select_backend
from .naming import archive_name
from .observability import StructuredLogger
from .operations import gc, load, save
from .retention import expired

__all__ = [
    "ArchiveError",
    "ArtifactEnv",
    "ConfigurationMissing",
    "ErrorCode",
    "FileLocation",
    "LocalBackend",
    "NotFound",
    "ReleaseArtifactsError",
    "S3Backend",
    "S3Location",
    "StorageError",
    "StorageLocator",
    "StorageURLHostMissing",
    "StorageURLInvalid",
    "StoredArtifact",
    "StructuredLogger",
    "UnsupportedScheme",
    "archive_name",
    "capture_env",
    "create_archive",
    "expired",
    "extract_archive",
    "gc",
    "guard",
    "load",
    "parse_s3_url",
    "parse_storage_url",
    "save",
    "select_backend",
]
