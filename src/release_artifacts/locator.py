"""Storage URL parsing, required-configuration guards and backend selection."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote, urlsplit

import boto3

from release_artifacts.backends import (
    ArtifactBackend,
    BackendKind,
    LocalBackend,
    S3Backend,
    S3Location,
    parse_s3_url,
)
from release_artifacts.backends.s3 import ClientFactory
from release_artifacts.env import (
    ACCESS_KEY_ID_KEY,
    RELEASE_ID_KEY,
    SECRET_ACCESS_KEY_KEY,
    URL_KEY,
    ArtifactEnv,
)
from release_artifacts.errors import ConfigurationMissing, StorageURLInvalid, UnsupportedScheme
from release_artifacts.observability import StructuredLogger

SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*$")

REQUIRED_KEYS: dict[BackendKind, tuple[str, ...]] = {
    "file": (RELEASE_ID_KEY, URL_KEY),
    "s3": (RELEASE_ID_KEY, ACCESS_KEY_ID_KEY, SECRET_ACCESS_KEY_KEY, URL_KEY),
}


@dataclass(frozen=True, slots=True)
class FileLocation:
    """Directory named by a ``file://`` storage URL."""

    directory: Path


StorageLocator = FileLocation | S3Location


def detect_scheme(url: str) -> str:
    try:
        parts = urlsplit(url)
    except ValueError as exc:
        raise StorageURLInvalid(
            "Storage URL could not be parsed.",
            context={"url": url, "error": str(exc)},
        ) from exc
    if not parts.scheme or not SCHEME_PATTERN.match(parts.scheme):
        raise StorageURLInvalid(
            "Storage URL has no scheme.",
            hint="Use file:///absolute/path or s3://bucket/prefix.",
            context={"url": url},
        )
    return parts.scheme.lower()


def parse_storage_url(url: str) -> StorageLocator:
    scheme = detect_scheme(url)
    if scheme == "file":
        path = unquote(urlsplit(url).path)
        if not path:
            raise StorageURLInvalid(
                "File storage URL has no path.",
                hint="Use file:///absolute/path.",
                context={"url": url},
            )
        return FileLocation(directory=Path(path))
    if scheme == "s3":
        return parse_s3_url(url)
    raise UnsupportedScheme(
        scheme,
        hint="Supported schemes are file:// and s3://.",
        context={"url": url},
    )


def guard(env: ArtifactEnv, kind: BackendKind, *, require_release_id: bool = True) -> None:
    """Fail with every missing required key for *kind* in one ``ConfigurationMissing``."""
    missing = [
        key
        for key in REQUIRED_KEYS[kind]
        if key not in env and (require_release_id or key != RELEASE_ID_KEY)
    ]
    if missing:
        raise ConfigurationMissing(missing, context={"backend": kind})


def require_storage_url(env: ArtifactEnv) -> str:
    url = env.storage_url
    if url is None:
        raise ConfigurationMissing([URL_KEY])
    return url


def select_backend(
    env: ArtifactEnv,
    *,
    guarded: bool = True,
    require_release_id: bool = True,
    client_factory: ClientFactory = boto3.client,
    logger: StructuredLogger | None = None,
) -> ArtifactBackend:
    """Pick the backend for ``STATIC_ARTIFACTS_URL`` and validate its configuration.

    The local backend skips its guard when *guarded* is false; the S3 backend always
    needs credentials, so only the release identifier can be waived for it.
    """
    locator = parse_storage_url(require_storage_url(env))
    if isinstance(locator, FileLocation):
        if guarded:
            guard(env, "file", require_release_id=require_release_id)
        return LocalBackend(directory=locator.directory)

    guard(env, "s3", require_release_id=require_release_id)
    return S3Backend.connect(
        locator,
        access_key_id=env[ACCESS_KEY_ID_KEY],
        secret_access_key=env[SECRET_ACCESS_KEY_KEY],
        region=env.region,
        client_factory=client_factory,
        logger=logger,
    )


__all__ = [
    "REQUIRED_KEYS",
    "FileLocation",
    "StorageLocator",
    "detect_scheme",
    "guard",
    "parse_storage_url",
    "require_storage_url",
    "select_backend",
]
