"""Environment snapshot of the configuration that drives artifact storage."""

from __future__ import annotations

import os
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

ENV_PREFIX = "STATIC_ARTIFACTS_"

URL_KEY = "STATIC_ARTIFACTS_URL"
ACCESS_KEY_ID_KEY = "STATIC_ARTIFACTS_ACCESS_KEY_ID"
SECRET_ACCESS_KEY_KEY = "STATIC_ARTIFACTS_SECRET_ACCESS_KEY"
REGION_KEY = "STATIC_ARTIFACTS_REGION"
RELEASE_ID_KEY = "RELEASE_ID"

DEFAULT_METADATA_DIR = Path("/etc/heroku")
RELEASE_ID_FILENAME = "release_id"


@dataclass(frozen=True, slots=True)
class ArtifactEnv(Mapping[str, str]):
    """Immutable mapping of recognized configuration keys.

    Keys with empty values are never stored, so presence means "configured".
    """

    entries: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        cleaned = {
            key: value for key, value in self.entries.items() if _is_recognized(key) and value
        }
        object.__setattr__(self, "entries", MappingProxyType(cleaned))

    def __getitem__(self, key: str) -> str:
        return self.entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def storage_url(self) -> str | None:
        return self.entries.get(URL_KEY)

    @property
    def release_id(self) -> str | None:
        return self.entries.get(RELEASE_ID_KEY)

    @property
    def access_key_id(self) -> str | None:
        return self.entries.get(ACCESS_KEY_ID_KEY)

    @property
    def secret_access_key(self) -> str | None:
        return self.entries.get(SECRET_ACCESS_KEY_KEY)

    @property
    def region(self) -> str | None:
        return self.entries.get(REGION_KEY)


def capture_env(
    environ: Mapping[str, str] | None = None,
    *,
    metadata_dir: str | Path | None = DEFAULT_METADATA_DIR,
) -> ArtifactEnv:
    """Collect artifact-storage configuration from *environ* (default ``os.environ``).

    When ``<metadata_dir>/release_id`` is readable its trimmed contents override
    ``RELEASE_ID``. A missing or unreadable file is not an error.
    """
    source = os.environ if environ is None else environ
    captured = {key: value for key, value in source.items() if _is_recognized(key)}
    if metadata_dir is not None:
        release_id = _read_release_id(Path(metadata_dir))
        if release_id:
            captured[RELEASE_ID_KEY] = release_id
    return ArtifactEnv(captured)


def _is_recognized(key: str) -> bool:
    return key.startswith(ENV_PREFIX) or key == RELEASE_ID_KEY


def _read_release_id(metadata_dir: Path) -> str | None:
    try:
        raw = (metadata_dir / RELEASE_ID_FILENAME).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
    return raw.strip()


__all__ = [
    "ACCESS_KEY_ID_KEY",
    "DEFAULT_METADATA_DIR",
    "ENV_PREFIX",
    "REGION_KEY",
    "RELEASE_ID_KEY",
    "SECRET_ACCESS_KEY_KEY",
    "URL_KEY",
    "ArtifactEnv",
    "capture_env",
]
