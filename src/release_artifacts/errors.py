"""Typed release-artifacts error model with stable, machine-readable error codes."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import StrEnum


class ErrorCode(StrEnum):
    """Stable error identifiers used by the CLI and library callers."""

    CONFIG_MISSING = "E_CONFIG_MISSING"
    STORAGE_URL_INVALID = "E_STORAGE_URL_INVALID"
    STORAGE_URL_HOST_MISSING = "E_STORAGE_URL_HOST_MISSING"
    UNSUPPORTED_SCHEME = "E_UNSUPPORTED_SCHEME"
    NOT_FOUND = "E_NOT_FOUND"
    STORAGE = "E_STORAGE"
    ARCHIVE = "E_ARCHIVE"


class ReleaseArtifactsError(Exception):
    """Base error: a one-line message plus a stable code.

    ``hint`` and ``context`` are kept as attributes for structured logging and are
    not part of ``str(error)``.
    """

    code: str
    hint: str | None
    context: Mapping[str, str]

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code.value
        self.hint = hint
        self.context = dict(context or {})


class ConfigurationMissing(ReleaseArtifactsError):
    """One or more required configuration keys are absent.

    ``missing`` lists every absent key so callers can fix them in one pass.
    """

    missing: tuple[str, ...]

    def __init__(
        self,
        missing: Sequence[str],
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        self.missing = tuple(missing)
        message = ". ".join(f"{name} is required" for name in self.missing)
        super().__init__(message, code=ErrorCode.CONFIG_MISSING, hint=hint, context=context)


class StorageURLInvalid(ReleaseArtifactsError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.STORAGE_URL_INVALID, hint=hint, context=context)


class StorageURLHostMissing(ReleaseArtifactsError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            message, code=ErrorCode.STORAGE_URL_HOST_MISSING, hint=hint, context=context
        )


class UnsupportedScheme(ReleaseArtifactsError):
    scheme: str

    def __init__(
        self,
        scheme: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        self.scheme = scheme
        super().__init__(
            f"Unsupported storage URL scheme `{scheme}`.",
            code=ErrorCode.UNSUPPORTED_SCHEME,
            hint=hint,
            context=context,
        )


class NotFound(ReleaseArtifactsError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.NOT_FOUND, hint=hint, context=context)


class StorageError(ReleaseArtifactsError):
    """Backend-reported failure; keeps the provider's error code and message."""

    provider_code: str
    provider_message: str

    def __init__(
        self,
        provider_code: str | None,
        provider_message: str | None,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        self.provider_code = provider_code or "unknown code"
        self.provider_message = provider_message or "missing reason"
        super().__init__(
            f"{self.provider_code}: {self.provider_message}",
            code=ErrorCode.STORAGE,
            hint=hint,
            context=context,
        )


class ArchiveError(ReleaseArtifactsError):
    """I/O failure while creating, reading or writing an archive.

    ``phase`` names the step that failed; the underlying error is chained as
    ``__cause__``.
    """

    phase: str

    def __init__(
        self,
        phase: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        self.phase = phase
        super().__init__(
            f"Archive I/O failed while {phase}.",
            code=ErrorCode.ARCHIVE,
            hint=hint,
            context=context,
        )


__all__ = [
    "ArchiveError",
    "ConfigurationMissing",
    "ErrorCode",
    "NotFound",
    "ReleaseArtifactsError",
    "StorageError",
    "StorageURLHostMissing",
    "StorageURLInvalid",
    "UnsupportedScheme",
]
