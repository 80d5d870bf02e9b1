import re

from release_artifacts.env import ArtifactEnv
from release_artifacts.errors import (
    ArchiveError,
    ConfigurationMissing,
    ErrorCode,
    NotFound,
    StorageError,
    StorageURLHostMissing,
    StorageURLInvalid,
    UnsupportedScheme,
)
from release_artifacts.naming import archive_name


def test_error_codes_are_stable_and_machine_readable() -> None:
    errors = [
        ConfigurationMissing(["RELEASE_ID"]),
        StorageURLInvalid("bad url"),
        StorageURLHostMissing("no host"),
        UnsupportedScheme("gs"),
        NotFound("missing"),
        StorageError("AccessDenied", "Access Denied"),
        ArchiveError("unpacking the archive"),
    ]
    assert [error.code for error in errors] == [
        ErrorCode.CONFIG_MISSING.value,
        ErrorCode.STORAGE_URL_INVALID.value,
        ErrorCode.STORAGE_URL_HOST_MISSING.value,
        ErrorCode.UNSUPPORTED_SCHEME.value,
        ErrorCode.NOT_FOUND.value,
        ErrorCode.STORAGE.value,
        ErrorCode.ARCHIVE.value,
    ]


def test_configuration_missing_lists_every_key() -> None:
    error = ConfigurationMissing(["RELEASE_ID", "STATIC_ARTIFACTS_URL"])

    assert error.missing == ("RELEASE_ID", "STATIC_ARTIFACTS_URL")
    assert str(error) == "RELEASE_ID is required. STATIC_ARTIFACTS_URL is required"


def test_storage_error_preserves_provider_code_and_message() -> None:
    error = StorageError("AccessDenied", "Access Denied", context={"key": "a.tgz"})
    fallback = StorageError(None, None)

    assert error.provider_code == "AccessDenied"
    assert str(error) == "AccessDenied: Access Denied"
    assert error.context == {"key": "a.tgz"}
    assert str(fallback) == "unknown code: missing reason"


def test_archive_error_names_the_failed_phase() -> None:
    error = ArchiveError("writing the archive stream", hint="check disk space")

    assert error.phase == "writing the archive stream"
    assert str(error) == "Archive I/O failed while writing the archive stream."
    assert error.hint == "check disk space"


def test_archive_name_with_release_id() -> None:
    assert archive_name(ArtifactEnv({"RELEASE_ID": "v102"})) == "release-v102.tgz"


def test_archive_name_without_release_id_is_unique() -> None:
    first = archive_name(ArtifactEnv())
    second = archive_name(ArtifactEnv())

    assert re.fullmatch(r"artifact-[0-9a-f-]{36}\.tgz", first)
    assert first != second


def test_error_message_is_a_single_line() -> None:
    error = NotFound(
        "Archive `release-v1.tgz` does not exist.",
        hint="Run save first.",
        context={"operation": "get", "path": "/tmp/store/release-v1.tgz"},
    )

    assert str(error) == "Archive `release-v1.tgz` does not exist."
    assert "\n" not in str(error)
