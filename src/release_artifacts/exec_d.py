"""Key/value output consumed by the process-launch collaborator.

exec.d programs report environment values as a TOML table written to file
descriptor 3.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from typing import TextIO

import toml

EXEC_D_FD = 3
LOADED_FROM_KEY = "STATIC_ARTIFACTS_LOADED_FROM_KEY"


def render_output(values: Mapping[str, str]) -> str:
    return toml.dumps(dict(values))


def write_output(
    values: Mapping[str, str],
    *,
    fd: int | None = None,
    stream: TextIO | None = None,
) -> None:
    """Write *values* to exec.d descriptor *fd*, or to *stream* (default stdout)."""
    payload = render_output(values)
    if fd is not None:
        with os.fdopen(fd, "w", encoding="utf-8", closefd=False) as handle:
            handle.write(payload)
        return
    target = stream if stream is not None else sys.stdout
    target.write(payload)
    target.flush()


__all__ = ["EXEC_D_FD", "LOADED_FROM_KEY", "render_output", "write_output"]
