"""Command line entry points for saving, loading and pruning release artifacts.

Usage:
    release-artifacts save SOURCE_DIR
    release-artifacts load [DEST_DIR] [--exec-d]
    release-artifacts gc [--keep N]

The dedicated ``load-release-artifacts`` script always runs as an exec.d program
and reports the loaded key on file descriptor 3.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from release_artifacts.env import DEFAULT_METADATA_DIR, capture_env
from release_artifacts.errors import ReleaseArtifactsError
from release_artifacts.exec_d import EXEC_D_FD, LOADED_FROM_KEY, write_output
from release_artifacts.observability import StructuredLogger
from release_artifacts.operations import GC_PROGRAM, LOAD_PROGRAM, SAVE_PROGRAM, gc, load, save
from release_artifacts.retention import DEFAULT_KEEP

DEFAULT_LOAD_DIR = Path("static-artifacts")

PROGRAMS = {
    "save": SAVE_PROGRAM,
    "upload": SAVE_PROGRAM,
    "load": LOAD_PROGRAM,
    "download": LOAD_PROGRAM,
    "gc": GC_PROGRAM,
}


def cmd_save(args: argparse.Namespace, logger: StructuredLogger) -> None:
    env = capture_env(metadata_dir=args.metadata_dir)
    save(env, args.source_dir, logger=logger)


def cmd_load(args: argparse.Namespace, logger: StructuredLogger) -> None:
    env = capture_env(metadata_dir=args.metadata_dir)
    loaded_key = load(env, args.dest_dir, logger=logger)
    write_output({LOADED_FROM_KEY: loaded_key}, fd=EXEC_D_FD if args.exec_d else None)


def cmd_gc(args: argparse.Namespace, logger: StructuredLogger) -> None:
    env = capture_env(metadata_dir=args.metadata_dir)
    gc(env, keep=args.keep, logger=logger)


def retained_count(value: str) -> int:
    try:
        count = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from exc
    if count < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative, got {count}")
    return count


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--metadata-dir",
        type=Path,
        default=DEFAULT_METADATA_DIR,
        help="Directory whose release_id file overrides RELEASE_ID",
    )
    common.add_argument("--log-file", type=Path, help="Write structured records as JSON lines")

    parser = argparse.ArgumentParser(description="Persist release artifacts across processes")
    sub = parser.add_subparsers(dest="command", required=True)

    save_p = sub.add_parser(
        "save", aliases=["upload"], parents=[common], help="Archive and store a directory"
    )
    save_p.add_argument("source_dir", type=Path, help="Directory to archive")
    save_p.set_defaults(handler=cmd_save, operation="save")

    load_p = sub.add_parser(
        "load", aliases=["download"], parents=[common], help="Retrieve and extract a bundle"
    )
    load_p.add_argument(
        "dest_dir", type=Path, nargs="?", default=DEFAULT_LOAD_DIR, help="Extraction directory"
    )
    load_p.add_argument(
        "--exec-d",
        action="store_true",
        help=f"Write {LOADED_FROM_KEY} to exec.d file descriptor {EXEC_D_FD} instead of stdout",
    )
    load_p.set_defaults(handler=cmd_load, operation="load")

    gc_p = sub.add_parser("gc", parents=[common], help="Delete all but the newest bundles")
    gc_p.add_argument(
        "--keep", type=retained_count, default=DEFAULT_KEEP, help="Number of bundles to retain"
    )
    gc_p.set_defaults(handler=cmd_gc, operation="gc")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    program = PROGRAMS[args.command]
    logger = StructuredLogger(program=program)
    try:
        args.handler(args, logger)
    except ReleaseArtifactsError as exc:
        extra: dict[str, Any] = {"code": exc.code, "context": dict(exc.context)}
        if exc.hint is not None:
            extra["hint"] = exc.hint
        logger.log(
            operation=args.operation,
            level="error",
            message=f"failed: [{exc.code}] {exc}",
            extra=extra,
        )
        return 1
    except OSError as exc:
        logger.log(
            operation=args.operation,
            level="error",
            message=f"failed: {exc}",
            extra={"error": type(exc).__name__},
        )
        return 1
    finally:
        if args.log_file is not None:
            logger.to_json_lines(args.log_file)
    print(f"{program} complete.", file=sys.stderr)
    return 0


def save_main() -> int:
    return main(["save", *sys.argv[1:]])


def load_main() -> int:
    return main(["load", "--exec-d", *sys.argv[1:]])


def gc_main() -> int:
    return main(["gc", *sys.argv[1:]])


if __name__ == "__main__":
    raise SystemExit(main())
