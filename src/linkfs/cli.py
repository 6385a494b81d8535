# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Command line entry point for inspecting links in a host directory."""

from __future__ import annotations

import argparse
import json
import stat as stat_module
import sys
from collections.abc import Sequence
from pathlib import Path

from ._host import HostFilesystem
from ._lstat import lstat
from ._protocol import Filesystem
from ._readlink import read_link
from ._sub import sub
from ._types import FileInfo
from .config import LinkfsConfig, load_config
from .errors import ConfigError, PathError
from .logging import configure_logging, get_logger

__all__ = ["main"]


def main(argv: Sequence[str] | None = None) -> int:
    """Run the linkfs CLI."""

    parser = _build_parser()
    try:
        args = parser.parse_args(list(argv) if argv is not None else None)
    except SystemExit as exc:  # argparse exits with code 2 on errors
        code = exc.code if isinstance(exc.code, int) else 2
        return int(code)

    configure_logging(level=args.log_level, json_mode=args.json_logs)
    logger = get_logger(__name__).bind(command=args.command)

    try:
        config = load_config(Path(args.config) if args.config else None)
    except (ConfigError, FileNotFoundError) as error:
        logger.error(
            "Invalid configuration",
            event="linkfs.cli.config_error",
            context={"error": str(error)},
        )
        return 2

    try:
        fsys = sub(HostFilesystem(root=args.root), args.sub, policy=config.policy)
        if args.command == "readlink":
            return _run_readlink(fsys, args.path, config)
        return _run_lstat(fsys, args.path, config)
    except PathError as error:
        logger.error(
            "Operation failed",
            event="linkfs.cli.path_error",
            context={"op": error.op, "path": error.path, "error": str(error)},
        )
        return 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linkfs",
        description="Inspect symbolic links inside a host directory.",
    )
    _ = parser.add_argument(
        "--log-level",
        choices=("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"),
        default=None,
        help="Override the log level emitted by the CLI.",
    )
    _ = parser.add_argument(
        "--json-logs",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Emit structured JSON logs.",
    )
    _ = parser.add_argument(
        "--config",
        default=None,
        help="Path to a TOML or YAML configuration file.",
    )

    subcommands = parser.add_subparsers(dest="command", required=True)
    readlink_parser = subcommands.add_parser(
        "readlink", help="Print the target text of a symbolic link."
    )
    lstat_parser = subcommands.add_parser(
        "lstat", help="Print metadata of an entry without following links."
    )
    for subparser in (readlink_parser, lstat_parser):
        _ = subparser.add_argument("root", help="Host directory used as the root.")
        _ = subparser.add_argument("path", help="Rooted relative path to inspect.")
        _ = subparser.add_argument(
            "--sub",
            default=".",
            help="Subdirectory of ROOT to treat as the root (default: .).",
        )
    return parser


def _run_readlink(fsys: Filesystem, path: str, config: LinkfsConfig) -> int:
    _ = sys.stdout.write(read_link(fsys, path, policy=config.policy) + "\n")
    return 0


def _run_lstat(fsys: Filesystem, path: str, config: LinkfsConfig) -> int:
    info = lstat(fsys, path, batch_size=config.batch_size)
    _ = sys.stdout.write(json.dumps(_info_payload(info), sort_keys=True) + "\n")
    return 0


def _info_payload(info: FileInfo) -> dict[str, object]:
    return {
        "name": info.name,
        "mode": stat_module.filemode(info.mode),
        "size": info.size,
        "modified_at": info.modified_at.isoformat() if info.modified_at else None,
        "is_symlink": info.is_symlink,
        "is_dir": info.is_dir,
    }
