"""Command-line front door for filelauncher.

Parses CLI options, fetches metadata for the given paths, and dispatches
them through ``BasicFileLauncher`` with console prompts as decision hooks.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Sequence
from typing import TextIO

from . import config
from .errors import LaunchError
from .file_info import FileInfo
from .interfaces import AppDescriptor, AppRegistry, ExecAction, LaunchHooks
from .launcher import BasicFileLauncher
from .metadata import LocalFileInfoFetcher
from .paths import FilePath
from .registry import XdgAppRegistry

logger = logging.getLogger(__name__)

_EXEC_CHOICES = {
    "e": ExecAction.DIRECT_EXEC,
    "t": ExecAction.EXEC_IN_TERMINAL,
    "o": ExecAction.OPEN_WITH_DEFAULT_APP,
    "c": ExecAction.CANCEL,
}


class ConsoleHooks:
    """Decision hooks that talk to the user on stdin/stderr."""

    def __init__(
        self,
        registry: AppRegistry,
        *,
        stdin: TextIO | None = None,
        stderr: TextIO | None = None,
    ) -> None:
        self._registry = registry
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stderr = stderr if stderr is not None else sys.stderr

    def _interactive(self) -> bool:
        return self._stdin.isatty()

    def _prompt(self, message: str) -> str:
        self._stderr.write(message)
        self._stderr.flush()
        return self._stdin.readline().strip()

    def ask_exec_file(self, info: FileInfo) -> ExecAction:
        if not self._interactive():
            return ExecAction.DIRECT_EXEC
        answer = self._prompt(
            f"'{info.path}' is executable. [e]xecute, run in [t]erminal, [o]pen, [c]ancel? "
        )
        return _EXEC_CHOICES.get(answer[:1].lower(), ExecAction.CANCEL)

    def choose_app(self, infos: Sequence[FileInfo], mime_type: str) -> AppDescriptor | None:
        if not self._interactive():
            return None
        commandline = self._prompt(f"No application for {mime_type}. Open {len(infos)} file(s) with command: ")
        if not commandline:
            return None
        return self._registry.from_commandline(commandline)

    def show_error(
        self,
        _ctx: object,
        error: LaunchError,
        path: FilePath | None = None,
        _info: FileInfo | None = None,
    ) -> bool:
        prefix = f"{path}: " if path is not None else ""
        self._stderr.write(f"filelauncher: {prefix}{error.message}\n")
        return False

    def as_launch_hooks(self) -> LaunchHooks:
        return LaunchHooks(
            choose_app=self.choose_app,
            show_error=self.show_error,
            ask_exec_file=self.ask_exec_file,
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="filelauncher",
        description="Open files, folders, executables and desktop entries with the right application.",
    )
    parser.add_argument("paths", nargs="+", help="Files, directories or URIs to open.")
    parser.add_argument(
        "--quick-exec",
        action="store_true",
        default=None,
        help="Run executables without asking (default from config).",
    )
    parser.add_argument("--terminal", default=None, help="Terminal command prefix for terminal applications.")
    parser.add_argument(
        "--save",
        action="store_true",
        help="Store the given --quick-exec and --terminal values as defaults.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output.")
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Parse CLI arguments and launch every given path.

    Local paths must exist; URIs are passed through to the metadata fetcher.
    Returns after every pending metadata resolution has been dispatched.
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(levelname)s: %(message)s",
    )

    paths = [FilePath.from_path_str(raw) for raw in args.paths]
    for raw, path in zip(args.paths, paths):
        local = path.local_path()
        if local is not None and not os.path.exists(local):
            raise SystemExit(f"Path not found: {raw}")

    if args.save:
        if args.quick_exec is not None:
            config.save_quick_exec(args.quick_exec)
        if args.terminal:
            config.save_terminal_command(args.terminal)

    terminal = args.terminal if args.terminal else config.load_terminal_command()
    quick_exec = args.quick_exec if args.quick_exec is not None else config.load_quick_exec()
    registry = XdgAppRegistry(terminal=terminal)
    hooks = ConsoleHooks(registry)

    with LocalFileInfoFetcher() as fetcher:
        launcher = BasicFileLauncher(
            registry,
            fetcher,
            hooks.as_launch_hooks(),
            quick_exec=quick_exec,
            max_resolution_depth=config.load_max_resolution_depth(),
        )
        launcher.launch_paths(paths)
        launcher.wait_for_pending()
    logger.debug("dispatched %d path(s)", len(paths))
