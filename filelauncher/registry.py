"""Subprocess-backed application registry for XDG desktops.

Applications come from ``.desktop`` files under the user and system data
directories. Default handlers are looked up with ``xdg-mime``; when that is
unavailable the first entry declaring the MIME type wins.
"""

from __future__ import annotations

import os
import shlex
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from platformdirs import site_data_dir, user_data_path

from .desktop_entry import DESKTOP_SUFFIX, DesktopEntry, expand_exec, parse_desktop_entry
from .errors import LaunchError

DEFAULT_TERMINAL = "x-terminal-emulator -e"
XDG_MIME_TIMEOUT_SECONDS = 5.0


def spawn_detached(argv: Sequence[str], cwd: str | None = None) -> LaunchError | None:
    """Start ``argv`` in its own session; return an error instead of raising."""
    if not argv:
        return LaunchError.launch_failed("Empty command line")
    try:
        subprocess.Popen(
            list(argv),
            cwd=cwd or None,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as exc:
        return LaunchError.launch_failed(f"Failed to execute '{argv[0]}': {exc.strerror or exc}", errno=exc.errno)
    return None


def _with_terminal(argv: list[str], terminal: Sequence[str]) -> list[str]:
    return [*terminal, *argv]


@dataclass(frozen=True)
class CommandLineApp:
    """An ad-hoc application built from a shell command line."""

    commandline: str
    needs_terminal: bool = False
    working_directory: str | None = None
    terminal: tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.commandline

    def launch(self, uris: Sequence[str], ctx: object | None) -> LaunchError | None:
        commands = expand_exec(self.commandline, uris)
        if not commands:
            return LaunchError.launch_failed(f"Cannot parse command line '{self.commandline}'")
        for argv in commands:
            if self.needs_terminal:
                argv = _with_terminal(argv, self.terminal)
            error = spawn_detached(argv, self.working_directory)
            if error is not None:
                return error
        return None


@dataclass(frozen=True)
class DesktopApp:
    """An application described by a desktop entry."""

    entry: DesktopEntry
    terminal: tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.entry.name or self.entry.filename.stem

    def launch(self, uris: Sequence[str], ctx: object | None) -> LaunchError | None:
        commands = expand_exec(
            self.entry.exec,
            uris,
            name=self.entry.name,
            icon=self.entry.icon,
            desktop_file=str(self.entry.filename),
        )
        if not commands:
            return LaunchError.launch_failed(f"Cannot parse Exec line of '{self.entry.filename}'")
        for argv in commands:
            if self.entry.terminal:
                argv = _with_terminal(argv, self.terminal)
            error = spawn_detached(argv, self.entry.path or None)
            if error is not None:
                return error
        return None


def application_dirs() -> list[Path]:
    """Return ``applications`` directories, highest precedence first."""
    dirs = [user_data_path() / "applications"]
    for data_dir in site_data_dir(multipath=True).split(os.pathsep):
        if data_dir:
            dirs.append(Path(data_dir) / "applications")
    return dirs


def query_xdg_default(mime_type: str) -> str | None:
    """Ask ``xdg-mime`` for the default desktop id of ``mime_type``."""
    try:
        completed = subprocess.run(
            ["xdg-mime", "query", "default", mime_type],
            capture_output=True,
            text=True,
            check=False,
            timeout=XDG_MIME_TIMEOUT_SECONDS,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    if completed.returncode != 0:
        return None
    desktop_id = completed.stdout.strip()
    return desktop_id or None


class XdgAppRegistry:
    """Resolve applications from desktop files and launch them as processes."""

    supports_working_directory = True

    def __init__(
        self,
        *,
        terminal: str = DEFAULT_TERMINAL,
        app_dirs: Sequence[Path] | None = None,
        query_default: Callable[[str], str | None] = query_xdg_default,
    ) -> None:
        self._terminal = tuple(shlex.split(terminal))
        self._app_dirs = list(app_dirs) if app_dirs is not None else application_dirs()
        self._query_default = query_default
        self._index: dict[str, Path] | None = None

    def desktop_index(self) -> dict[str, Path]:
        """Map desktop ids to files; earlier directories shadow later ones."""
        if self._index is None:
            index: dict[str, Path] = {}
            for app_dir in self._app_dirs:
                if not app_dir.is_dir():
                    continue
                for desktop_file in sorted(app_dir.rglob(f"*{DESKTOP_SUFFIX}")):
                    desktop_id = desktop_file.relative_to(app_dir).as_posix().replace("/", "-")
                    index.setdefault(desktop_id, desktop_file)
            self._index = index
        return self._index

    def _desktop_app(self, entry: DesktopEntry | None) -> DesktopApp | None:
        if entry is None or not entry.is_application:
            return None
        return DesktopApp(entry=entry, terminal=self._terminal)

    def default_for_type(self, mime_type: str) -> DesktopApp | None:
        desktop_id = self._query_default(mime_type)
        if desktop_id:
            app = self.app_by_name(desktop_id)
            if app is not None:
                return app
        for desktop_file in self.desktop_index().values():
            entry = parse_desktop_entry(desktop_file)
            if entry is not None and mime_type in entry.mime_types:
                app = self._desktop_app(entry)
                if app is not None:
                    return app
        return None

    def default_for_uri_scheme(self, scheme: str) -> DesktopApp | None:
        return self.default_for_type(f"x-scheme-handler/{scheme}")

    def app_by_name(self, name: str) -> DesktopApp | None:
        desktop_id = name if name.endswith(DESKTOP_SUFFIX) else name + DESKTOP_SUFFIX
        desktop_file = self.desktop_index().get(desktop_id)
        if desktop_file is None:
            return None
        return self._desktop_app(parse_desktop_entry(desktop_file))

    def app_from_desktop_file(self, filename: str) -> DesktopApp | None:
        return self._desktop_app(parse_desktop_entry(Path(filename)))

    def from_commandline(
        self,
        commandline: str,
        *,
        needs_terminal: bool = False,
        working_directory: str | None = None,
    ) -> CommandLineApp | None:
        if not commandline.strip():
            return None
        return CommandLineApp(
            commandline=commandline,
            needs_terminal=needs_terminal,
            working_directory=working_directory,
            terminal=self._terminal,
        )


__all__ = [
    "CommandLineApp",
    "DEFAULT_TERMINAL",
    "DesktopApp",
    "XdgAppRegistry",
    "application_dirs",
    "query_xdg_default",
    "spawn_detached",
]
