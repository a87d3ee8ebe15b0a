"""Contracts for the collaborators the launcher drives.

The launcher never inspects application handles or launch contexts. An
application only has to accept "launch these URIs".
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from .errors import LaunchError
from .file_info import FileInfo
from .paths import FilePath


class ExecAction(Enum):
    """How an executable file or desktop entry should be treated."""

    DIRECT_EXEC = "direct-exec"
    EXEC_IN_TERMINAL = "exec-in-terminal"
    OPEN_WITH_DEFAULT_APP = "open-with-default-app"
    CANCEL = "cancel"


class AppDescriptor(Protocol):
    """A resolved external application."""

    name: str

    def launch(self, uris: Sequence[str], ctx: object | None) -> LaunchError | None:
        """Start the application with ``uris``; return an error instead of raising."""
        ...


class AppRegistry(Protocol):
    """Lookup of applications by MIME type, URI scheme, name or file."""

    # True when ``from_commandline`` honours ``working_directory`` itself.
    supports_working_directory: bool

    def default_for_type(self, mime_type: str) -> AppDescriptor | None: ...

    def default_for_uri_scheme(self, scheme: str) -> AppDescriptor | None: ...

    def app_by_name(self, name: str) -> AppDescriptor | None: ...

    def app_from_desktop_file(self, filename: str) -> AppDescriptor | None: ...

    def from_commandline(
        self,
        commandline: str,
        *,
        needs_terminal: bool = False,
        working_directory: str | None = None,
    ) -> AppDescriptor | None: ...


class FileInfoFetcher(Protocol):
    """One-shot asynchronous metadata query.

    The result lists infos in input order; paths that could not be resolved
    are simply absent.
    """

    def fetch(self, paths: Sequence[FilePath]) -> Future[list[FileInfo]]: ...


ChooseAppHook = Callable[[Sequence[FileInfo], str], "AppDescriptor | None"]
ShowErrorHook = Callable[[object, LaunchError, "FilePath | None", "FileInfo | None"], bool]
AskExecFileHook = Callable[[FileInfo], ExecAction]


def no_app_chooser(_infos: Sequence[FileInfo], _mime_type: str) -> AppDescriptor | None:
    return None


def ignore_error(
    _ctx: object,
    _error: LaunchError,
    _path: FilePath | None = None,
    _info: FileInfo | None = None,
) -> bool:
    return False


def always_direct_exec(_info: FileInfo) -> ExecAction:
    return ExecAction.DIRECT_EXEC


@dataclass(frozen=True)
class LaunchHooks:
    """Decision hooks supplied by the presentation layer.

    ``show_error`` returns whether the caller should keep processing the
    affected entry; only the unmounted-mountable case consults it.
    """

    choose_app: ChooseAppHook = no_app_chooser
    show_error: ShowErrorHook = ignore_error
    ask_exec_file: AskExecFileHook = always_direct_exec


__all__ = [
    "AppDescriptor",
    "AppRegistry",
    "AskExecFileHook",
    "ChooseAppHook",
    "ExecAction",
    "FileInfoFetcher",
    "LaunchHooks",
    "ShowErrorHook",
    "always_direct_exec",
    "ignore_error",
    "no_app_chooser",
]
