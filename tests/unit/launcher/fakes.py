"""In-memory collaborators for launcher tests."""

from __future__ import annotations

import os
from collections.abc import Sequence
from concurrent.futures import Future

from filelauncher.errors import LaunchError
from filelauncher.file_info import FileInfo
from filelauncher.interfaces import ExecAction, LaunchHooks
from filelauncher.paths import FilePath


class RecordingApp:
    def __init__(self, name: str = "app", error: LaunchError | None = None) -> None:
        self.name = name
        self.error = error
        self.calls: list[tuple[list[str], object]] = []
        self.launch_cwds: list[str] = []

    def launch(self, uris: Sequence[str], ctx: object | None) -> LaunchError | None:
        self.calls.append((list(uris), ctx))
        self.launch_cwds.append(os.getcwd())
        return self.error


class CommandLineRecord(RecordingApp):
    def __init__(
        self,
        commandline: str,
        needs_terminal: bool,
        working_directory: str | None,
        error: LaunchError | None = None,
    ) -> None:
        super().__init__(commandline, error)
        self.commandline = commandline
        self.needs_terminal = needs_terminal
        self.working_directory = working_directory


class FakeRegistry:
    def __init__(
        self,
        *,
        by_type: dict[str, RecordingApp] | None = None,
        by_scheme: dict[str, RecordingApp] | None = None,
        by_name: dict[str, RecordingApp] | None = None,
        by_file: dict[str, RecordingApp] | None = None,
        supports_working_directory: bool = False,
        commandline_error: LaunchError | None = None,
        refuse_commandline: bool = False,
    ) -> None:
        self.by_type = by_type or {}
        self.by_scheme = by_scheme or {}
        self.by_name = by_name or {}
        self.by_file = by_file or {}
        self.supports_working_directory = supports_working_directory
        self.commandline_error = commandline_error
        self.refuse_commandline = refuse_commandline
        self.type_queries: list[str] = []
        self.scheme_queries: list[str] = []
        self.name_queries: list[str] = []
        self.file_queries: list[str] = []
        self.commandline_apps: list[CommandLineRecord] = []

    def default_for_type(self, mime_type: str) -> RecordingApp | None:
        self.type_queries.append(mime_type)
        return self.by_type.get(mime_type)

    def default_for_uri_scheme(self, scheme: str) -> RecordingApp | None:
        self.scheme_queries.append(scheme)
        return self.by_scheme.get(scheme)

    def app_by_name(self, name: str) -> RecordingApp | None:
        self.name_queries.append(name)
        return self.by_name.get(name)

    def app_from_desktop_file(self, filename: str) -> RecordingApp | None:
        self.file_queries.append(filename)
        return self.by_file.get(filename)

    def from_commandline(
        self,
        commandline: str,
        *,
        needs_terminal: bool = False,
        working_directory: str | None = None,
    ) -> CommandLineRecord | None:
        if self.refuse_commandline:
            return None
        app = CommandLineRecord(commandline, needs_terminal, working_directory, self.commandline_error)
        self.commandline_apps.append(app)
        return app


class ImmediateFetcher:
    """Fetcher whose jobs are already complete when returned."""

    def __init__(self, infos: Sequence[FileInfo] = ()) -> None:
        self.infos = {info.path: info for info in infos}
        self.requests: list[list[FilePath]] = []

    def fetch(self, paths: Sequence[FilePath]) -> Future[list[FileInfo]]:
        self.requests.append(list(paths))
        future: Future[list[FileInfo]] = Future()
        future.set_result([self.infos[path] for path in paths if path in self.infos])
        return future


class RecordingHooks:
    def __init__(
        self,
        *,
        exec_action: ExecAction = ExecAction.DIRECT_EXEC,
        continue_on_error: bool = False,
        chosen_app: RecordingApp | None = None,
    ) -> None:
        self.exec_action = exec_action
        self.continue_on_error = continue_on_error
        self.chosen_app = chosen_app
        self.errors: list[tuple[LaunchError, FilePath | None, FileInfo | None]] = []
        self.asked: list[FileInfo] = []
        self.chooser_calls: list[tuple[list[FileInfo], str]] = []

    def show_error(
        self,
        _ctx: object,
        error: LaunchError,
        path: FilePath | None = None,
        info: FileInfo | None = None,
    ) -> bool:
        self.errors.append((error, path, info))
        return self.continue_on_error

    def ask_exec_file(self, info: FileInfo) -> ExecAction:
        self.asked.append(info)
        return self.exec_action

    def choose_app(self, infos: Sequence[FileInfo], mime_type: str) -> RecordingApp | None:
        self.chooser_calls.append((list(infos), mime_type))
        return self.chosen_app

    def launch_hooks(self) -> LaunchHooks:
        return LaunchHooks(
            choose_app=self.choose_app,
            show_error=self.show_error,
            ask_exec_file=self.ask_exec_file,
        )

    def error_codes(self) -> list:
        return [error.code for error, _path, _info in self.errors]


def local_info(path: str, **kwargs) -> FileInfo:
    return FileInfo(path=FilePath.from_local_path(path), **kwargs)
