"""Dispatch a batch of file entries to the right way of opening each one.

Every entry is classified once, in a fixed priority order:

1. directories, opened together with the folder handler
2. mountables, whose target (or own path, once mounted) is re-resolved
3. desktop entries, launched as applications
4. executables, run from their own directory
5. shortcuts, followed to their target
6. everything else, grouped by MIME type and opened with the default app

Entries whose metadata must be fetched again go through ``launch_paths``,
which re-enters ``launch_files`` as a continuation once the fetch job
completes instead of blocking the caller.
"""

from __future__ import annotations

import contextlib
import logging
import os
import shlex
import threading
import time
from collections.abc import Callable, Iterator, Sequence
from concurrent.futures import Future
from concurrent.futures import wait as wait_futures

from .errors import LaunchError
from .file_info import DIRECTORY_MIME_TYPE, FileInfo, paths_of
from .interfaces import AppDescriptor, AppRegistry, ExecAction, FileInfoFetcher, LaunchHooks
from .paths import FilePath, parse_uri_scheme, paths_to_uris

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESOLUTION_DEPTH = 8
# Shortcut targets with these schemes are browsed in place rather than handed off.
BROWSABLE_SCHEMES = frozenset({"file", "trash", "network", "computer"})
MENU_SCHEME = "menu"


def is_executable_file(filename: str) -> bool:
    """Return whether ``filename`` is a regular file the user may execute."""
    return os.path.isfile(filename) and os.access(filename, os.X_OK)


class BasicFileLauncher:
    """Classify and launch file entries through an application registry."""

    def __init__(
        self,
        registry: AppRegistry,
        fetcher: FileInfoFetcher,
        hooks: LaunchHooks | None = None,
        *,
        quick_exec: bool = False,
        max_resolution_depth: int = DEFAULT_MAX_RESOLUTION_DEPTH,
        is_executable: Callable[[str], bool] = is_executable_file,
        call_soon: Callable[[Callable[[], None]], None] | None = None,
    ) -> None:
        """Create a launcher.

        ``call_soon`` schedules resolution continuations, e.g. onto a UI
        thread. Without it they run on whichever thread completes the fetch.
        """
        self._registry = registry
        self._fetcher = fetcher
        self._hooks = hooks or LaunchHooks()
        self.quick_exec = quick_exec
        self._max_resolution_depth = max(1, max_resolution_depth)
        self._is_executable = is_executable
        self._call_soon = call_soon
        self._dispatch_lock = threading.RLock()
        self._pending_lock = threading.Lock()
        self._pending: set[Future[bool]] = set()
        self._failures: list[BaseException] = []

    # Hooks

    def choose_app(self, infos: Sequence[FileInfo], mime_type: str) -> AppDescriptor | None:
        return self._hooks.choose_app(infos, mime_type)

    def show_error(
        self,
        ctx: object,
        error: LaunchError,
        path: FilePath | None = None,
        info: FileInfo | None = None,
    ) -> bool:
        return self._hooks.show_error(ctx, error, path, info)

    def ask_exec_file(self, info: FileInfo) -> ExecAction:
        return self._hooks.ask_exec_file(info)

    def _exec_action(self, info: FileInfo) -> ExecAction:
        if self.quick_exec:
            return ExecAction.DIRECT_EXEC
        return self.ask_exec_file(info)

    # Dispatch

    def launch_files(self, infos: Sequence[FileInfo], ctx: object = None, depth: int = 0) -> bool:
        """Launch every entry in ``infos``.

        Always returns ``True``; failures are reported through ``show_error``.
        Buckets of one MIME type are launched together, but the order in which
        different buckets are launched is unspecified.
        """
        with self._dispatch_lock:
            folder_infos: list[FileInfo] = []
            infos_by_mime_type: dict[str, list[FileInfo]] = {}
            paths_to_launch: list[FilePath] = []

            for info in infos:
                if info.is_dir:
                    folder_infos.append(info)
                elif info.is_mountable:
                    if not info.target:
                        # Not mounted yet: fetch our own path again once the hook mounted it.
                        if not self.show_error(ctx, LaunchError.not_mounted(), info.path, info):
                            continue
                        paths_to_launch.append(info.path)
                    else:
                        paths_to_launch.append(FilePath.from_path_str(info.target))
                elif info.is_desktop_entry:
                    self.launch_desktop_entry(info, [], ctx, depth=depth)
                elif info.is_executable_type:
                    self.launch_executable(info, ctx)
                elif info.is_shortcut:
                    path = self.handle_shortcut(info, ctx)
                    if path.is_valid():
                        paths_to_launch.append(path)
                else:
                    infos_by_mime_type.setdefault(info.mime_type, []).append(info)

            if folder_infos:
                self.open_folder(folder_infos, ctx)

            for mime_type, files in infos_by_mime_type.items():
                app = self._registry.default_for_type(mime_type)
                if app is None:
                    app = self.choose_app(files, mime_type)
                if app is None:
                    logger.debug("no application chosen for %s; skipping %d file(s)", mime_type, len(files))
                    continue
                self.launch_with_app(app, paths_of(files), ctx)

            if paths_to_launch:
                self.launch_paths(paths_to_launch, ctx, depth=depth)
        return True

    def open_folder(self, folder_infos: Sequence[FileInfo], ctx: object = None) -> bool:
        app = self._registry.default_for_type(DIRECTORY_MIME_TYPE)
        if app is None:
            app = self.choose_app(folder_infos, DIRECTORY_MIME_TYPE)
        if app is None:
            self.show_error(ctx, LaunchError.no_application(DIRECTORY_MIME_TYPE), folder_infos[0].path)
            return False
        return self.launch_with_app(app, paths_of(folder_infos), ctx)

    def launch_with_app(self, app: AppDescriptor, paths: Sequence[FilePath], ctx: object = None) -> bool:
        """Launch ``app`` once with all ``paths``.

        Only the first path is named when the launch fails.
        """
        error = app.launch(paths_to_uris(paths), ctx)
        if error is None:
            return True
        self.show_error(ctx, error, paths[0] if paths else None)
        return False

    def launch_with_default_app(self, info: FileInfo, ctx: object = None) -> bool:
        app = self._registry.default_for_type(info.mime_type)
        if app is None:
            self.show_error(ctx, LaunchError.no_application(info.mime_type), info.path, info)
            return False
        return self.launch_with_app(app, [info.path], ctx)

    # Shortcuts

    def handle_shortcut(self, info: FileInfo, ctx: object = None) -> FilePath:
        """Resolve a shortcut's target to a path to launch.

        Targets with a scheme this launcher does not browse are handed to the
        scheme's default handler right away, and an invalid path is returned.
        """
        target = info.target
        if not target:
            return FilePath()
        scheme = parse_uri_scheme(target)
        if scheme is None:
            return FilePath.from_local_path(target)
        if scheme in BROWSABLE_SCHEMES:
            return FilePath.from_uri(target)

        app = self._registry.default_for_uri_scheme(scheme)
        if app is None:
            logger.debug("no handler for %s: dropping %s", scheme, target)
        else:
            self.launch_with_app(app, [FilePath.from_uri(target)], ctx)
        return FilePath()

    # Desktop entries

    def launch_desktop_entry(
        self,
        info: FileInfo,
        extra_paths: Sequence[FilePath],
        ctx: object = None,
        depth: int = 0,
    ) -> bool:
        entry_id: str | None = None
        if info.is_executable_type:
            action = self._exec_action(info)
            if action in (ExecAction.DIRECT_EXEC, ExecAction.EXEC_IN_TERMINAL):
                if info.is_shortcut:
                    path = self.handle_shortcut(info, ctx)
                    if path.is_valid():
                        self.launch_paths([path], ctx, depth=depth)
                    return False
                entry_id = info.target or info.path.local_path()
            elif action is ExecAction.OPEN_WITH_DEFAULT_APP:
                return self.launch_with_default_app(info, ctx)
            else:
                return False
        elif info.is_native or info.path.has_uri_scheme(MENU_SCHEME):
            entry_id = info.target or info.path.local_path()

        if not entry_id:
            return False
        return self.launch_desktop_entry_id(entry_id, extra_paths, ctx)

    def launch_desktop_entry_id(
        self,
        entry_id: str,
        extra_paths: Sequence[FilePath],
        ctx: object = None,
    ) -> bool:
        """Launch a desktop entry named by absolute filename or desktop id."""
        if os.path.isabs(entry_id):
            app = self._registry.app_from_desktop_file(entry_id)
        else:
            app = self._registry.app_by_name(entry_id)
        if app is None:
            self.show_error(ctx, LaunchError.invalid_desktop_entry(entry_id))
            return False
        return self.launch_with_app(app, extra_paths, ctx)

    # Executables

    def launch_executable(self, info: FileInfo, ctx: object = None) -> bool:
        filename = info.path.local_path()
        if not filename or not self._is_executable(filename):
            return False

        action = self._exec_action(info)
        if action is ExecAction.OPEN_WITH_DEFAULT_APP:
            return self.launch_with_default_app(info, ctx)
        if action not in (ExecAction.DIRECT_EXEC, ExecAction.EXEC_IN_TERMINAL):
            return False

        run_path = os.path.dirname(filename)
        explicit_cwd = self._registry.supports_working_directory
        # Command lines go through Exec field-code expansion; keep literal percent signs.
        app = self._registry.from_commandline(
            shlex.quote(filename).replace("%", "%%"),
            needs_terminal=action is ExecAction.EXEC_IN_TERMINAL,
            working_directory=run_path if explicit_cwd else None,
        )
        if app is None:
            return False

        chdir_target = None if explicit_cwd else run_path
        with self._working_directory(chdir_target, ctx):
            error = app.launch([], ctx)
            if error is not None:
                self.show_error(ctx, error, info.path, info)
        return True

    @contextlib.contextmanager
    def _working_directory(self, directory: str | None, ctx: object) -> Iterator[None]:
        """Temporarily ``chdir`` into ``directory``, restoring on every exit path."""
        previous: str | None = None
        if directory and directory != ".":
            try:
                cwd = os.getcwd()
                if os.path.realpath(cwd) != os.path.realpath(directory):
                    os.chdir(directory)
                    previous = cwd
            except OSError as exc:
                self.show_error(ctx, LaunchError.working_directory(directory, exc))
        try:
            yield
        finally:
            if previous is not None:
                try:
                    os.chdir(previous)
                except OSError as exc:
                    logger.warning("cannot restore working directory %s: %s", previous, exc)

    # Resolution

    def launch_paths(self, paths: Sequence[FilePath], ctx: object = None, depth: int = 0) -> Future[bool]:
        """Fetch fresh metadata for ``paths`` and dispatch it when it arrives.

        Returns immediately. The returned future resolves to ``False`` once
        the re-dispatch finished; it does not reflect launch success.
        """
        result: Future[bool] = Future()
        if depth >= self._max_resolution_depth:
            self.show_error(ctx, LaunchError.too_many_resolutions(depth), paths[0] if paths else None)
            result.set_result(False)
            return result

        self._track(result)
        job = self._fetcher.fetch(list(paths))

        def relaunch() -> None:
            try:
                infos = job.result()
            except Exception as exc:
                logger.warning("metadata fetch for %d path(s) failed: %s", len(paths), exc)
                result.set_result(False)
                return
            try:
                self.launch_files(infos, ctx, depth=depth + 1)
            except Exception as exc:
                logger.exception("dispatch of %d resolved path(s) failed", len(infos))
                with self._pending_lock:
                    self._failures.append(exc)
                result.set_exception(exc)
                return
            result.set_result(False)

        def on_fetched(_job: Future[list[FileInfo]]) -> None:
            if self._call_soon is None:
                relaunch()
            else:
                self._call_soon(relaunch)

        job.add_done_callback(on_fetched)
        return result

    def _track(self, future: Future[bool]) -> None:
        with self._pending_lock:
            self._pending.add(future)

        def forget(done: Future[bool]) -> None:
            with self._pending_lock:
                self._pending.discard(done)

        future.add_done_callback(forget)

    def wait_for_pending(self, timeout: float | None = None) -> bool:
        """Block until every resolution chain settled; ``False`` on timeout.

        Resolutions started by a finishing chain are waited for as well. The
        first exception raised by a continuation is re-raised here once.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            with self._pending_lock:
                pending = {future for future in self._pending if not future.done()}
            if not pending:
                self._raise_failure()
                return True
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            _done, not_done = wait_futures(pending, timeout=remaining)
            if not_done:
                return False

    def _raise_failure(self) -> None:
        with self._pending_lock:
            failures, self._failures = self._failures, []
        if failures:
            raise failures[0]


__all__ = [
    "BROWSABLE_SCHEMES",
    "BasicFileLauncher",
    "DEFAULT_MAX_RESOLUTION_DEPTH",
    "MENU_SCHEME",
    "is_executable_file",
]
