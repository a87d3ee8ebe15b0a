"""Local metadata fetcher producing ``FileInfo`` snapshots off the caller's thread.

MIME types come from the extension table first, then from the Pygments lexer
matching the filename (covers most source files), then from sniffing the
first bytes of the file.
"""

from __future__ import annotations

import mimetypes
import os
import stat
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path

from pygments.lexers import get_lexer_for_filename
from pygments.util import ClassNotFound

from .desktop_entry import DESKTOP_SUFFIX, parse_desktop_entry
from .file_info import DESKTOP_ENTRY_MIME_TYPE, DIRECTORY_MIME_TYPE, UNKNOWN_MIME_TYPE, FileInfo
from .paths import FilePath

SNIFF_BYTES = 512
ELF_MAGIC = b"\x7fELF"
SHEBANG = b"#!"
EXECUTABLE_MIME_TYPE = "application/x-executable"
SCRIPT_MIME_TYPE = "application/x-shellscript"
TEXT_MIME_TYPE = "text/plain"


def _read_head(local: str) -> bytes:
    try:
        with open(local, "rb") as handle:
            return handle.read(SNIFF_BYTES)
    except OSError:
        return b""


def _looks_textual(head: bytes) -> bool:
    if b"\x00" in head:
        return False
    try:
        head.decode("utf-8")
    except UnicodeDecodeError as exc:
        # A multi-byte sequence cut off by the sniff window is still text.
        return exc.start >= len(head) - 3
    return True


def _pygments_mime_type(name: str) -> str | None:
    try:
        lexer = get_lexer_for_filename(name)
    except ClassNotFound:
        return None
    return lexer.mimetypes[0] if lexer.mimetypes else None


def guess_mime_type(local: str, head: bytes) -> str:
    """Best-effort MIME type for a regular file."""
    if head.startswith(ELF_MAGIC):
        return EXECUTABLE_MIME_TYPE
    name = os.path.basename(local)
    guessed, _encoding = mimetypes.guess_type(name, strict=False)
    if guessed:
        return guessed
    from_lexer = _pygments_mime_type(name)
    if from_lexer:
        return from_lexer
    if head.startswith(SHEBANG):
        return SCRIPT_MIME_TYPE
    if _looks_textual(head):
        return TEXT_MIME_TYPE
    return UNKNOWN_MIME_TYPE


def query_file_info(path: FilePath) -> FileInfo | None:
    """Build a ``FileInfo`` for a local ``path``; ``None`` when it cannot be resolved."""
    local = path.local_path()
    if local is None:
        return None
    try:
        link_stat = os.lstat(local)
        st = os.stat(local)
    except OSError:
        return None

    target = ""
    if stat.S_ISLNK(link_stat.st_mode):
        try:
            target = os.readlink(local)
        except OSError:
            target = ""

    if stat.S_ISDIR(st.st_mode):
        return FileInfo(path=path, mime_type=DIRECTORY_MIME_TYPE, target=target, is_dir=True)

    if local.endswith(DESKTOP_SUFFIX):
        entry = parse_desktop_entry(Path(local))
        if entry is not None:
            # Desktop entries are treated as executables; links point at their URL.
            return FileInfo(
                path=path,
                mime_type=DESKTOP_ENTRY_MIME_TYPE,
                target=entry.url if entry.is_link else "",
                is_desktop_entry=True,
                is_executable_type=True,
                is_shortcut=entry.is_link,
            )

    head = _read_head(local)
    mime_type = guess_mime_type(local, head)
    has_exec_bit = bool(st.st_mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH))
    is_executable_type = stat.S_ISREG(st.st_mode) and has_exec_bit and (
        head.startswith(ELF_MAGIC) or head.startswith(SHEBANG)
    )
    return FileInfo(
        path=path,
        mime_type=mime_type,
        target=target,
        is_executable_type=is_executable_type,
    )


def query_file_infos(paths: Sequence[FilePath]) -> list[FileInfo]:
    infos: list[FileInfo] = []
    for path in paths:
        info = query_file_info(path)
        if info is not None:
            infos.append(info)
    return infos


class LocalFileInfoFetcher:
    """Run metadata queries for whole path batches on a small worker pool."""

    def __init__(self, max_workers: int = 2) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="filelauncher-info")

    def fetch(self, paths: Sequence[FilePath]) -> Future[list[FileInfo]]:
        return self._executor.submit(query_file_infos, list(paths))

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> LocalFileInfoFetcher:
        return self

    def __exit__(self, *_exc_info: object) -> None:
        self.shutdown()


__all__ = [
    "LocalFileInfoFetcher",
    "guess_mime_type",
    "query_file_info",
    "query_file_infos",
]
