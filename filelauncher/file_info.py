"""Read-only classification view over one file-system entry."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .paths import FilePath

DIRECTORY_MIME_TYPE = "inode/directory"
DESKTOP_ENTRY_MIME_TYPE = "application/x-desktop"
UNKNOWN_MIME_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class FileInfo:
    """Snapshot of the attributes the dispatcher classifies on.

    Produced by a ``FileInfoFetcher``. The snapshot can go stale: a mountable
    entry has an empty ``target`` until its volume is mounted, after which the
    same path must be fetched again.
    """

    path: FilePath
    mime_type: str = UNKNOWN_MIME_TYPE
    target: str = ""
    is_dir: bool = False
    is_mountable: bool = False
    is_desktop_entry: bool = False
    is_executable_type: bool = False
    is_shortcut: bool = False
    is_native: bool = True


def paths_of(infos: Iterable[FileInfo]) -> list[FilePath]:
    """Return the paths of ``infos`` in order."""
    return [info.path for info in infos]


__all__ = [
    "DESKTOP_ENTRY_MIME_TYPE",
    "DIRECTORY_MIME_TYPE",
    "FileInfo",
    "UNKNOWN_MIME_TYPE",
    "paths_of",
]
