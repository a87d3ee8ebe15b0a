"""Public package surface for filelauncher.

Exports the launcher, its value types and the collaborator contracts.
Concrete XDG and local-filesystem collaborators live in ``registry`` and
``metadata``; ``main`` is the CLI entry point.
"""

from __future__ import annotations

from .errors import ErrorCode, LaunchError
from .file_info import FileInfo, paths_of
from .interfaces import AppDescriptor, AppRegistry, ExecAction, FileInfoFetcher, LaunchHooks
from .launcher import BasicFileLauncher
from .paths import FilePath, parse_uri_scheme


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = [
    "AppDescriptor",
    "AppRegistry",
    "BasicFileLauncher",
    "ErrorCode",
    "ExecAction",
    "FileInfo",
    "FileInfoFetcher",
    "FilePath",
    "LaunchError",
    "LaunchHooks",
    "main",
    "parse_uri_scheme",
    "paths_of",
]
