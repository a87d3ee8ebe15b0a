"""Immutable path values with local-path and URI representations.

``FilePath`` stores one canonical URI string. Local paths are turned into
``file://`` URIs on construction, so two paths naming the same local file
compare equal regardless of how they were built. The empty string is the
invalid path.
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote_to_bytes, urlsplit

_SCHEME_RE = re.compile(r"^([A-Za-z][A-Za-z0-9+.\-]*):")


def parse_uri_scheme(text: str) -> str | None:
    """Return the lower-cased URI scheme of ``text`` or ``None`` for plain paths."""
    match = _SCHEME_RE.match(text)
    if match is None:
        return None
    return match.group(1).lower()


@dataclass(frozen=True, order=True)
class FilePath:
    """One file-system location, local or remote."""

    _uri: str = ""

    @classmethod
    def from_local_path(cls, path: str | os.PathLike[str]) -> FilePath:
        text = os.fspath(path)
        if not text:
            return cls()
        return cls(Path(os.path.abspath(text)).as_uri())

    @classmethod
    def from_uri(cls, uri: str) -> FilePath:
        return cls(uri.strip())

    @classmethod
    def from_path_str(cls, text: str) -> FilePath:
        """Build from either a URI or a plain local path, sniffing the scheme."""
        if parse_uri_scheme(text) is None:
            return cls.from_local_path(text)
        return cls.from_uri(text)

    def is_valid(self) -> bool:
        return bool(self._uri)

    def __bool__(self) -> bool:
        return self.is_valid()

    def uri(self) -> str:
        return self._uri

    def scheme(self) -> str | None:
        return parse_uri_scheme(self._uri)

    def has_uri_scheme(self, scheme: str) -> bool:
        return self.scheme() == scheme.lower()

    def is_native(self) -> bool:
        """True when the path lives on the local file system."""
        return self.local_path() is not None

    def local_path(self) -> str | None:
        """Decode a ``file://`` URI to a local path; ``None`` for other schemes."""
        if not self.has_uri_scheme("file"):
            return None
        parts = urlsplit(self._uri)
        if parts.netloc not in ("", "localhost"):
            return None
        return os.fsdecode(unquote_to_bytes(parts.path)) or "/"

    def parent_directory(self) -> str | None:
        local = self.local_path()
        if local is None:
            return None
        return os.path.dirname(local)

    def display_name(self) -> str:
        local = self.local_path()
        if local is not None:
            return local
        return self._uri

    def __str__(self) -> str:
        return self.display_name()


def paths_to_uris(paths: Iterable[FilePath]) -> list[str]:
    """Convert ``paths`` to URI strings, keeping input order."""
    return [path.uri() for path in paths]


__all__ = ["FilePath", "parse_uri_scheme", "paths_to_uris"]
