"""Desktop entry (``.desktop``) parsing and ``Exec`` field-code expansion."""

from __future__ import annotations

import configparser
import re
import shlex
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from .paths import FilePath

DESKTOP_GROUP = "Desktop Entry"
DESKTOP_SUFFIX = ".desktop"

_FIELD_CODE_RE = re.compile(r"%(.)")


@dataclass(frozen=True)
class DesktopEntry:
    """The keys of a desktop entry the launcher acts on."""

    filename: Path
    type: str
    name: str = ""
    exec: str = ""
    url: str = ""
    icon: str = ""
    path: str = ""
    terminal: bool = False
    hidden: bool = False
    mime_types: tuple[str, ...] = ()

    @property
    def is_application(self) -> bool:
        return self.type == "Application" and bool(self.exec) and not self.hidden

    @property
    def is_link(self) -> bool:
        return self.type == "Link"


def _split_list(value: str) -> tuple[str, ...]:
    return tuple(item for item in value.split(";") if item)


def _as_bool(value: str) -> bool:
    return value.strip().lower() == "true"


def parse_desktop_entry(filename: Path) -> DesktopEntry | None:
    """Parse ``filename``; ``None`` when it is unreadable or has no entry group."""
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    parser.optionxform = str  # keys are case-sensitive
    try:
        with filename.open(encoding="utf-8", errors="replace") as handle:
            parser.read_file(handle)
    except (OSError, configparser.Error):
        return None
    if not parser.has_section(DESKTOP_GROUP):
        return None

    group = parser[DESKTOP_GROUP]
    return DesktopEntry(
        filename=filename,
        type=group.get("Type", "Application").strip(),
        name=group.get("Name", "").strip(),
        exec=group.get("Exec", "").strip(),
        url=group.get("URL", "").strip(),
        icon=group.get("Icon", "").strip(),
        path=group.get("Path", "").strip(),
        terminal=_as_bool(group.get("Terminal", "false")),
        hidden=_as_bool(group.get("Hidden", "false")),
        mime_types=_split_list(group.get("MimeType", "")),
    )


def _uri_as_file_arg(uri: str) -> str:
    local = FilePath.from_uri(uri).local_path()
    return local if local is not None else uri


def _expand_tokens(
    tokens: Sequence[str],
    uris: Sequence[str],
    *,
    name: str,
    icon: str,
    desktop_file: str,
) -> list[str]:
    def replace(match: re.Match[str]) -> str:
        code = match.group(1)
        if code == "%":
            return "%"
        if code == "f":
            return _uri_as_file_arg(uris[0]) if uris else ""
        if code == "u":
            return uris[0] if uris else ""
        if code == "c":
            return name
        if code == "k":
            return desktop_file
        # deprecated (%d %D %n %N %v %m) and unknown codes expand to nothing
        return ""

    argv: list[str] = []
    for token in tokens:
        if token == "%F":
            argv.extend(_uri_as_file_arg(uri) for uri in uris)
        elif token == "%U":
            argv.extend(uris)
        elif token == "%i":
            if icon:
                argv.extend(["--icon", icon])
        elif _FIELD_CODE_RE.search(token) is None:
            argv.append(token)
        else:
            expanded = _FIELD_CODE_RE.sub(replace, token)
            if expanded:
                argv.append(expanded)
    return argv


def expand_exec(
    exec_line: str,
    uris: Sequence[str],
    *,
    name: str = "",
    icon: str = "",
    desktop_file: str = "",
) -> list[list[str]]:
    """Expand an ``Exec`` value into one argv per process to spawn.

    ``%F``/``%U`` take every file in one process. ``%f``/``%u`` take one
    file, so several files mean several processes. A command line without
    any file code is treated as if it ended with ``%f``.
    """
    try:
        tokens = shlex.split(exec_line)
    except ValueError:
        return []
    if not tokens:
        return []

    options = {"name": name, "icon": icon, "desktop_file": desktop_file}
    takes_many = any(token in ("%F", "%U") for token in tokens)
    if takes_many or not uris:
        return [_expand_tokens(tokens, uris, **options)]
    if not any("%f" in token or "%u" in token for token in tokens):
        tokens = [*tokens, "%f"]
    return [_expand_tokens(tokens, [uri], **options) for uri in uris]


__all__ = [
    "DESKTOP_GROUP",
    "DESKTOP_SUFFIX",
    "DesktopEntry",
    "expand_exec",
    "parse_desktop_entry",
]
