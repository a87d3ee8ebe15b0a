"""Launch error values routed through the error-reporting hook.

Errors are plain values, never raised for control flow. Each one carries a
domain, a code and a human-readable message.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum

LAUNCH_DOMAIN = "filelauncher"
OS_DOMAIN = "os"


class ErrorCode(Enum):
    NOT_MOUNTED = "not-mounted"
    INVALID_DESKTOP_ENTRY = "invalid-desktop-entry"
    WORKING_DIRECTORY = "working-directory-change-failed"
    LAUNCH_FAILED = "launch-failed"
    NO_APPLICATION = "no-application"
    TOO_MANY_RESOLUTIONS = "too-many-resolutions"


@dataclass(frozen=True)
class LaunchError:
    """One (domain, code, message) error triple."""

    domain: str
    code: ErrorCode
    message: str
    errno: int | None = None

    def __str__(self) -> str:
        return self.message

    @classmethod
    def not_mounted(cls) -> LaunchError:
        return cls(LAUNCH_DOMAIN, ErrorCode.NOT_MOUNTED, "The path is not mounted.")

    @classmethod
    def invalid_desktop_entry(cls, identifier: str) -> LaunchError:
        return cls(
            LAUNCH_DOMAIN,
            ErrorCode.INVALID_DESKTOP_ENTRY,
            f"Invalid desktop entry file: '{identifier}'",
        )

    @classmethod
    def working_directory(cls, directory: str, exc: OSError) -> LaunchError:
        reason = exc.strerror or (os.strerror(exc.errno) if exc.errno else str(exc))
        return cls(
            OS_DOMAIN,
            ErrorCode.WORKING_DIRECTORY,
            f"Cannot set working directory to '{directory}': {reason}",
            errno=exc.errno,
        )

    @classmethod
    def launch_failed(cls, message: str, errno: int | None = None) -> LaunchError:
        return cls(LAUNCH_DOMAIN, ErrorCode.LAUNCH_FAILED, message, errno=errno)

    @classmethod
    def no_application(cls, mime_type: str) -> LaunchError:
        return cls(
            LAUNCH_DOMAIN,
            ErrorCode.NO_APPLICATION,
            f"No application is registered for '{mime_type}'",
        )

    @classmethod
    def too_many_resolutions(cls, depth: int) -> LaunchError:
        return cls(
            LAUNCH_DOMAIN,
            ErrorCode.TOO_MANY_RESOLUTIONS,
            f"Gave up resolving paths after {depth} attempts",
        )


__all__ = ["ErrorCode", "LAUNCH_DOMAIN", "LaunchError", "OS_DOMAIN"]
