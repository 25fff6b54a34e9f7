"""Exception hierarchy for gradle-select.

Every error that should stop a run derives from ``GradleSelectError`` so the
CLI entry point can report it as a single diagnostic line.
"""

from __future__ import annotations


class GradleSelectError(Exception):
    """Base class for all fatal gradle-select errors."""


class PatternError(GradleSelectError):
    """Raised when a project name pattern cannot be compiled."""

    def __init__(self, pattern: str, reason: str = ""):
        self.pattern = pattern
        message = f"Invalid regex: {pattern}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ScanError(GradleSelectError):
    """Raised when a scan root cannot be opened."""

    def __init__(self, root: str, reason: str = ""):
        self.root = root
        super().__init__(f"Cannot scan {root}: {reason}" if reason else f"Cannot scan {root}")


class CommandError(GradleSelectError):
    """Raised when an external command fails.

    Carries the command line, its exit code (``None`` if it never started)
    and whatever it wrote to stderr.
    """

    def __init__(
        self,
        message: str,
        command: str = "",
        returncode: int | None = None,
        stderr: str = "",
    ):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


class FilterError(CommandError):
    """Raised when a shell filter cannot be started for a project."""


class ChangeSetError(CommandError):
    """Raised when git cannot report the files changed since a commit."""


class BuildError(CommandError):
    """Raised when the Gradle process fails to start or exits non-zero."""


class ManifestError(GradleSelectError):
    """Raised when the generated settings file cannot be written."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        super().__init__(
            f"Cannot create settings file {path}: {reason}" if reason
            else f"Cannot create settings file {path}"
        )
