"""Shared utility functions for gradle-select.

Provides async command execution and Rich-based reporting. The core modules
never print directly; they receive a ``Reporter`` so that tests can capture
what a run said without touching process-wide streams.
"""

from __future__ import annotations

import asyncio
import os
from enum import IntEnum
from pathlib import Path
from typing import IO, Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

console = Console(stderr=True)

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: str | list[str],
    cwd: str | Path | None = None,
    timeout: float | None = 120,
    capture: bool = True,
    env: dict[str, str] | None = None,
    stdin: int | IO[Any] | None = None,
) -> tuple[int, str, str]:
    """Run a command asynchronously.

    Args:
        cmd: Shell command string or list of arguments.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed;
            ``None`` waits for as long as the process runs.
        capture: Whether to capture stdout/stderr (if ``False`` they inherit
            the parent's streams).
        env: Optional extra environment variables merged on top of ``os.environ``.
        stdin: Standard input for the child, e.g. ``asyncio.subprocess.DEVNULL``.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  If *capture* is ``False``
        the stdout/stderr strings will be empty.

    Raises:
        OSError: If the program cannot be started (missing binary, bad cwd).
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    stdout_pipe = asyncio.subprocess.PIPE if capture else None
    stderr_pipe = asyncio.subprocess.PIPE if capture else None

    if isinstance(cmd, list):
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=stdin,
            stdout=stdout_pipe,
            stderr=stderr_pipe,
            cwd=str(cwd) if cwd else None,
            env=merged_env,
        )
    else:
        process = await asyncio.create_subprocess_shell(
            cmd,
            stdin=stdin,
            stdout=stdout_pipe,
            stderr=stderr_pipe,
            cwd=str(cwd) if cwd else None,
            env=merged_env,
        )

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (
            -1,
            "",
            f"Command timed out after {timeout}s: {format_command(cmd)}",
        )

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


def format_command(cmd: str | list[str]) -> str:
    """Render a command for diagnostics."""
    return cmd if isinstance(cmd, str) else " ".join(cmd)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
        format_duration(3661.0) -> "1h 1m 1s"
    """
    if seconds < 0:
        return "0.0s"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = seconds % 60

    parts: list[str] = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")

    if hours > 0 or minutes > 0:
        parts.append(f"{int(secs)}s")
    else:
        parts.append(f"{secs:.1f}s")

    return " ".join(parts)


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


class Level(IntEnum):
    """Reporter verbosity levels, lowest is the most verbose."""

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40


def level_from_flags(verbose: int = 0, quiet: bool = False) -> Level:
    """Map ``--verbose`` repetitions and ``-q`` to a reporter level.

    Warnings are shown by default, one ``--verbose`` adds info, two add debug and
    ``-q`` keeps only errors.
    """
    if quiet:
        return Level.ERROR
    if verbose >= 2:
        return Level.DEBUG
    if verbose == 1:
        return Level.INFO
    return Level.WARNING


_LEVEL_STYLES: dict[Level, str] = {
    Level.DEBUG: "dim",
    Level.INFO: "cyan",
    Level.WARNING: "bold yellow",
    Level.ERROR: "bold red",
}


class Reporter:
    """Levelled, Rich-rendered message sink passed through the pipeline.

    Messages are plain text; they are escaped before rendering so project
    names or paths containing ``[`` never get read as markup.
    """

    def __init__(self, level: Level = Level.WARNING, out: Console | None = None) -> None:
        self.level = level
        self.console = out or console

    def enabled(self, level: Level) -> bool:
        return level >= self.level

    def log(self, level: Level, message: str) -> None:
        if not self.enabled(level):
            return
        style = _LEVEL_STYLES[level]
        label = level.name.lower()
        self.console.print(f"[{style}]{label}:[/{style}] {escape(message)}")

    def debug(self, message: str) -> None:
        self.log(Level.DEBUG, message)

    def info(self, message: str) -> None:
        self.log(Level.INFO, message)

    def warning(self, message: str) -> None:
        self.log(Level.WARNING, message)

    def error(self, message: str) -> None:
        self.log(Level.ERROR, message)

    def echo(self, message: str) -> None:
        """Print *message* on one line whatever the level; used for requested output."""
        self.console.print(escape(message), soft_wrap=True)

    def summary(self, data: dict[str, Any], title: str = "Summary") -> None:
        """Print a summary table unless the reporter is quieter than info."""
        if self.enabled(Level.INFO):
            print_summary_table(data, title=title, out=self.console)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_summary_table(
    data: dict[str, Any], title: str = "Summary", out: Console | None = None
) -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
        out: Console to print to; defaults to the module console.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, escape(str(value)))

    target = out or console
    target.print(table)


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")
