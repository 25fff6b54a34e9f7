"""Directories touched in git since a given commit.

Combines ``git diff --name-only -z --merge-base <ref>`` (tracked changes,
including uncommitted ones) with ``git ls-files --others --exclude-standard -z``
(new files not yet added) and reduces every path to its leading directory
prefixes. Paths are read NUL-separated, so git never quotes or escapes them.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from gradle_select.errors import ChangeSetError
from gradle_select.projects.registry import CommandRunner
from gradle_select.utils import Reporter, format_command, run_command


def collect_prefixes(paths: Iterable[str], max_depth: int) -> set[str]:
    """Reduce repository-relative *paths* to their directory prefixes.

    Each path contributes its first 1..*max_depth* segments, e.g. with
    ``max_depth=2`` the path ``libs/core/src/A.kt`` contributes ``libs`` and
    ``libs/core``. Blank entries are ignored.
    """
    prefixes: set[str] = set()
    for line in paths:
        if not line.strip():
            continue
        segments = line.split("/")
        for depth in range(1, min(max_depth, len(segments)) + 1):
            prefixes.add("/".join(segments[:depth]))
    return prefixes


async def find_vc_root(
    cwd: Path | None = None,
    runner: CommandRunner = run_command,
    reporter: Reporter | None = None,
) -> Path | None:
    """Return the top level of the git work tree containing *cwd*.

    Returns ``None`` (after a warning) when git is missing or *cwd* is not
    inside a repository; the caller then skips change-based selection.
    """
    reporter = reporter or Reporter()
    cmd = ["git", "rev-parse", "--show-toplevel"]
    try:
        returncode, stdout, stderr = await runner(cmd, cwd=cwd)
    except OSError as exc:
        reporter.warning(f"Find git root failed: {exc}")
        return None
    if returncode != 0 or not stdout:
        reporter.warning(f"Find git root failed: {stderr or 'not a git repository'}")
        return None
    root = Path(stdout.splitlines()[0]).resolve()
    reporter.debug(f"Git root is {root}")
    return root


class ChangeSetResolver:
    """Asks git which directories changed since a commit."""

    def __init__(
        self,
        vc_root: Path,
        runner: CommandRunner = run_command,
        reporter: Reporter | None = None,
    ) -> None:
        self.vc_root = Path(vc_root).resolve()
        self.runner = runner
        self.reporter = reporter or Reporter()

    async def _git_paths(self, *args: str) -> list[str]:
        """Run a git query given ``-z`` and return the NUL-separated paths."""
        cmd = ["git", *args]
        cmd_str = format_command(cmd)
        self.reporter.debug(f"Execute external command: {cmd_str}")
        try:
            returncode, stdout, stderr = await self.runner(cmd, cwd=self.vc_root)
        except OSError as exc:
            raise ChangeSetError(
                f"Can't get git diff: {exc}", command=cmd_str
            ) from exc
        if returncode != 0:
            raise ChangeSetError(
                f"Can't get git diff (exit {returncode}): {cmd_str}"
                + (f"\n{stderr}" if stderr else ""),
                command=cmd_str,
                returncode=returncode,
                stderr=stderr,
            )
        return [path for path in stdout.split("\0") if path]

    async def changed_files(self, commit_ref: str) -> list[str]:
        """Repository-relative paths changed since *commit_ref*.

        Raises:
            ChangeSetError: If either git query fails.
        """
        tracked = await self._git_paths("diff", "--name-only", "-z", "--merge-base", commit_ref)
        untracked = await self._git_paths("ls-files", "--others", "--exclude-standard", "-z")
        files = [*tracked, *untracked]
        self.reporter.debug(f"Diff files: {files}")
        return files

    async def changed_directories(self, commit_ref: str, max_depth: int) -> set[str]:
        """Directory prefixes (up to *max_depth* segments) touched since *commit_ref*."""
        files = await self.changed_files(commit_ref)
        return collect_prefixes(files, max_depth)
