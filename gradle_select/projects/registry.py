"""Discovered projects and their selection state.

The registry is filled by ``DirectoryScanner`` and then narrowed by the
selection operations, each of which only ever moves projects forward:

    Added  -> Picked | Denied
    Picked -> Denied | Dependency

Denied and Dependency are terminal.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Awaitable, Callable, Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from gradle_select.errors import FilterError
from gradle_select.projects.matcher import PatternMatcher
from gradle_select.utils import Reporter, run_command

if TYPE_CHECKING:
    from gradle_select.projects.changes import ChangeSetResolver

CommandRunner = Callable[..., Awaitable[tuple[int, str, str]]]


class ProjectState(str, Enum):
    """Where a project stands in the selection pipeline."""

    ADDED = "added"
    PICKED = "picked"
    DENIED = "denied"
    DEPENDENCY = "dependency"


_ALLOWED_MOVES: dict[ProjectState, frozenset[ProjectState]] = {
    ProjectState.ADDED: frozenset({ProjectState.PICKED, ProjectState.DENIED}),
    ProjectState.PICKED: frozenset({ProjectState.DENIED, ProjectState.DEPENDENCY}),
    ProjectState.DENIED: frozenset(),
    ProjectState.DEPENDENCY: frozenset(),
}

SELECTED_STATES: frozenset[ProjectState] = frozenset(
    {ProjectState.PICKED, ProjectState.DEPENDENCY}
)


@dataclass
class Project:
    """A Gradle project found under one of the scan roots."""

    identifier: str
    relative_path: str
    scan_root: Path
    is_kts: bool = False
    state: ProjectState = ProjectState.ADDED

    @property
    def directory(self) -> Path:
        """Absolute directory holding the project's build descriptor."""
        return self.scan_root / self.relative_path


class ProjectRegistry:
    """All projects of one run, keyed by identifier.

    Registering an identifier that already exists replaces the earlier record
    (roots may overlap, the last scan wins); so does registering a second
    identifier for a directory that is already known. Enumeration follows first
    registration order, which keeps partitions stable within a run.
    """

    def __init__(self, reporter: Reporter | None = None) -> None:
        self.reporter = reporter or Reporter()
        self._entries: dict[str, Project] = {}
        self._by_directory: dict[Path, str] = {}

    # ------------------------------------------------------------------
    # Population
    # ------------------------------------------------------------------

    def add(self, project: Project) -> None:
        previous = self._entries.get(project.identifier)
        if previous is not None:
            self.reporter.debug(
                f"Project {project.identifier} under {project.scan_root} "
                f"replaces the one under {previous.scan_root}"
            )
            self._by_directory.pop(previous.directory, None)
        # Overlapping roots can name one directory twice (``app`` from a
        # subdirectory, ``sub:app`` from the git root); keep the later name.
        other = self._by_directory.get(project.directory)
        if other is not None and other != project.identifier:
            self.reporter.debug(
                f"Project {project.identifier} replaces {other}, both at {project.directory}"
            )
            del self._entries[other]
        project.state = ProjectState.ADDED
        self._entries[project.identifier] = project
        self._by_directory[project.directory] = project.identifier

    def get(self, identifier: str) -> Project | None:
        return self._entries.get(identifier)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._entries

    def __iter__(self) -> Iterator[Project]:
        return iter(self._entries.values())

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    def entries(self, states: Iterable[ProjectState]) -> list[Project]:
        """Projects currently in any of *states*, in registration order."""
        wanted = frozenset(states)
        return [p for p in self._entries.values() if p.state in wanted]

    def counts(self) -> dict[ProjectState, int]:
        """Number of projects per state."""
        result = {state: 0 for state in ProjectState}
        for project in self._entries.values():
            result[project.state] += 1
        return result

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _move(self, project: Project, to: ProjectState) -> bool:
        if to not in _ALLOWED_MOVES[project.state]:
            return False
        self.reporter.debug(
            f"Move {project.identifier} from {project.state.value} to {to.value}"
        )
        project.state = to
        return True

    def _move_matching(
        self, pattern: str, source: ProjectState, target: ProjectState
    ) -> int:
        matcher = PatternMatcher(pattern)
        moved = 0
        for project in self.entries([source]):
            if matcher.matches(project.identifier) and self._move(project, target):
                moved += 1
        return moved

    def pick(self, pattern: str) -> int:
        """Pick every added project whose identifier matches *pattern*.

        Raises:
            PatternError: If *pattern* is not a valid regular expression.
        """
        moved = self._move_matching(pattern, ProjectState.ADDED, ProjectState.PICKED)
        self.reporter.info(f"Picked {moved} project(s) matching {pattern}")
        return moved

    def pick_all(self) -> int:
        moved = sum(
            1
            for project in self.entries([ProjectState.ADDED])
            if self._move(project, ProjectState.PICKED)
        )
        self.reporter.debug("Moved every added project to picked")
        return moved

    def deny(self, pattern: str) -> int:
        """Deny every picked project whose identifier matches *pattern*."""
        moved = self._move_matching(pattern, ProjectState.PICKED, ProjectState.DENIED)
        self.reporter.info(f"Denied {moved} project(s) matching {pattern}")
        return moved

    async def deny_by_filter(
        self, command: str, runner: CommandRunner = run_command
    ) -> int:
        """Run *command* in every picked project; deny those where it fails.

        Projects are evaluated one after another. The command goes through
        the shell, so pipes and globs work as they would on the terminal, and
        its output goes straight to ours so wrapper scripts can read it.

        Raises:
            FilterError: If the shell cannot be started for a project.
        """
        moved = 0
        for project in self.entries([ProjectState.PICKED]):
            try:
                returncode, _, _ = await runner(
                    command,
                    cwd=project.directory,
                    timeout=None,
                    capture=False,
                    stdin=asyncio.subprocess.DEVNULL,
                )
            except OSError as exc:
                raise FilterError(
                    f"Cannot run filter in {project.directory}: {exc}",
                    command=command,
                ) from exc
            if returncode != 0:
                self.reporter.debug(f"Filter exited {returncode} in {project.identifier}")
                if self._move(project, ProjectState.DENIED):
                    moved += 1
        self.reporter.info(f"Filter {command!r} denied {moved} project(s)")
        return moved

    def deny_untouched(self, changed: set[str], vc_root: Path | None = None) -> int:
        """Deny picked projects whose directory is not in *changed*.

        *changed* holds repository-relative directory prefixes. A project
        counts as touched only when its own directory is one of them.
        """
        moved = 0
        for project in self.entries([ProjectState.PICKED]):
            key = _change_key(project, vc_root)
            if key not in changed and self._move(project, ProjectState.DENIED):
                moved += 1
        self.reporter.info(f"Denied {moved} unchanged project(s)")
        return moved

    async def deny_unless_changed_since(
        self, commit_ref: str, max_depth: int, resolver: "ChangeSetResolver"
    ) -> int:
        """Deny picked projects that have no changes since *commit_ref*.

        Raises:
            ChangeSetError: If git cannot list the changes.
        """
        changed = await resolver.changed_directories(commit_ref, max_depth)
        return self.deny_untouched(changed, resolver.vc_root)

    def mark_dependencies(self) -> int:
        """Move projects that selected projects depend on to Dependency.

        Dependency discovery is not implemented yet; nothing is moved.
        """
        self.reporter.debug("Dependency scanning is not available, no projects added")
        return 0


def _change_key(project: Project, vc_root: Path | None) -> str:
    """Path of *project* in the form git reports changes in."""
    if vc_root is None:
        return project.relative_path.replace(os.sep, "/")
    try:
        relative = project.directory.relative_to(vc_root)
    except ValueError:
        return project.relative_path.replace(os.sep, "/")
    return relative.as_posix()
