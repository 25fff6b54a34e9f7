"""Depth-bounded discovery of Gradle projects.

Walks a root directory with an explicit stack instead of recursion, so the
depth limit is enforced by the loop itself and the path segments of the
current directory are always at hand for naming the projects found.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import NamedTuple

from gradle_select.config import BUILD_DESCRIPTORS, KTS_SUFFIX
from gradle_select.errors import ScanError
from gradle_select.projects.naming import project_coordinates
from gradle_select.projects.registry import Project, ProjectRegistry
from gradle_select.utils import Reporter


class _Entry(NamedTuple):
    name: str
    is_dir: bool
    is_file: bool


@dataclass
class _Frame:
    path: Path
    name: str
    entries: Iterator[_Entry]


def _list_dir(path: Path) -> list[_Entry]:
    """Read *path* completely, subdirectories first, each group sorted by name.

    Subdirectories go first so that nested modules (``app/android``) are
    visited before the parent's own build file closes the directory.

    Raises:
        OSError: If the directory cannot be listed.
    """
    entries: list[_Entry] = []
    with os.scandir(path) as it:
        for entry in it:
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = entry.is_file()
            except OSError:
                continue
            entries.append(_Entry(entry.name, is_dir, is_file))
    entries.sort(key=lambda e: (not e.is_dir, e.name))
    return entries


class DirectoryScanner:
    """Finds ``build.gradle`` / ``build.gradle.kts`` files below a root.

    A directory containing a build descriptor is a project; once its
    descriptor is seen the rest of that directory is skipped. Hidden
    directories are never entered, and nothing deeper than ``max_depth``
    levels below the root is looked at.
    """

    def __init__(self, registry: ProjectRegistry, reporter: Reporter | None = None) -> None:
        self.registry = registry
        self.reporter = reporter or registry.reporter

    def scan(self, root: str | Path, max_depth: int) -> int:
        """Register every project under *root* into the registry.

        Args:
            root: Directory to scan; projects are named relative to it.
            max_depth: Deepest directory level (root is 0) that may hold a
                build descriptor.

        Returns:
            The number of projects registered by this scan.

        Raises:
            ScanError: If *root* itself cannot be listed.
        """
        root_path = Path(root).resolve()
        self.reporter.debug(f"Start scanning {root_path}")
        try:
            listing = _list_dir(root_path)
        except OSError as exc:
            raise ScanError(str(root_path), exc.strerror or str(exc)) from exc

        stack: list[_Frame] = [_Frame(root_path, "", iter(listing))]
        found = 0
        while stack:
            frame = stack[-1]
            depth = len(stack) - 1
            entry = next(frame.entries, None)
            if entry is None:
                stack.pop()
                continue

            if depth > 0 and entry.is_file and entry.name in BUILD_DESCRIPTORS:
                segments = [f.name for f in stack[1:]]
                identifier, relative_path = project_coordinates(segments)
                project = Project(
                    identifier=identifier,
                    relative_path=relative_path,
                    scan_root=root_path,
                    is_kts=entry.name.endswith(KTS_SUFFIX),
                )
                self.registry.add(project)
                self.reporter.debug(f"Found project {identifier} at {frame.path}, added")
                found += 1
                frame.entries = iter(())
            elif entry.is_dir and depth < max_depth and not entry.name.startswith("."):
                child = frame.path / entry.name
                try:
                    child_listing = _list_dir(child)
                except OSError as exc:
                    self.reporter.warning(f"Failed to iterate dir {child}: {exc}")
                    continue
                stack.append(_Frame(child, entry.name, iter(child_listing)))

        self.reporter.info(f"Found {found} project(s) under {root_path}")
        return found
