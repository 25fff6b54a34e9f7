"""Gradle settings file generation.

The generated file starts with a fixed warning header, then the verbatim
contents of ``settings.pre.gradle.kts`` from the same directory (hand-written
settings such as plugin management), then two lines per project::

    include(":app-android")
    project(":app-android").projectDir = file("../repo/app/android")

Project directories are written relative to the settings file's directory so
the file stays valid when the checkout moves.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

from gradle_select.config import PREAMBLE_FILE
from gradle_select.errors import ManifestError
from gradle_select.projects.registry import Project
from gradle_select.utils import Reporter

HEADER = (
    "// this is auto generated, please don't edit.\n"
    f"// You can add logic in {PREAMBLE_FILE} instead.\n"
    "// Run gradle-select again to regenerate this file.\n"
)

ENTRY_TEMPLATE = (
    'include(":{identifier}")\n'
    'project(":{identifier}").projectDir = file("{root}/{path}")\n'
)


def format_entry(identifier: str, root: str, path: str) -> str:
    """The two settings lines registering one project."""
    return ENTRY_TEMPLATE.format(identifier=identifier, root=root, path=path)


def _read_preamble(directory: Path, reporter: Reporter) -> str:
    preamble = directory / PREAMBLE_FILE
    try:
        return preamble.read_text(encoding="utf-8")
    except OSError as exc:
        reporter.warning(f"Read {PREAMBLE_FILE} file failed: {exc.strerror or exc}")
        return ""


def write_manifest(
    projects: Iterable[Project],
    destination: str | Path,
    reporter: Reporter | None = None,
) -> int:
    """Write a Gradle settings file including *projects*.

    The directory of *destination* must already exist; it is not created.

    Args:
        projects: Projects to include, written in the given order.
        destination: Settings file to create or truncate.
        reporter: Where progress and warnings go.

    Returns:
        The number of projects written.

    Raises:
        ManifestError: If the file cannot be created or written.
    """
    reporter = reporter or Reporter()
    target = Path(destination)
    directory = target.parent.resolve()

    reporter.debug(f"Start writing projects into {target}")
    relative_roots: dict[Path, str] = {}
    count = 0
    try:
        with target.open("w", encoding="utf-8") as fh:
            fh.write(HEADER)
            fh.write(_read_preamble(directory, reporter))
            for project in projects:
                root = relative_roots.get(project.scan_root)
                if root is None:
                    root = Path(os.path.relpath(project.scan_root, directory)).as_posix()
                    relative_roots[project.scan_root] = root
                fh.write(
                    format_entry(
                        project.identifier,
                        root,
                        Path(project.relative_path).as_posix(),
                    )
                )
                reporter.info(f"Add project {project.identifier}")
                count += 1
    except OSError as exc:
        raise ManifestError(str(target), exc.strerror or str(exc)) from exc

    reporter.debug(f"Wrote {count} project(s) into {target}")
    return count
