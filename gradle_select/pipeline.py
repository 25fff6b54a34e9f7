"""gradle-select pipeline orchestrator.

Runs one selection from start to finish:

1. Locate the git work tree (optional) and collect the scan roots.
2. Scan every root for Gradle projects.
3. Narrow them down: name pattern, inverted pattern, shell filter, changes
   since a commit, then dependants.
4. Either run Gradle on the selection, one settings file per batch, or just
   write a single settings file for the IDE.

Usage::

    python -m gradle_select -e '^app' -- assembleDebug
    python -m gradle_select -s origin/main -v ':legacy' -- test
    python -m gradle_select -e 'feature' -c settings.gradle.kts
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from gradle_select.builder import GradleRunner, partition, write_manifest
from gradle_select.config import GradleConfig, SelectionOptions
from gradle_select.errors import GradleSelectError, ScanError
from gradle_select.projects import (
    SELECTED_STATES,
    ChangeSetResolver,
    DirectoryScanner,
    ProjectRegistry,
    ProjectState,
    find_vc_root,
)
from gradle_select.projects.registry import CommandRunner, Project
from gradle_select.utils import (
    Reporter,
    format_duration,
    level_from_flags,
    print_error,
    run_command,
)


class Pipeline:
    """Scan, select, then build or write settings.

    Attributes:
        options: The frozen selection options for this run.
        registry: Every project discovered during the run.
        reporter: Sink for progress messages and warnings.
    """

    def __init__(
        self,
        options: SelectionOptions,
        gradle: GradleConfig | None = None,
        reporter: Reporter | None = None,
        runner: CommandRunner = run_command,
        cwd: Path | None = None,
    ) -> None:
        self.options = options
        self.reporter = reporter or Reporter()
        self.runner = runner
        self.cwd = (cwd or Path.cwd()).resolve()
        self.gradle = GradleRunner(gradle, runner=runner, reporter=self.reporter, cwd=self.cwd)
        self.registry = ProjectRegistry(self.reporter)
        self.vc_root: Path | None = None
        self.stats: dict[str, Any] = {}

    # ------------------------------------------------------------------
    # Roots & scanning
    # ------------------------------------------------------------------

    def scan_roots(self) -> list[Path]:
        """The working directory, the git root and every ``--include``, deduplicated."""
        roots: list[Path] = [self.cwd]
        if self.vc_root is not None:
            roots.append(self.vc_root)
        roots.extend((self.cwd / include).resolve() for include in self.options.includes)

        unique: list[Path] = []
        for root in roots:
            if root not in unique:
                unique.append(root)
        return unique

    def scan(self, roots: list[Path]) -> int:
        """Scan *roots* into the registry.

        A root that cannot be read is skipped with a warning.

        Raises:
            ScanError: If none of the roots could be read.
        """
        scanned = 0
        for root in roots:
            try:
                DirectoryScanner(self.registry, self.reporter).scan(root, self.options.max_depth)
            except ScanError as exc:
                self.reporter.warning(str(exc))
                continue
            scanned += 1
        if roots and not scanned:
            raise ScanError(", ".join(str(r) for r in roots), "no scan root could be read")
        self.stats["Roots scanned"] = scanned
        self.stats["Projects found"] = len(self.registry)
        return scanned

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    async def select(self) -> list[Project]:
        """Apply every configured filter in order and return the selection."""
        opts = self.options
        if opts.regexp is not None:
            self.registry.pick(opts.regexp)
        else:
            self.registry.pick_all()

        if opts.invert_match is not None:
            self.registry.deny(opts.invert_match)

        if opts.filter_command:
            await self.registry.deny_by_filter(opts.filter_command, runner=self.runner)

        if opts.since_commit:
            if self.vc_root is not None:
                resolver = ChangeSetResolver(self.vc_root, runner=self.runner, reporter=self.reporter)
                await self.registry.deny_unless_changed_since(
                    opts.since_commit, opts.max_depth, resolver
                )
            else:
                self.reporter.warning(
                    f"Not in a git repository, ignoring --since-commit {opts.since_commit}"
                )

        if opts.scan_impacted_projects:
            self.registry.mark_dependencies()

        counts = self.registry.counts()
        self.stats["Picked"] = counts[ProjectState.PICKED]
        self.stats["Dependencies"] = counts[ProjectState.DEPENDENCY]
        self.stats["Denied"] = counts[ProjectState.DENIED]
        return self.registry.entries(SELECTED_STATES)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    async def build(self, selected: list[Project]) -> int:
        """Write one settings file per batch and run Gradle on each.

        Returns:
            The number of Gradle runs.

        Raises:
            ManifestError: If a settings file cannot be written.
            BuildError: If any Gradle run fails; later batches are not run.
        """
        settings_file = self.cwd / self.options.resolved_settings_file()
        runs = 0
        for batch in partition(selected, self.options.threshold):
            runs += 1
            self.reporter.info(f"Batch {runs}: {len(batch)} project(s)")
            write_manifest(batch, settings_file, self.reporter)
            elapsed = await self.gradle.run(self.options.gradle_args, settings_file)
            self.reporter.info(f"Batch {runs} finished in {format_duration(elapsed)}")
        if not runs:
            self.reporter.warning("No project selected, Gradle was not run")
        self.stats["Gradle runs"] = runs
        return runs

    def write_settings(self, selected: list[Project]) -> Path:
        """Write a single settings file covering the whole selection."""
        settings_file = self.cwd / self.options.resolved_settings_file()
        write_manifest(selected, settings_file, self.reporter)
        self.stats["Settings file"] = str(settings_file)
        return settings_file

    # ------------------------------------------------------------------
    # Full run
    # ------------------------------------------------------------------

    async def run(self) -> dict[str, Any]:
        """Execute the pipeline.

        Returns:
            Run statistics (roots, counts per state, Gradle runs).

        Raises:
            GradleSelectError: On any fatal error.
        """
        self.vc_root = await find_vc_root(self.cwd, runner=self.runner, reporter=self.reporter)
        if self.vc_root is not None:
            self.reporter.debug(f"Add git root {self.vc_root} as one root")

        self.scan(self.scan_roots())
        selected = await self.select()

        if self.options.dry_run:
            for project in selected:
                self.reporter.echo(f"Add project {project.identifier}")
        elif self.options.runs_build:
            await self.build(selected)
        else:
            self.write_settings(selected)

        self.reporter.summary(self.stats, title="gradle-select")
        return self.stats


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gradle-select",
        allow_abbrev=False,
        description="Select Gradle projects in a large tree and build only those.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Environment:\n"
            "  GRADLE_CMD  Gradle command used for building, may carry arguments\n"
            "              (default: ./gradlew)\n\n"
            "Examples:\n"
            "  gradle-select -e '^app' assembleDebug --offline\n"
            "  gradle-select -s origin/main --threshold 200 -- test\n"
            "  gradle-select -e feature -c settings.gradle.kts\n"
        ),
    )
    parser.add_argument(
        "-s", "--since-commit",
        help="Only select projects changed since the given commit",
    )
    parser.add_argument(
        "-i", "--include",
        action="append",
        default=[],
        type=Path,
        help="Also scan for projects under the given path (repeatable)",
    )
    parser.add_argument(
        "-e", "--regexp",
        help="A project is selected if its name matches the pattern",
    )
    parser.add_argument(
        "-v", "--invert-match",
        help="A project is NOT selected if its name matches the pattern",
    )
    parser.add_argument(
        "-f", "--filter",
        dest="filter_command",
        help="Shell command run in each project directory; non-zero exit deselects it",
    )
    parser.add_argument(
        "-c", "--settings-file",
        type=Path,
        help="The Gradle settings file to generate and use",
    )
    parser.add_argument(
        "--threshold",
        type=int,
        default=1000,
        help="Max number of projects per Gradle run (default: 1000)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=2,
        help="Descend at most N directory levels (default: 2)",
    )
    parser.add_argument(
        "--scan-impacted-projects",
        action="store_true",
        help="Add projects impacted by the selected projects too",
    )
    parser.add_argument(
        "-n", "--dry-run",
        action="store_true",
        help="Only list the selected projects",
    )
    parser.add_argument(
        "--verbose",
        action="count",
        default=0,
        help="More output, can be given twice",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only report errors",
    )
    parser.add_argument(
        "gradle_args",
        nargs=argparse.REMAINDER,
        help=(
            "Gradle tasks and arguments (unknown options are passed on too);"
            " without them only the settings file is written"
        ),
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse the command line.

    Options gradle-select does not know go to Gradle, followed by everything
    from the first task name on, so ``gradle-select -e app --offline build``
    runs Gradle with ``--offline build``. A ``--`` separator works as well.
    """
    args, unknown = build_parser().parse_known_args(argv)
    remainder = list(args.gradle_args)
    if remainder[:1] == ["--"]:
        remainder = remainder[1:]
    args.gradle_args = [*unknown, *remainder]
    return args


def options_from_args(args: argparse.Namespace) -> SelectionOptions:
    """Build ``SelectionOptions`` from parsed CLI arguments.

    Raises:
        ValidationError: If a value is out of range.
    """
    gradle_args = list(args.gradle_args)
    if gradle_args and gradle_args[0] == "--":
        gradle_args = gradle_args[1:]
    return SelectionOptions(
        since_commit=args.since_commit,
        includes=tuple(args.include),
        regexp=args.regexp,
        invert_match=args.invert_match,
        filter_command=args.filter_command,
        settings_file=args.settings_file,
        threshold=args.threshold,
        max_depth=args.max_depth,
        scan_impacted_projects=args.scan_impacted_projects,
        dry_run=args.dry_run,
        gradle_args=tuple(gradle_args),
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``gradle-select`` / ``python -m gradle_select``."""
    args = parse_args(argv)

    try:
        options = options_from_args(args)
    except ValidationError as exc:
        error = exc.errors()[0]
        field = ".".join(str(part) for part in error["loc"])
        print_error(f"Invalid --{field.replace('_', '-')}: {error['msg']}")
        sys.exit(1)

    reporter = Reporter(level=level_from_flags(args.verbose, args.quiet))
    pipeline = Pipeline(options, GradleConfig.from_env(), reporter=reporter)
    try:
        asyncio.run(pipeline.run())
    except GradleSelectError as exc:
        print_error(str(exc))
        sys.exit(1)


if __name__ == "__main__":
    main()
