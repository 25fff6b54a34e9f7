"""gradle-select configuration.

Typed settings for a selection run. ``SelectionOptions`` is built once from the
command line and is frozen afterwards; ``GradleConfig`` describes how the build
tool is launched and is normally read from the environment.
"""

from __future__ import annotations

import os
import shlex
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Conventions
# ---------------------------------------------------------------------------

BUILD_DESCRIPTORS: tuple[str, ...] = ("build.gradle", "build.gradle.kts")
KTS_SUFFIX = ".kts"

# Trailing segments joined with "-" instead of ":" (``app/android`` -> ``app-android``).
RESERVED_SEGMENTS: frozenset[str] = frozenset({"android", "domain"})

DEFAULT_SETTINGS_FILE = "settings.gradle.kts"
DEFAULT_BUILD_SETTINGS_FILE = "build.settings.gradle.kts"
PREAMBLE_FILE = "settings.pre.gradle.kts"

DEFAULT_GRADLE_CMD = "./gradlew"
GRADLE_CMD_ENV = "GRADLE_CMD"

MAX_DEPTH_ALLOWED = 8


class SelectionOptions(BaseModel):
    """Everything that decides which projects are selected and how they run.

    Instances are immutable; the pipeline reads them but never changes them.
    """

    model_config = ConfigDict(frozen=True)

    since_commit: str | None = Field(
        default=None, description="Only keep projects changed since this commit"
    )
    includes: tuple[Path, ...] = Field(
        default=(), description="Extra directories scanned for projects"
    )
    regexp: str | None = Field(
        default=None, description="A project is picked if its name matches"
    )
    invert_match: str | None = Field(
        default=None, description="A picked project is denied if its name matches"
    )
    filter_command: str | None = Field(
        default=None, description="Shell command run in each project; non-zero denies it"
    )
    settings_file: Path | None = Field(
        default=None, description="Settings file to generate instead of the default"
    )
    threshold: int = Field(
        default=1000, ge=1, description="Max number of projects per Gradle run"
    )
    max_depth: int = Field(
        default=2, ge=1, le=MAX_DEPTH_ALLOWED, description="Directory levels to descend"
    )
    scan_impacted_projects: bool = Field(default=False)
    dry_run: bool = Field(default=False)
    gradle_args: tuple[str, ...] = Field(
        default=(), description="Arguments passed through to Gradle"
    )

    @property
    def runs_build(self) -> bool:
        """True when Gradle should be invoked rather than just writing settings."""
        return bool(self.gradle_args)

    def resolved_settings_file(self) -> Path:
        """Return the settings file to write for this run."""
        if self.settings_file is not None:
            return self.settings_file
        if self.runs_build:
            return Path(DEFAULT_BUILD_SETTINGS_FILE)
        return Path(DEFAULT_SETTINGS_FILE)


class GradleConfig(BaseModel):
    """How the Gradle process is launched."""

    command: list[str] = Field(default_factory=lambda: [DEFAULT_GRADLE_CMD])

    @classmethod
    def from_env(cls) -> "GradleConfig":
        """Build a ``GradleConfig`` from ``GRADLE_CMD``.

        The variable may carry arguments of its own (``GRADLE_CMD="gradle
        --offline"``); it is split with shell quoting rules.
        """
        raw = os.environ.get(GRADLE_CMD_ENV, "").strip()
        if not raw:
            return cls()
        return cls(command=shlex.split(raw))

    def argv(self, gradle_args: tuple[str, ...] | list[str], settings_file: Path) -> list[str]:
        """Full argument vector for one Gradle run against *settings_file*."""
        return [*self.command, *gradle_args, "-c", str(settings_file)]
