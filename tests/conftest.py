"""Shared pytest fixtures for the gradle-select test suite.

Provides reusable fixtures for:
- Temporary Gradle source trees
- A real temporary git repository
- A recording reporter
- Scripted command runners and mock asyncio subprocesses
"""

from __future__ import annotations

import io
import subprocess
from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from rich.console import Console

from gradle_select.utils import Level, Reporter


# ---------------------------------------------------------------------------
# Source trees
# ---------------------------------------------------------------------------

def _make_tree(root: Path, *files: str) -> Path:
    """Create *files* (slash-separated, relative to *root*) with parents."""
    for name in files:
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("// test\n", encoding="utf-8")
    return root


@pytest.fixture
def tree_factory() -> Callable[..., Path]:
    """``tree_factory(root, "a/build.gradle", ...)`` creates files under *root*."""
    return _make_tree


@pytest.fixture
def gradle_tree(tmp_path: Path) -> Path:
    """A small modular tree::

        repo/app/build.gradle
        repo/app/android/build.gradle.kts
        repo/app/domain/build.gradle
        repo/lib/build.gradle
        repo/libs/core/build.gradle.kts
        repo/.idea/module/build.gradle   (hidden, never scanned)
        repo/build.gradle                (root build file, not a project)
    """
    root = tmp_path / "repo"
    return _make_tree(
        root,
        "app/build.gradle",
        "app/android/build.gradle.kts",
        "app/domain/build.gradle",
        "lib/build.gradle",
        "libs/core/build.gradle.kts",
        ".idea/module/build.gradle",
        "build.gradle",
    )


@pytest.fixture
def tmp_git_repo(tmp_path: Path) -> Path:
    """Temporary git repository holding a Gradle tree, with one commit.

    Creates a real git repo so that change detection runs against real
    ``git diff`` output.
    """
    repo_dir = tmp_path / "git-repo"
    repo_dir.mkdir()
    subprocess.run(["git", "init", "-q"], cwd=repo_dir, check=True, capture_output=True)
    subprocess.run(
        ["git", "config", "user.email", "test@gradle-select.local"],
        cwd=repo_dir, check=True, capture_output=True,
    )
    subprocess.run(
        ["git", "config", "user.name", "gradle-select test"],
        cwd=repo_dir, check=True, capture_output=True,
    )
    subprocess.run(
        ["git", "config", "commit.gpgsign", "false"],
        cwd=repo_dir, check=True, capture_output=True,
    )
    _make_tree(
        repo_dir,
        "app/build.gradle",
        "app/src/Main.kt",
        "lib/build.gradle",
        "libs/core/build.gradle.kts",
        "libs/core/src/Core.kt",
    )
    subprocess.run(["git", "add", "."], cwd=repo_dir, check=True, capture_output=True)
    subprocess.run(
        ["git", "commit", "-q", "-m", "Initial commit"],
        cwd=repo_dir, check=True, capture_output=True,
    )
    yield repo_dir


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------

@pytest.fixture
def recording_reporter() -> Reporter:
    """Reporter at debug level writing into an in-memory buffer."""
    out = Console(file=io.StringIO(), width=400, color_system=None, highlight=False)
    return Reporter(level=Level.DEBUG, out=out)


@pytest.fixture
def reporter_output(recording_reporter: Reporter) -> Callable[[], str]:
    """Returns a callable giving everything ``recording_reporter`` printed so far."""
    return lambda: recording_reporter.console.file.getvalue()


# ---------------------------------------------------------------------------
# Command runners
# ---------------------------------------------------------------------------

class FakeRunner:
    """Stands in for ``run_command``.

    Records every call and answers with whatever *handler* returns for it;
    a returned exception instance is raised instead.
    """

    def __init__(
        self, handler: Callable[..., Any] | None = None
    ) -> None:
        self.calls: list[tuple[Any, dict[str, Any]]] = []
        self.handler = handler or (lambda cmd, **kwargs: (0, "", ""))

    async def __call__(self, cmd: Any, **kwargs: Any) -> tuple[int, str, str]:
        self.calls.append((cmd, kwargs))
        result = self.handler(cmd, **kwargs)
        if isinstance(result, BaseException):
            raise result
        return result

    @property
    def commands(self) -> list[Any]:
        return [cmd for cmd, _ in self.calls]


@pytest.fixture
def fake_runner() -> type[FakeRunner]:
    """The ``FakeRunner`` class, for building scripted runners in tests."""
    return FakeRunner


@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory
