"""Gradle process management.

Launches Gradle against a generated settings file and waits for it. Gradle's
output goes straight to the terminal; its stdin is closed so a build can never
block waiting for input.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence
from pathlib import Path

from gradle_select.config import GradleConfig
from gradle_select.errors import BuildError
from gradle_select.projects.registry import CommandRunner
from gradle_select.utils import Reporter, format_command, run_command


class GradleRunner:
    """Runs Gradle once per settings file."""

    def __init__(
        self,
        config: GradleConfig | None = None,
        runner: CommandRunner = run_command,
        reporter: Reporter | None = None,
        cwd: Path | None = None,
    ) -> None:
        self.config = config or GradleConfig.from_env()
        self.runner = runner
        self.reporter = reporter or Reporter()
        self.cwd = cwd

    async def run(self, gradle_args: Sequence[str], settings_file: Path) -> float:
        """Run Gradle with *gradle_args* against *settings_file*.

        Returns:
            Wall-clock seconds the build took.

        Raises:
            BuildError: If Gradle cannot be started or exits non-zero.
        """
        argv = self.config.argv(tuple(gradle_args), settings_file)
        cmd_str = format_command(argv)
        self.reporter.info(f"Start run gradle {' '.join(gradle_args)} on {settings_file}")
        self.reporter.debug(f"Gradle command is: {cmd_str}")

        start = time.monotonic()
        try:
            returncode, _, _ = await self.runner(
                argv,
                cwd=self.cwd,
                timeout=None,
                capture=False,
                stdin=asyncio.subprocess.DEVNULL,
            )
        except OSError as exc:
            raise BuildError(
                f"Execute command failed: {cmd_str}: {exc}",
                command=cmd_str,
            ) from exc

        if returncode != 0:
            raise BuildError(
                f"Execute command failed (exit {returncode}): {cmd_str}",
                command=cmd_str,
                returncode=returncode,
            )
        return time.monotonic() - start
