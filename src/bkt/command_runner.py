"""External command execution boundary.

Subsystems never shell out directly. They receive a ``CommandRunner``
through their context, so tests can substitute a fake host.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from .exceptions import CommandError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandOptions:
    """Optional working directory and extra environment for a command."""

    cwd: Path | None = None
    env: Mapping[str, str] | None = None


@dataclass(frozen=True)
class CommandOutput:
    """Captured result of a finished command."""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@runtime_checkable
class CommandRunner(Protocol):
    """Runs an external program and captures its output.

    Implementations must not raise for a non-zero exit status; they raise
    ``CommandError`` only when the program cannot be started at all.
    """

    def run(
        self,
        program: str,
        args: Sequence[str],
        options: CommandOptions | None = None,
    ) -> CommandOutput: ...


class RealCommandRunner:
    """CommandRunner backed by ``subprocess.run``."""

    def run(
        self,
        program: str,
        args: Sequence[str],
        options: CommandOptions | None = None,
    ) -> CommandOutput:
        options = options or CommandOptions()
        env = None
        if options.env:
            env = {**os.environ, **options.env}

        logger.debug("Running %s %s", program, " ".join(args))
        try:
            proc = subprocess.run(
                [program, *args],
                cwd=options.cwd,
                env=env,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            raise CommandError(program, list(args), None, str(e)) from e

        return CommandOutput(returncode=proc.returncode, stdout=proc.stdout, stderr=proc.stderr)


def run_checked(
    runner: CommandRunner,
    program: str,
    args: Sequence[str],
    options: CommandOptions | None = None,
) -> CommandOutput:
    """Run a command and raise ``CommandError`` if it exits non-zero."""
    output = runner.run(program, args, options)
    if not output.ok:
        raise CommandError(program, list(args), output.returncode, output.stderr)
    return output
