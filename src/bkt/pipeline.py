"""Execution options shared by planning and execution."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path

from .command_runner import CommandRunner, RealCommandRunner
from .config import FORCE_HOST_ENV_VAR, TOOLBOX_MARKER


class ExecutionMode(Enum):
    """Where the invocation runs and what it may touch."""

    HOST = "host"  # Mutate the running host
    DEV = "dev"  # Running inside a toolbox container
    IMAGE = "image"  # Only plan against manifests, never mutate locally


def detect_mode() -> ExecutionMode:
    """Guess the execution mode from the environment."""
    if os.environ.get(FORCE_HOST_ENV_VAR):
        return ExecutionMode.HOST
    if Path(TOOLBOX_MARKER).exists():
        return ExecutionMode.DEV
    return ExecutionMode.HOST


@dataclass(frozen=True)
class ExecutionOptions:
    """Per-invocation options handed to every plan and subsystem."""

    dry_run: bool = False
    mode: ExecutionMode = ExecutionMode.HOST
    runner: CommandRunner = field(default_factory=RealCommandRunner)

    def should_execute_locally(self) -> bool:
        return not self.dry_run and self.mode is not ExecutionMode.IMAGE

    def with_dry_run(self, dry_run: bool = True) -> ExecutionOptions:
        return replace(self, dry_run=dry_run)
