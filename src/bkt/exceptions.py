"""Exceptions for bkt."""

from typing import Any

# ---------------------------------------------------------------------------
# Base Exception
# ---------------------------------------------------------------------------


class BktError(Exception):
    """
    Base exception for all bkt errors.

    All exceptions raised by this package inherit from this class,
    allowing callers to catch all bkt-specific errors with a single
    except clause.
    """

    pass


# ---------------------------------------------------------------------------
# Category Exceptions
# ---------------------------------------------------------------------------


class PlanningError(BktError):
    """
    Base exception for errors raised while building a plan.

    Planning errors mean the desired state (manifests) or the live state
    (system scan) could not be determined. They are fatal for the whole
    command and are always raised before any mutation happens.
    """

    pass


class OperationError(BktError):
    """
    Base exception for a single failed operation during execution.

    Operation errors are caught by the executing plan and recorded as a
    failed result. They never abort the remaining operations.
    """

    pass


class ExecutionError(BktError):
    """
    Raised when ``execute()`` itself cannot proceed.

    This covers infrastructure failures of the execution machinery, not
    failures of individual operations.
    """

    pass


class ValidationError(BktError):
    """
    Raised when user input fails validation.

    Attributes:
        field: Name of the offending input
        value: The rejected value
        reason: Human-readable explanation
    """

    def __init__(self, field: str, value: Any, reason: str) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field} {value!r}: {reason}")


# ---------------------------------------------------------------------------
# Planning Exceptions
# ---------------------------------------------------------------------------


class ManifestError(PlanningError):
    """Raised when a manifest file cannot be read or parsed."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid manifest {path}: {reason}")


class ScanError(PlanningError):
    """Raised when the live state of a subsystem cannot be discovered."""

    def __init__(self, subsystem: str, reason: str) -> None:
        self.subsystem = subsystem
        self.reason = reason
        super().__init__(f"Failed to scan {subsystem}: {reason}")


# ---------------------------------------------------------------------------
# Operation Exceptions
# ---------------------------------------------------------------------------


class CommandError(OperationError):
    """
    Raised when an external command cannot be started or exits non-zero.

    Attributes:
        program: Executable that was invoked
        args: Arguments passed to the program
        returncode: Exit status, or None if the program never started
        stderr: Captured standard error (may be empty)
    """

    def __init__(
        self,
        program: str,
        args: list[str],
        returncode: int | None,
        stderr: str = "",
    ) -> None:
        self.program = program
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(self._format_message())

    @property
    def command_line(self) -> str:
        return " ".join([self.program, *self.args_list])

    def _format_message(self) -> str:
        if self.returncode is None:
            msg = f"Could not run '{self.command_line}'"
        else:
            msg = f"'{self.command_line}' exited with status {self.returncode}"
        detail = self.stderr.strip()
        if detail:
            msg += f": {detail}"
        return msg


# ---------------------------------------------------------------------------
# Execution Exceptions
# ---------------------------------------------------------------------------


class PlanAlreadyExecutedError(ExecutionError):
    """Raised when a plan is executed a second time."""

    def __init__(self, title: str) -> None:
        self.title = title
        super().__init__(f"Plan '{title}' has already been executed")
