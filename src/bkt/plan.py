"""Plan/execute engine.

Planning and execution are separate phases:

- ``Plannable.plan(ctx)`` inspects manifests and the live system and
  returns an immutable ``Plan``. It never mutates anything.
- ``Plan.describe()`` renders the plan as a ``PlanSummary`` for preview
  (this is what ``--dry-run`` shows).
- ``Plan.execute(ctx)`` performs every operation and returns an
  ``ExecutionReport``. A failing operation is recorded and execution
  moves on to the next one.

Plans from several subsystems are combined with ``CompositePlan``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .command_runner import CommandRunner
from .exceptions import ExecutionError, PlanAlreadyExecutedError
from .pipeline import ExecutionOptions

if TYPE_CHECKING:
    from .manifest.store import ManifestStore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


class Verb(Enum):
    """Kind of change an operation makes."""

    INSTALL = "install"
    REMOVE = "remove"
    UPDATE = "update"
    ENABLE = "enable"
    DISABLE = "disable"
    SET = "set"
    CREATE = "create"
    DELETE = "delete"
    CAPTURE = "capture"
    CONFIGURE = "configure"
    SKIP = "skip"

    @property
    def color(self) -> str | None:
        """Terminal colour used when rendering the verb."""
        return _VERB_COLORS.get(self)

    def __str__(self) -> str:
        return self.value


_VERB_COLORS = {
    Verb.INSTALL: "green",
    Verb.ENABLE: "green",
    Verb.CREATE: "green",
    Verb.REMOVE: "red",
    Verb.DISABLE: "red",
    Verb.DELETE: "red",
    Verb.SET: "yellow",
    Verb.UPDATE: "yellow",
    Verb.CONFIGURE: "yellow",
    Verb.CAPTURE: "cyan",
}


@dataclass(frozen=True)
class Operation:
    """A single planned change. Never executed during planning."""

    verb: Verb
    target: str  # e.g. "flatpak:org.gnome.Boxes"
    details: str | None = None

    def __str__(self) -> str:
        text = f"{self.verb} {self.target}"
        if self.details:
            text += f" ({self.details})"
        return text


@dataclass(frozen=True)
class PlanWarning:
    """Non-fatal issue discovered while planning."""

    target: str
    message: str

    def __str__(self) -> str:
        return f"{self.target}: {self.message}"


@dataclass(frozen=True)
class PlanSummary:
    """Immutable description of a plan.

    Composite plans keep one ``sections`` entry per contributing child in
    addition to the flattened ``operations`` and ``warnings``.
    """

    title: str
    operations: tuple[Operation, ...] = ()
    warnings: tuple[PlanWarning, ...] = ()
    sections: tuple[PlanSummary, ...] = ()

    def action_count(self) -> int:
        """Number of operations that will do something (``skip`` excluded)."""
        return sum(1 for op in self.operations if op.verb is not Verb.SKIP)

    def has_actions(self) -> bool:
        return self.action_count() > 0

    def has_warnings(self) -> bool:
        return bool(self.warnings)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OperationResult:
    """Outcome of executing one operation."""

    operation: Operation
    success: bool
    error: str | None = None

    @classmethod
    def succeeded(cls, operation: Operation) -> OperationResult:
        return cls(operation=operation, success=True)

    @classmethod
    def failed(cls, operation: Operation, error: str) -> OperationResult:
        return cls(operation=operation, success=False, error=error)


@dataclass(frozen=True)
class OperationProgress:
    """Progress notification sent after each completed operation."""

    current: int  # 1-based
    total: int
    result: OperationResult


ProgressCallback = Callable[[OperationProgress], None]


@dataclass
class ExecutionReport:
    """Ordered results of an execution."""

    results: list[OperationResult] = field(default_factory=list)

    def record(self, result: OperationResult) -> None:
        self.results.append(result)

    def record_success(self, operation: Operation) -> None:
        self.record(OperationResult.succeeded(operation))

    def record_failure(self, operation: Operation, error: str) -> None:
        self.record(OperationResult.failed(operation, error))

    def merge(self, other: ExecutionReport) -> None:
        self.results.extend(other.results)

    def success_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    def failure_count(self) -> int:
        return sum(1 for r in self.results if not r.success)

    def all_succeeded(self) -> bool:
        return self.failure_count() == 0

    def has_failures(self) -> bool:
        return self.failure_count() > 0

    def failures(self) -> list[OperationResult]:
        return [r for r in self.results if not r.success]


# ---------------------------------------------------------------------------
# Contexts
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PlanContext:
    """Read-only inputs for planning, built once per invocation."""

    working_dir: Path
    manifest_dir: Path  # writable user layer
    system_manifest_dir: Path
    shims_dir: Path
    options: ExecutionOptions = field(default_factory=ExecutionOptions)

    @property
    def runner(self) -> CommandRunner:
        return self.options.runner

    @property
    def dry_run(self) -> bool:
        return self.options.dry_run

    def store(self, manifest_cls: type[Any]) -> ManifestStore[Any]:
        """Manifest store for ``manifest_cls`` over the system and user layers."""
        from .manifest.store import ManifestStore

        return ManifestStore(manifest_cls, self.system_manifest_dir, self.manifest_dir)


@dataclass
class ExecuteContext:
    """Mutable state for one execution pass."""

    options: ExecutionOptions
    total_ops: int = 0
    progress_callback: ProgressCallback | None = None
    current_op: int = 0

    @property
    def runner(self) -> CommandRunner:
        return self.options.runner

    def ensure_usable(self) -> None:
        """Refuse to execute when the invocation is a dry run."""
        if self.options.dry_run:
            raise ExecutionError("Cannot execute a plan in dry-run mode")

    def notify_progress(self, result: OperationResult) -> None:
        self.current_op += 1
        if self.progress_callback is not None:
            self.progress_callback(
                OperationProgress(current=self.current_op, total=self.total_ops, result=result)
            )

    def run(
        self,
        report: ExecutionReport,
        operation: Operation,
        action: Callable[[], Any],
    ) -> OperationResult:
        """Run one action, record its outcome, and report progress.

        Any exception raised by ``action`` becomes a failed result.
        """
        try:
            action()
            result = OperationResult.succeeded(operation)
        except Exception as e:
            logger.warning("Failed to %s %s: %s", operation.verb, operation.target, e)
            result = OperationResult.failed(operation, str(e))

        report.record(result)
        self.notify_progress(result)
        return result


# ---------------------------------------------------------------------------
# Plan abstractions
# ---------------------------------------------------------------------------


class Plan(ABC):
    """A computed, immutable set of operations."""

    @abstractmethod
    def describe(self) -> PlanSummary:
        """Describe the plan without side effects."""

    @abstractmethod
    def execute(self, ctx: ExecuteContext) -> ExecutionReport:
        """Perform every operation and report the outcome."""

    def is_empty(self) -> bool:
        return not self.describe().operations


class Plannable(ABC):
    """Something that can produce a plan from the current state."""

    @abstractmethod
    def plan(self, ctx: PlanContext) -> Plan:
        """Build a plan. Must not mutate the system or the manifests."""

    def prepare(self, ctx: PlanContext) -> Planned:
        return Planned(self.plan(ctx))


@dataclass(frozen=True)
class Step:
    """An operation paired with the action that performs it."""

    operation: Operation
    action: Callable[[], Any] = field(compare=False)


class StepPlan(Plan):
    """Plan made of an ordered list of steps.

    The same step list backs both ``describe`` and ``execute``, so the
    preview order is the execution order.
    """

    def __init__(
        self,
        title: str,
        steps: Iterable[Step] = (),
        warnings: Iterable[PlanWarning] = (),
    ) -> None:
        self.title = title
        self._steps = tuple(steps)
        self._warnings = tuple(warnings)

    @property
    def steps(self) -> tuple[Step, ...]:
        return self._steps

    def describe(self) -> PlanSummary:
        return PlanSummary(
            title=self.title,
            operations=tuple(step.operation for step in self._steps),
            warnings=self._warnings,
        )

    def execute(self, ctx: ExecuteContext) -> ExecutionReport:
        ctx.ensure_usable()
        report = ExecutionReport()
        for step in self._steps:
            if step.operation.verb is Verb.SKIP:
                continue
            ctx.run(report, step.operation, step.action)
        return report


class Planned:
    """A plan that has been built and may be executed exactly once."""

    def __init__(self, plan: Plan) -> None:
        self._plan = plan
        self._summary: PlanSummary | None = None
        self._executed = False

    def describe(self) -> PlanSummary:
        if self._summary is None:
            self._summary = self._plan.describe()
        return self._summary

    def is_empty(self) -> bool:
        return self._plan.is_empty()

    @property
    def executed(self) -> bool:
        return self._executed

    def execute(self, ctx: ExecuteContext) -> ExecutionReport:
        if self._executed:
            raise PlanAlreadyExecutedError(self.describe().title)
        self._executed = True
        return self._plan.execute(ctx)


class CompositePlan(Plan):
    """Aggregates plans from several subsystems into one."""

    def __init__(self, name: str, plans: Sequence[Plan] = ()) -> None:
        self.name = name
        self._plans: list[Plan] = list(plans)

    def add(self, plan: Plan) -> None:
        """Append a child plan. Addition order is execution order."""
        self._plans.append(plan)

    @property
    def plans(self) -> tuple[Plan, ...]:
        return tuple(self._plans)

    def is_empty(self) -> bool:
        return all(plan.is_empty() for plan in self._plans)

    def describe(self) -> PlanSummary:
        sections: list[PlanSummary] = []
        operations: list[Operation] = []
        warnings: list[PlanWarning] = []
        for plan in self._plans:
            child = plan.describe()
            if not child.operations and not child.warnings:
                continue
            sections.append(child)
            operations.extend(child.operations)
            warnings.extend(child.warnings)

        return PlanSummary(
            title=f"{self.name} Plan",
            operations=tuple(operations),
            warnings=tuple(warnings),
            sections=tuple(sections),
        )

    def execute(self, ctx: ExecuteContext) -> ExecutionReport:
        ctx.ensure_usable()
        report = ExecutionReport()
        for plan in self._plans:
            if plan.is_empty():
                continue
            try:
                report.merge(plan.execute(ctx))
            except ExecutionError:
                raise
            except Exception as e:
                title = plan.describe().title
                logger.warning("Plan %s aborted: %s", title, e)
                report.record_failure(Operation(Verb.CONFIGURE, title, "plan aborted"), str(e))
        return report
