"""
bkt: configuration reconciliation for immutable-OS workstations.

bkt keeps declarative manifests (Flatpak apps, GNOME extensions,
GSettings, host shims, Homebrew formulae, layered packages) and the
running system in sync, in both directions:

- ``bkt capture`` records untracked system state into the user manifests
- ``bkt apply`` changes the system to match the manifests

Example:
    from bkt import CompositePlan, ExecuteContext, PlanContext, SubsystemRegistry

    registry = SubsystemRegistry.builtin()
    plan = CompositePlan("Apply")
    for subsystem in registry.filtered(exclude=["homebrew"]):
        command = subsystem.sync(ctx)
        if command is not None:
            plan.add(command.plan(ctx))

    print(plan.describe())
    report = plan.execute(ExecuteContext(options=ctx.options))
"""

from .command_runner import CommandOptions, CommandOutput, CommandRunner, RealCommandRunner
from .component import ComponentStatus, DriftReport, Resource, SystemComponent
from .differ import ChangedItem, Diffable, DiffResult, diff_collections, diff_string_sets
from .exceptions import (
    BktError,
    CommandError,
    ExecutionError,
    ManifestError,
    OperationError,
    PlanAlreadyExecutedError,
    PlanningError,
    ScanError,
    ValidationError,
)
from .pipeline import ExecutionMode, ExecutionOptions
from .plan import (
    CompositePlan,
    ExecuteContext,
    ExecutionReport,
    Operation,
    OperationProgress,
    OperationResult,
    Plan,
    Plannable,
    PlanContext,
    Planned,
    PlanSummary,
    PlanWarning,
    Step,
    StepPlan,
    Verb,
)
from .subsystem import Subsystem, SubsystemRegistry

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Diff engine
    "ChangedItem",
    "DiffResult",
    "Diffable",
    "diff_collections",
    "diff_string_sets",
    # Components
    "ComponentStatus",
    "DriftReport",
    "Resource",
    "SystemComponent",
    # Plans
    "CompositePlan",
    "ExecuteContext",
    "ExecutionReport",
    "Operation",
    "OperationProgress",
    "OperationResult",
    "Plan",
    "PlanContext",
    "PlanSummary",
    "PlanWarning",
    "Plannable",
    "Planned",
    "Step",
    "StepPlan",
    "Verb",
    # Subsystems
    "Subsystem",
    "SubsystemRegistry",
    # Execution
    "CommandOptions",
    "CommandOutput",
    "CommandRunner",
    "ExecutionMode",
    "ExecutionOptions",
    "RealCommandRunner",
    # Exceptions
    "BktError",
    "CommandError",
    "ExecutionError",
    "ManifestError",
    "OperationError",
    "PlanAlreadyExecutedError",
    "PlanningError",
    "ScanError",
    "ValidationError",
]
