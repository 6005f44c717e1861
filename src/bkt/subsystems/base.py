"""Shared building blocks for subsystem adapters."""

from __future__ import annotations

import logging
from abc import abstractmethod
from collections.abc import Callable, Sequence
from typing import Any, Generic, TypeVar

from ..command_runner import CommandRunner
from ..component import DriftReport, Resource, SystemComponent
from ..exceptions import CommandError, ScanError
from ..manifest.base import ItemManifest
from ..manifest.store import ManifestStore
from ..plan import Operation, Plan, Plannable, PlanContext, PlanWarning, Step, StepPlan, Verb

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT", bound=Resource)
M = TypeVar("M", bound=ItemManifest[Any])


def query(runner: CommandRunner, subsystem: str, program: str, args: Sequence[str]) -> str | None:
    """Run a read-only query and return its stdout.

    Returns None when the program is not available on this machine.

    Raises:
        ScanError: If the program runs but exits non-zero
    """
    try:
        output = runner.run(program, args)
    except CommandError as e:
        if e.returncode is not None:
            raise
        logger.debug("%s not available, treating %s as empty", program, subsystem)
        return None
    if not output.ok:
        detail = output.stderr.strip() or f"exit status {output.returncode}"
        raise ScanError(subsystem, f"{program} {' '.join(args)}: {detail}")
    return output.stdout


class ManifestComponent(SystemComponent[ItemT, M]):
    """Component whose desired state comes from a layered manifest store."""

    def __init__(self, runner: CommandRunner, store: ManifestStore[M]) -> None:
        self.runner = runner
        self.store = store

    def load_manifest(self) -> M:
        return self.store.load_merged()

    def manifest_items(self, manifest: M) -> list[ItemT]:
        return list(manifest.items)


class SyncCommand(Plannable, Generic[ItemT, M]):
    """Plans manifest -> system changes for one component."""

    def __init__(self, component: ManifestComponent[ItemT, M]) -> None:
        self.component = component

    def plan(self, ctx: PlanContext) -> Plan:
        system = self.component.scan_system()
        manifest = self.component.load_manifest()
        drift = self.component.diff(system, manifest)
        return StepPlan(
            f"{self.component.name} Sync",
            self.steps(drift, manifest),
            self.warnings(drift, manifest),
        )

    @abstractmethod
    def steps(self, drift: DriftReport[ItemT], manifest: M) -> list[Step]:
        """Turn drift into ordered steps."""

    def warnings(self, drift: DriftReport[ItemT], manifest: M) -> list[PlanWarning]:
        return []


class CaptureCommand(Plannable, Generic[ItemT, M]):
    """Plans system -> manifest capture of untracked items.

    Each captured item becomes one ``capture`` operation that merges it
    into the user manifest layer.
    """

    def __init__(self, prefix: str, component: ManifestComponent[ItemT, M]) -> None:
        self.prefix = prefix
        self.component = component

    def plan(self, ctx: PlanContext) -> Plan:
        title = f"{self.component.name} Capture"
        system = self.component.scan_system()
        manifest = self.component.load_manifest()
        drift = self.component.diff(system, manifest)

        captured = self.component.capture(drift.untracked)
        if captured is None:
            return StepPlan(title)

        steps = [
            Step(
                Operation(Verb.CAPTURE, f"{self.prefix}:{item.id()}"),
                self._capture_action(item),
            )
            for item in captured.items
        ]
        logger.debug("%s: %d item(s) to capture", self.component.name, len(steps))
        return StepPlan(title, steps)

    def _capture_action(self, item: ItemT) -> Callable[[], None]:
        store = self.component.store

        def write() -> None:
            store.save_user(store.load_user().with_items(item))

        return write
