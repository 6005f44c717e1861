"""Homebrew formulae (Linuxbrew)."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from functools import partial

from ..command_runner import run_checked
from ..component import DriftReport
from ..manifest.homebrew import BrewFormula, HomebrewManifest
from ..plan import Operation, Plannable, PlanContext, Step, Verb
from ..subsystem import Subsystem
from .base import CaptureCommand, ManifestComponent, SyncCommand, query

logger = logging.getLogger(__name__)


def _lines(output: str | None) -> list[str]:
    if not output:
        return []
    return [line.strip() for line in output.splitlines() if line.strip()]


class HomebrewComponent(ManifestComponent[BrewFormula, HomebrewManifest]):
    """Formulae are compared by name only; the tap is not checked."""

    name = "Homebrew"

    def scan_system(self) -> list[BrewFormula]:
        output = query(self.runner, self.name, "brew", ["list", "--formula", "-1"])
        return [BrewFormula(name=name) for name in _lines(output)]

    def installed_taps(self) -> set[str]:
        return set(_lines(query(self.runner, self.name, "brew", ["tap"])))

    def leaves(self) -> set[str]:
        """Formulae installed on request (not as dependencies)."""
        output = query(self.runner, self.name, "brew", ["leaves", "-r"])
        return {BrewFormula.parse(line).name for line in _lines(output)}

    def supports_capture(self) -> bool:
        return True

    def capture_items(self, system: Sequence[BrewFormula]) -> HomebrewManifest:
        leaves = self.leaves()
        captured = sorted((f for f in system if f.name in leaves), key=lambda f: f.name)
        logger.debug(
            "Homebrew capture: %d of %d untracked formulae are leaves", len(captured), len(system)
        )
        return HomebrewManifest(items=tuple(captured))

    # ---- actions ----

    def tap(self, tap: str) -> None:
        run_checked(self.runner, "brew", ["tap", tap])

    def install(self, formula: BrewFormula) -> None:
        run_checked(self.runner, "brew", ["install", formula.qualified_name])


class HomebrewSync(SyncCommand[BrewFormula, HomebrewManifest]):
    """Declared and required taps are added before any formula is installed."""

    component: HomebrewComponent

    def steps(self, drift: DriftReport[BrewFormula], manifest: HomebrewManifest) -> list[Step]:
        steps = []
        taps = manifest.required_taps(drift.to_install)
        existing = self.component.installed_taps() if taps else set()
        for tap in taps:
            if tap not in existing:
                op = Operation(Verb.INSTALL, f"tap:{tap}")
                steps.append(Step(op, partial(self.component.tap, tap)))
        for formula in drift.to_install:
            steps.append(
                Step(
                    Operation(Verb.INSTALL, f"brew:{formula.name}", formula.tap),
                    partial(self.component.install, formula),
                )
            )
        return steps


class HomebrewSubsystem(Subsystem):
    id = "homebrew"
    name = "Homebrew"

    def component(self, ctx: PlanContext) -> HomebrewComponent:
        return HomebrewComponent(ctx.runner, ctx.store(HomebrewManifest))

    def supports_capture(self) -> bool:
        return True

    def supports_sync(self) -> bool:
        return True

    def sync(self, ctx: PlanContext) -> Plannable:
        return HomebrewSync(self.component(ctx))

    def capture(self, ctx: PlanContext) -> Plannable:
        return CaptureCommand("brew", self.component(ctx))
