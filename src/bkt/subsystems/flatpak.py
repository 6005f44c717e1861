"""Flatpak applications."""

from __future__ import annotations

from collections.abc import Sequence
from functools import partial

from ..command_runner import run_checked
from ..component import DriftReport, drift_from_diff
from ..manifest.flatpak import FlatpakApp, FlatpakManifest, FlatpakScope
from ..plan import Operation, Plannable, PlanContext, Step, Verb
from ..subsystem import Subsystem
from .base import CaptureCommand, ManifestComponent, SyncCommand, query

LIST_ARGS = ["list", "--app", "--columns=application,origin,installation,branch"]


def parse_flatpak_list(output: str) -> list[FlatpakApp]:
    """Parse tab-separated ``flatpak list`` output."""
    apps = []
    for line in output.splitlines():
        if not line.strip():
            continue
        cols = line.split("\t")
        app_id = cols[0].strip()
        remote = cols[1].strip() if len(cols) > 1 else ""
        installation = cols[2].strip() if len(cols) > 2 else "system"
        branch = cols[3].strip() if len(cols) > 3 else ""
        scope = FlatpakScope.USER if installation == "user" else FlatpakScope.SYSTEM
        apps.append(FlatpakApp(app_id=app_id, remote=remote, scope=scope, branch=branch or None))
    return apps


class FlatpakComponent(ManifestComponent[FlatpakApp, FlatpakManifest]):
    name = "Flatpak Apps"

    def scan_system(self) -> list[FlatpakApp]:
        output = query(self.runner, self.name, "flatpak", LIST_ARGS)
        return parse_flatpak_list(output) if output else []

    def diff(
        self, system: Sequence[FlatpakApp], manifest: FlatpakManifest
    ) -> DriftReport[FlatpakApp]:
        return drift_from_diff(system, self.manifest_items(manifest))

    def supports_capture(self) -> bool:
        return True

    def capture_items(self, system: Sequence[FlatpakApp]) -> FlatpakManifest:
        return FlatpakManifest(items=tuple(sorted(system, key=lambda app: app.app_id)))

    # ---- actions ----

    def install(self, app: FlatpakApp) -> None:
        run_checked(
            self.runner,
            "flatpak",
            ["install", "-y", "--noninteractive", f"--{app.scope.value}", app.remote, app.ref],
        )
        if app.overrides:
            run_checked(
                self.runner,
                "flatpak",
                ["override", f"--{app.scope.value}", *app.overrides, app.app_id],
            )
        if app.commit:
            run_checked(
                self.runner,
                "flatpak",
                [
                    "update",
                    "-y",
                    "--noninteractive",
                    f"--{app.scope.value}",
                    f"--commit={app.commit}",
                    app.app_id,
                ],
            )

    def uninstall(self, app: FlatpakApp) -> None:
        run_checked(
            self.runner,
            "flatpak",
            ["uninstall", "-y", "--noninteractive", f"--{app.scope.value}", app.app_id],
        )

    def reinstall(self, current: FlatpakApp, desired: FlatpakApp) -> None:
        self.uninstall(current)
        self.install(desired)


def _describe_change(current: FlatpakApp, desired: FlatpakApp) -> str:
    changes = []
    if current.remote != desired.remote:
        changes.append(f"remote {current.remote} -> {desired.remote}")
    if current.scope != desired.scope:
        changes.append(f"scope {current.scope.value} -> {desired.scope.value}")
    if desired.branch is not None and current.branch != desired.branch:
        changes.append(f"branch {current.branch} -> {desired.branch}")
    return ", ".join(changes)


class FlatpakSync(SyncCommand[FlatpakApp, FlatpakManifest]):
    component: FlatpakComponent

    def steps(self, drift: DriftReport[FlatpakApp], manifest: FlatpakManifest) -> list[Step]:
        steps = []
        for app in drift.to_install:
            details = f"{app.remote}, {app.scope.value}"
            op = Operation(Verb.INSTALL, f"flatpak:{app.app_id}", details)
            steps.append(Step(op, partial(self.component.install, app)))
        for current, desired in drift.to_update:
            details = _describe_change(current, desired)
            op = Operation(Verb.UPDATE, f"flatpak:{desired.app_id}", details)
            steps.append(Step(op, partial(self.component.reinstall, current, desired)))
        return steps


class FlatpakSubsystem(Subsystem):
    id = "flatpak"
    name = "Flatpak Apps"

    def component(self, ctx: PlanContext) -> FlatpakComponent:
        return FlatpakComponent(ctx.runner, ctx.store(FlatpakManifest))

    def supports_capture(self) -> bool:
        return True

    def supports_sync(self) -> bool:
        return True

    def sync(self, ctx: PlanContext) -> Plannable:
        return FlatpakSync(self.component(ctx))

    def capture(self, ctx: PlanContext) -> Plannable:
        return CaptureCommand("flatpak", self.component(ctx))
