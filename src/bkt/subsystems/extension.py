"""GNOME Shell extensions."""

from __future__ import annotations

from collections.abc import Sequence
from functools import partial

from ..command_runner import run_checked
from ..component import DriftReport, drift_from_diff
from ..manifest.extension import ExtensionItem, ExtensionManifest
from ..plan import Operation, Plannable, PlanContext, Step, Verb
from ..subsystem import Subsystem
from .base import CaptureCommand, ManifestComponent, SyncCommand, query

INSTALL_REMOTE_ARGS = [
    "call",
    "--session",
    "--dest",
    "org.gnome.Shell.Extensions",
    "--object-path",
    "/org/gnome/Shell/Extensions",
    "--method",
    "org.gnome.Shell.Extensions.InstallRemoteExtension",
]


def _parse_uuids(output: str | None) -> list[str]:
    if not output:
        return []
    return [line.strip() for line in output.splitlines() if line.strip()]


class ExtensionComponent(ManifestComponent[ExtensionItem, ExtensionManifest]):
    name = "GNOME Extensions"

    def scan_system(self) -> list[ExtensionItem]:
        enabled = _parse_uuids(
            query(self.runner, self.name, "gnome-extensions", ["list", "--enabled"])
        )
        disabled = _parse_uuids(
            query(self.runner, self.name, "gnome-extensions", ["list", "--disabled"])
        )
        items = [ExtensionItem(uuid=uuid, enabled=True) for uuid in enabled]
        items.extend(ExtensionItem(uuid=uuid, enabled=False) for uuid in disabled)
        return items

    def diff(
        self, system: Sequence[ExtensionItem], manifest: ExtensionManifest
    ) -> DriftReport[ExtensionItem]:
        return drift_from_diff(system, self.manifest_items(manifest))

    def supports_capture(self) -> bool:
        return True

    def capture_items(self, system: Sequence[ExtensionItem]) -> ExtensionManifest:
        return ExtensionManifest(items=tuple(sorted(system, key=lambda ext: ext.uuid)))

    # ---- actions ----

    def install(self, ext: ExtensionItem) -> None:
        run_checked(self.runner, "gdbus", [*INSTALL_REMOTE_ARGS, ext.uuid])
        self.set_enabled(ext)

    def set_enabled(self, ext: ExtensionItem) -> None:
        action = "enable" if ext.enabled else "disable"
        run_checked(self.runner, "gnome-extensions", [action, ext.uuid])


class ExtensionSync(SyncCommand[ExtensionItem, ExtensionManifest]):
    component: ExtensionComponent

    def steps(
        self, drift: DriftReport[ExtensionItem], manifest: ExtensionManifest
    ) -> list[Step]:
        steps = []
        for ext in drift.to_install:
            details = None if ext.enabled else "disabled"
            steps.append(
                Step(
                    Operation(Verb.INSTALL, f"extension:{ext.uuid}", details),
                    partial(self.component.install, ext),
                )
            )
        for _, desired in drift.to_update:
            verb = Verb.ENABLE if desired.enabled else Verb.DISABLE
            steps.append(
                Step(
                    Operation(verb, f"extension:{desired.uuid}"),
                    partial(self.component.set_enabled, desired),
                )
            )
        return steps


class ExtensionSubsystem(Subsystem):
    id = "extension"
    name = "GNOME Extensions"

    def component(self, ctx: PlanContext) -> ExtensionComponent:
        return ExtensionComponent(ctx.runner, ctx.store(ExtensionManifest))

    def supports_capture(self) -> bool:
        return True

    def supports_sync(self) -> bool:
        return True

    def sync(self, ctx: PlanContext) -> Plannable:
        return ExtensionSync(self.component(ctx))

    def capture(self, ctx: PlanContext) -> Plannable:
        return CaptureCommand("extension", self.component(ctx))
