"""GSettings values.

Only keys named in the manifest are read from the system, so there are
never untracked settings and capture is not supported.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from functools import partial

from ..command_runner import run_checked
from ..component import DriftReport, drift_from_diff
from ..exceptions import CommandError
from ..manifest.gsetting import GSetting, GSettingsManifest
from ..plan import Operation, Plannable, PlanContext, PlanWarning, Step, Verb
from ..subsystem import Subsystem
from .base import ManifestComponent, SyncCommand

logger = logging.getLogger(__name__)


class GSettingComponent(ManifestComponent[GSetting, GSettingsManifest]):
    name = "GSettings"

    def scan_system(self) -> list[GSetting]:
        current = []
        for setting in self.load_manifest().items:
            value = self.read(setting)
            if value is not None:
                current.append(GSetting(schema=setting.schema, key=setting.key, value=value))
        return current

    def read(self, setting: GSetting) -> str | None:
        """Current value of ``setting``, or None if the schema or key is missing."""
        try:
            output = self.runner.run("gsettings", ["get", setting.schema, setting.key])
        except CommandError as e:
            logger.debug("gsettings unavailable: %s", e)
            return None
        if not output.ok:
            logger.debug("gsettings get %s failed: %s", setting.id(), output.stderr.strip())
            return None
        return output.stdout.strip()

    def diff(
        self, system: Sequence[GSetting], manifest: GSettingsManifest
    ) -> DriftReport[GSetting]:
        return drift_from_diff(system, self.manifest_items(manifest))

    def write(self, setting: GSetting) -> None:
        run_checked(self.runner, "gsettings", ["set", setting.schema, setting.key, setting.value])


class GSettingSync(SyncCommand[GSetting, GSettingsManifest]):
    component: GSettingComponent

    def steps(self, drift: DriftReport[GSetting], manifest: GSettingsManifest) -> list[Step]:
        return [
            Step(
                Operation(
                    Verb.SET,
                    f"gsetting:{desired.schema}.{desired.key}",
                    f"{current.value} -> {desired.value}",
                ),
                partial(self.component.write, desired),
            )
            for current, desired in drift.to_update
        ]

    def warnings(
        self, drift: DriftReport[GSetting], manifest: GSettingsManifest
    ) -> list[PlanWarning]:
        return [
            PlanWarning(f"gsetting:{s.schema}.{s.key}", "schema or key not found on this system")
            for s in drift.to_install
        ]


class GSettingSubsystem(Subsystem):
    id = "gsetting"
    name = "GSettings"

    def component(self, ctx: PlanContext) -> GSettingComponent:
        return GSettingComponent(ctx.runner, ctx.store(GSettingsManifest))

    def supports_sync(self) -> bool:
        return True

    def sync(self, ctx: PlanContext) -> Plannable:
        return GSettingSync(self.component(ctx))
