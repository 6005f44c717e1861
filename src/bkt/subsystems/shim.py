"""Host shims: small scripts that forward a command from a toolbox to the host."""

from __future__ import annotations

import re
from collections.abc import Sequence
from functools import partial
from pathlib import Path

from ..command_runner import CommandRunner
from ..component import DriftReport, drift_from_diff
from ..exceptions import ScanError
from ..manifest.shim import Shim, ShimsManifest
from ..manifest.store import ManifestStore
from ..plan import Operation, Plannable, PlanContext, PlanWarning, Step, Verb
from ..subsystem import Subsystem
from .base import ManifestComponent, SyncCommand

SHIM_TEMPLATE = """#!/bin/sh
# Generated by bkt. Do not edit.
exec flatpak-spawn --host {host} "$@"
"""

HOST_PATTERN = re.compile(r'^exec flatpak-spawn --host (\S+) "\$@"$', re.MULTILINE)


def render_shim(shim: Shim) -> str:
    return SHIM_TEMPLATE.format(host=shim.host_command)


def parse_shim(name: str, content: str) -> Shim:
    """Recover a Shim from a script. Unrecognised scripts forward to ``name``."""
    match = HOST_PATTERN.search(content)
    if match is None or match.group(1) == name:
        return Shim(name=name)
    return Shim(name=name, host=match.group(1))


class ShimComponent(ManifestComponent[Shim, ShimsManifest]):
    name = "Host Shims"

    def __init__(
        self,
        runner: CommandRunner,
        store: ManifestStore[ShimsManifest],
        shims_dir: Path,
    ) -> None:
        super().__init__(runner, store)
        self.shims_dir = Path(shims_dir)

    def scan_system(self) -> list[Shim]:
        if not self.shims_dir.is_dir():
            return []
        shims = []
        try:
            for path in sorted(self.shims_dir.iterdir()):
                if path.is_file():
                    shims.append(parse_shim(path.name, path.read_text()))
        except OSError as e:
            raise ScanError(self.name, str(e)) from e
        return shims

    def diff(self, system: Sequence[Shim], manifest: ShimsManifest) -> DriftReport[Shim]:
        return drift_from_diff(system, self.manifest_items(manifest))

    def write(self, shim: Shim) -> None:
        self.shims_dir.mkdir(parents=True, exist_ok=True)
        path = self.shims_dir / shim.name
        path.write_text(render_shim(shim))
        path.chmod(0o755)


class ShimSync(SyncCommand[Shim, ShimsManifest]):
    component: ShimComponent

    def steps(self, drift: DriftReport[Shim], manifest: ShimsManifest) -> list[Step]:
        steps = []
        for shim in drift.to_install:
            steps.append(
                Step(
                    Operation(Verb.CREATE, f"shim:{shim.name}", f"-> host {shim.host_command}"),
                    partial(self.component.write, shim),
                )
            )
        for current, desired in drift.to_update:
            steps.append(
                Step(
                    Operation(
                        Verb.UPDATE,
                        f"shim:{desired.name}",
                        f"host {current.host_command} -> {desired.host_command}",
                    ),
                    partial(self.component.write, desired),
                )
            )
        return steps

    def warnings(self, drift: DriftReport[Shim], manifest: ShimsManifest) -> list[PlanWarning]:
        return [
            PlanWarning(f"shim:{shim.name}", "exists on disk but is not in the manifest")
            for shim in drift.untracked
        ]


class ShimSubsystem(Subsystem):
    id = "shim"
    name = "Host Shims"

    def component(self, ctx: PlanContext) -> ShimComponent:
        return ShimComponent(ctx.runner, ctx.store(ShimsManifest), ctx.shims_dir)

    def supports_sync(self) -> bool:
        return True

    def sync(self, ctx: PlanContext) -> Plannable:
        return ShimSync(self.component(ctx))
