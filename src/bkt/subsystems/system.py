"""Packages layered onto the image with rpm-ostree.

Layering changes require a reboot and are managed through the image
build, so this subsystem only captures.
"""

from __future__ import annotations

import json
from collections.abc import Sequence

from ..component import DriftReport
from ..differ import diff_string_sets
from ..exceptions import ScanError
from ..manifest.system import Package, SystemPackagesManifest
from ..plan import Plannable, PlanContext
from ..subsystem import Subsystem
from .base import CaptureCommand, ManifestComponent, query


def parse_requested_packages(output: str) -> list[str]:
    """Extract requested packages of the first deployment from ``rpm-ostree status --json``."""
    status = json.loads(output)
    deployments = status.get("deployments") or []
    if not deployments:
        return []
    return sorted(deployments[0].get("requested-packages") or [])


class SystemPackagesComponent(ManifestComponent[Package, SystemPackagesManifest]):
    name = "System Packages"

    def scan_system(self) -> list[Package]:
        output = query(self.runner, self.name, "rpm-ostree", ["status", "--json"])
        if not output:
            return []
        try:
            names = parse_requested_packages(output)
        except (ValueError, AttributeError) as e:
            raise ScanError(self.name, f"unexpected rpm-ostree output: {e}") from e
        return [Package(name=name) for name in names]

    def diff(
        self, system: Sequence[Package], manifest: SystemPackagesManifest
    ) -> DriftReport[Package]:
        result = diff_string_sets(
            (p.name for p in system), (p.name for p in self.manifest_items(manifest))
        )
        system_names = {p.name for p in system}
        manifest_names = {p.name for p in manifest.items}
        return DriftReport(
            to_install=[Package(name=n) for n in result.added],
            untracked=[Package(name=n) for n in result.removed],
            synced_count=len(system_names & manifest_names),
        )

    def supports_capture(self) -> bool:
        return True

    def capture_items(self, system: Sequence[Package]) -> SystemPackagesManifest:
        return SystemPackagesManifest(items=tuple(sorted(system, key=lambda p: p.name)))


class SystemSubsystem(Subsystem):
    id = "system"
    name = "System Packages"

    def component(self, ctx: PlanContext) -> SystemPackagesComponent:
        return SystemPackagesComponent(ctx.runner, ctx.store(SystemPackagesManifest))

    def supports_capture(self) -> bool:
        return True

    def capture(self, ctx: PlanContext) -> Plannable:
        return CaptureCommand("package", self.component(ctx))
