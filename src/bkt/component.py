"""Resource model and the SystemComponent adapter contract.

A ``SystemComponent`` bridges one kind of resource (flatpak apps, GNOME
extensions, ...) between the live system and its manifest. It knows how
to discover what is installed, load what is declared, and compute the
drift between the two.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from .differ import diff_collections

logger = logging.getLogger(__name__)


class Resource(ABC):
    """A single manageable thing with a stable identity.

    Two resources with the same ``id()`` describe the same managed thing,
    even when their content differs. Content equality is plain value
    equality, which frozen dataclasses provide for free.
    """

    @abstractmethod
    def id(self) -> str:
        """Identifier unique within the resource's domain."""

    def merge(self, other: Any) -> Any:
        """Combine with ``other`` when layering manifests (``other`` wins)."""
        return other

    def diff_key(self) -> str:
        return str(self.id())

    def content_differs(self, other: object) -> bool:
        return self != other


ItemT = TypeVar("ItemT", bound=Resource)
ManifestT = TypeVar("ManifestT")


@dataclass
class DriftReport(Generic[ItemT]):
    """Difference between the live system and the manifest for one component.

    Attributes:
        to_install: Declared in the manifest but absent from the system
        untracked: Present on the system but not declared
        to_update: ``(current, desired)`` pairs present on both sides with
            different content
        synced_count: Items present on both sides and matching
    """

    to_install: list[ItemT] = field(default_factory=list)
    untracked: list[ItemT] = field(default_factory=list)
    to_update: list[tuple[ItemT, ItemT]] = field(default_factory=list)
    synced_count: int = 0

    def is_synced(self) -> bool:
        return not self.to_install and not self.to_update

    def has_untracked(self) -> bool:
        return bool(self.untracked)

    def pending_count(self) -> int:
        return len(self.to_install)


@dataclass(frozen=True)
class ComponentStatus:
    """Read-only summary of a component's drift."""

    name: str
    total: int
    synced: int
    pending: int
    untracked: int
    to_update: int = 0

    @classmethod
    def from_drift(cls, name: str, drift: DriftReport[Any]) -> ComponentStatus:
        pending = drift.pending_count()
        updates = len(drift.to_update)
        return cls(
            name=name,
            total=drift.synced_count + pending + updates,
            synced=drift.synced_count,
            pending=pending,
            untracked=len(drift.untracked),
            to_update=updates,
        )

    def is_synced(self) -> bool:
        return self.pending == 0 and self.to_update == 0

    def has_drift(self) -> bool:
        return not self.is_synced() or self.untracked > 0


def presence_drift(system: Iterable[ItemT], manifest: Iterable[ItemT]) -> DriftReport[ItemT]:
    """Drift by identity alone: content differences are ignored."""
    system_by_id = {item.id(): item for item in system}
    manifest_by_id = {item.id(): item for item in manifest}

    to_install = [manifest_by_id[k] for k in sorted(manifest_by_id.keys() - system_by_id.keys())]
    untracked = [system_by_id[k] for k in sorted(system_by_id.keys() - manifest_by_id.keys())]
    synced = len(manifest_by_id.keys() & system_by_id.keys())

    return DriftReport(to_install=to_install, untracked=untracked, synced_count=synced)


def drift_from_diff(system: Iterable[ItemT], manifest: Iterable[ItemT]) -> DriftReport[ItemT]:
    """Content-aware drift built on ``diff_collections``.

    The system is the old side and the manifest the new side, so added
    items need installing, removed items are untracked, and changed items
    need updating.
    """
    system_items = list(system)
    manifest_items = list(manifest)
    diff = diff_collections(system_items, manifest_items)

    system_keys = {item.diff_key() for item in system_items}
    manifest_keys = {item.diff_key() for item in manifest_items}
    synced = len(system_keys & manifest_keys) - len(diff.changed)

    return DriftReport(
        to_install=list(diff.added),
        untracked=list(diff.removed),
        to_update=[(change.from_, change.to) for change in diff.changed],
        synced_count=synced,
    )


class SystemComponent(ABC, Generic[ItemT, ManifestT]):
    """Adapter between one resource kind and the live system.

    Subclasses must set ``name`` and implement ``scan_system``,
    ``load_manifest`` and ``manifest_items``. ``diff`` defaults to a
    presence-only comparison; override it to detect content changes.
    """

    name: str = ""

    @abstractmethod
    def scan_system(self) -> list[ItemT]:
        """Discover the live state.

        Raises:
            PlanningError: If the underlying tool or files cannot be read
        """

    @abstractmethod
    def load_manifest(self) -> ManifestT:
        """Load the merged (system + user) manifest."""

    @abstractmethod
    def manifest_items(self, manifest: ManifestT) -> list[ItemT]:
        """Extract the managed items from a manifest."""

    def diff(self, system: Sequence[ItemT], manifest: ManifestT) -> DriftReport[ItemT]:
        return presence_drift(system, self.manifest_items(manifest))

    def supports_capture(self) -> bool:
        return False

    def capture(
        self,
        system: Sequence[ItemT],
        item_filter: Callable[[ItemT], bool] | None = None,
    ) -> ManifestT | None:
        """Build a manifest from live items, or None if capture is unsupported.

        When ``item_filter`` is given, only items it accepts are captured.
        """
        if not self.supports_capture():
            return None
        selected = [item for item in system if item_filter is None or item_filter(item)]
        return self.capture_items(selected)

    def capture_items(self, system: Sequence[ItemT]) -> ManifestT | None:
        """Build a manifest holding ``system``. Capturing components override this."""
        return None

    def drift(self) -> DriftReport[ItemT]:
        system = self.scan_system()
        manifest = self.load_manifest()
        report = self.diff(system, manifest)
        logger.debug(
            "%s drift: %d to install, %d to update, %d untracked, %d synced",
            self.name,
            len(report.to_install),
            len(report.to_update),
            len(report.untracked),
            report.synced_count,
        )
        return report

    def status(self) -> ComponentStatus:
        return ComponentStatus.from_drift(self.name, self.drift())
