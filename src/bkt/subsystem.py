"""Subsystem catalog.

A subsystem is one kind of managed resource (flatpak apps, GNOME
extensions, ...). The registry lists every subsystem along with what it
supports, so commands can build a plan over a filtered subset.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

from .component import SystemComponent
from .exceptions import ValidationError
from .plan import Plannable, PlanContext


def normalize_id(subsystem_id: str) -> str:
    """Canonical form of a subsystem id (``Home-Brew`` -> ``homebrew``)."""
    return subsystem_id.strip().lower().replace("-", "")


class Subsystem(ABC):
    """One managed resource kind and its capabilities."""

    id: str = ""
    name: str = ""

    @abstractmethod
    def component(self, ctx: PlanContext) -> SystemComponent[Any, Any]:
        """Build the system adapter for this invocation."""

    def supports_capture(self) -> bool:
        return False

    def supports_sync(self) -> bool:
        return False

    def supports_drift(self) -> bool:
        return True

    def sync(self, ctx: PlanContext) -> Plannable | None:
        """Manifest -> system command, or None if unsupported."""
        return None

    def capture(self, ctx: PlanContext) -> Plannable | None:
        """System -> manifest command, or None if unsupported."""
        return None

    def load_manifest(self, ctx: PlanContext) -> Any:
        return self.component(ctx).load_manifest()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"


class SubsystemRegistry:
    """Ordered catalog of subsystems."""

    def __init__(self, subsystems: Iterable[Subsystem]) -> None:
        self._subsystems = list(subsystems)

    @classmethod
    def builtin(cls) -> SubsystemRegistry:
        """Build a fresh catalog of the built-in subsystems."""
        from .subsystems import builtin_subsystems

        return cls(builtin_subsystems())

    def all(self) -> list[Subsystem]:
        return list(self._subsystems)

    def ids(self) -> list[str]:
        return [s.id for s in self._subsystems]

    def find(self, subsystem_id: str) -> Subsystem | None:
        wanted = normalize_id(subsystem_id)
        for subsystem in self._subsystems:
            if normalize_id(subsystem.id) == wanted:
                return subsystem
        return None

    def filtered(
        self,
        include: Iterable[str] | None = None,
        exclude: Iterable[str] | None = None,
    ) -> list[Subsystem]:
        """
        Select subsystems by id.

        Args:
            include: If given, only these ids are kept
            exclude: Ids to drop. Exclusion always wins over inclusion.

        Returns:
            Matching subsystems in catalog order
        """
        included = {normalize_id(i) for i in include} if include is not None else None
        excluded = {normalize_id(i) for i in exclude or ()}

        selected = []
        for subsystem in self._subsystems:
            key = normalize_id(subsystem.id)
            if key in excluded:
                continue
            if included is not None and key not in included:
                continue
            selected.append(subsystem)
        return selected

    def capturable(self) -> list[Subsystem]:
        return [s for s in self._subsystems if s.supports_capture()]

    def capturable_ids(self) -> list[str]:
        return [s.id for s in self.capturable()]

    def is_valid_capturable(self, subsystem_id: str) -> bool:
        subsystem = self.find(subsystem_id)
        return subsystem is not None and subsystem.supports_capture()

    def syncable(self) -> list[Subsystem]:
        return [s for s in self._subsystems if s.supports_sync()]

    def syncable_ids(self) -> list[str]:
        return [s.id for s in self.syncable()]

    def is_valid_syncable(self, subsystem_id: str) -> bool:
        subsystem = self.find(subsystem_id)
        return subsystem is not None and subsystem.supports_sync()

    def validate_ids(self, field: str, ids: Iterable[str], *, capture: bool) -> None:
        """
        Check that every id names a subsystem supporting the operation.

        Raises:
            ValidationError: For the first unknown or unsupported id
        """
        is_valid = self.is_valid_capturable if capture else self.is_valid_syncable
        valid = self.capturable_ids() if capture else self.syncable_ids()
        for subsystem_id in ids:
            if not is_valid(subsystem_id):
                raise ValidationError(
                    field,
                    subsystem_id,
                    f"Unknown subsystem. Valid values: {', '.join(valid)}",
                )
