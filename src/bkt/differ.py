"""Diff engine for manifest reconciliation.

Compares two collections of items keyed by identity and reports which
items were added, removed, or changed between them. The functions here
are pure: they never touch the system or the manifest files.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable


@runtime_checkable
class Diffable(Protocol):
    """An item that can be compared by identity and by content."""

    def diff_key(self) -> str:
        """Stable key identifying this item within its collection."""
        ...

    def content_differs(self, other: object) -> bool:
        """True if ``other`` has the same key but different content."""
        ...


T = TypeVar("T", bound=Diffable)


@dataclass(frozen=True)
class ChangedItem(Generic[T]):
    """An item present on both sides whose content differs."""

    from_: T
    to: T


@dataclass(frozen=True)
class DiffResult(Generic[T]):
    """Result of comparing two collections.

    Every key of either input lands in exactly one of ``added``,
    ``removed``, ``changed`` or the implicit unchanged set.
    """

    added: list[T] = field(default_factory=list)
    removed: list[T] = field(default_factory=list)
    changed: list[ChangedItem[T]] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.added or self.removed or self.changed)

    def change_count(self) -> int:
        return len(self.added) + len(self.removed) + len(self.changed)


def _index(items: Iterable[T]) -> dict[str, T]:
    # Later duplicates replace earlier ones.
    indexed: dict[str, T] = {}
    for item in items:
        indexed[item.diff_key()] = item
    return indexed


def diff_collections(old: Iterable[T], new: Iterable[T]) -> DiffResult[T]:
    """Compute the difference between two collections of diffable items.

    Args:
        old: The current collection (e.g., live system state).
        new: The desired collection (e.g., manifest contents).

    Returns:
        DiffResult with items sorted by key.
    """
    old_by_key = _index(old)
    new_by_key = _index(new)

    added = [new_by_key[k] for k in sorted(new_by_key.keys() - old_by_key.keys())]
    removed = [old_by_key[k] for k in sorted(old_by_key.keys() - new_by_key.keys())]

    changed: list[ChangedItem[T]] = []
    for key in sorted(old_by_key.keys() & new_by_key.keys()):
        before, after = old_by_key[key], new_by_key[key]
        if before.content_differs(after):
            changed.append(ChangedItem(from_=before, to=after))

    return DiffResult(added=added, removed=removed, changed=changed)


def diff_string_sets(old: Iterable[str], new: Iterable[str]) -> DiffResult[Any]:
    """Compute the difference between two sets of plain names.

    Strings carry no content beyond their identity, so ``changed`` is
    always empty.
    """
    old_set = set(old)
    new_set = set(new)
    return DiffResult(
        added=sorted(new_set - old_set),
        removed=sorted(old_set - new_set),
    )
