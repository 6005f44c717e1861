"""Common shape of a list-of-items manifest."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar

from ..component import Resource

ItemT = TypeVar("ItemT", bound=Resource)
M = TypeVar("M", bound="ItemManifest[Any]")


@dataclass(frozen=True)
class ItemManifest(Generic[ItemT]):
    """Manifest holding a flat list of resources under one YAML key.

    Subclasses set ``KEY`` and ``FILENAME`` and implement
    ``item_from_dict`` and ``item_to_dict``.
    """

    KEY: ClassVar[str] = "items"
    FILENAME: ClassVar[str] = ""

    items: tuple[ItemT, ...] = ()

    @classmethod
    def item_from_dict(cls, data: Any) -> ItemT:
        raise NotImplementedError

    @classmethod
    def item_to_dict(cls, item: ItemT) -> Any:
        raise NotImplementedError

    @classmethod
    def from_dict(cls: type[M], d: dict[str, Any]) -> M:
        raw = d.get(cls.KEY) or []
        if not isinstance(raw, list):
            raise ValueError(f"'{cls.KEY}' must be a list")
        return cls(items=tuple(cls.item_from_dict(entry) for entry in raw))

    def to_dict(self) -> dict[str, Any]:
        return {self.KEY: [self.item_to_dict(item) for item in self.items]}

    @classmethod
    def merged(cls: type[M], base: M, overlay: M) -> M:
        """Layer ``overlay`` on top of ``base``, keyed by item id.

        Items present in both are combined with ``Resource.merge`` (the
        overlay wins by default). The result is sorted by id.
        """
        by_id: dict[str, Any] = {item.id(): item for item in base.items}
        for item in overlay.items:
            existing = by_id.get(item.id())
            by_id[item.id()] = existing.merge(item) if existing is not None else item
        return cls(items=tuple(by_id[key] for key in sorted(by_id)))

    def with_items(self: M, *items: ItemT) -> M:
        """Return a copy with ``items`` merged in."""
        return type(self).merged(self, type(self)(items=tuple(items)))

    def ids(self) -> list[str]:
        return [item.id() for item in self.items]

    def find(self, item_id: str) -> ItemT | None:
        for item in self.items:
            if item.id() == item_id:
                return item
        return None

    def __contains__(self, item_id: object) -> bool:
        return any(item.id() == item_id for item in self.items)

    def __iter__(self) -> Iterator[ItemT]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)
