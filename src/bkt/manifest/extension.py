"""GNOME Shell extension manifest (``gnome-extensions.yaml``)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..component import Resource
from .base import ItemManifest


@dataclass(frozen=True)
class ExtensionItem(Resource):
    """A GNOME Shell extension and whether it should be enabled."""

    uuid: str
    enabled: bool = True

    def id(self) -> str:
        return self.uuid


class ExtensionManifest(ItemManifest[ExtensionItem]):
    """Declared GNOME Shell extensions.

    Entries are either a bare UUID (enabled) or a mapping with ``uuid``
    and ``enabled``.
    """

    KEY = "extensions"
    FILENAME = "gnome-extensions.yaml"

    @classmethod
    def item_from_dict(cls, data: Any) -> ExtensionItem:
        if isinstance(data, str):
            return ExtensionItem(uuid=data)
        return ExtensionItem(uuid=data["uuid"], enabled=bool(data.get("enabled", True)))

    @classmethod
    def item_to_dict(cls, item: ExtensionItem) -> Any:
        if item.enabled:
            return item.uuid
        return {"uuid": item.uuid, "enabled": False}
