"""Layered system package manifest (``system-packages.yaml``)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..component import Resource
from .base import ItemManifest


@dataclass(frozen=True)
class Package(Resource):
    """An RPM package layered onto the image."""

    name: str

    def id(self) -> str:
        return self.name


class SystemPackagesManifest(ItemManifest[Package]):
    """Declared layered packages."""

    KEY = "packages"
    FILENAME = "system-packages.yaml"

    @classmethod
    def item_from_dict(cls, data: Any) -> Package:
        if isinstance(data, str):
            return Package(name=data)
        return Package(name=data["name"])

    @classmethod
    def item_to_dict(cls, item: Package) -> str:
        return item.name
