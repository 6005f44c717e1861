"""Host shim manifest (``host-shims.yaml``)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..component import Resource
from .base import ItemManifest


@dataclass(frozen=True)
class Shim(Resource):
    """A toolbox command that forwards to a host command.

    ``host`` defaults to ``name`` when omitted.
    """

    name: str
    host: str | None = None

    def id(self) -> str:
        return self.name

    @property
    def host_command(self) -> str:
        return self.host or self.name

    def content_differs(self, other: object) -> bool:
        if not isinstance(other, Shim):
            return True
        return self.host_command != other.host_command


class ShimsManifest(ItemManifest[Shim]):
    """Declared host shims."""

    KEY = "shims"
    FILENAME = "host-shims.yaml"

    @classmethod
    def item_from_dict(cls, data: Any) -> Shim:
        if isinstance(data, str):
            return Shim(name=data)
        return Shim(name=data["name"], host=data.get("host"))

    @classmethod
    def item_to_dict(cls, item: Shim) -> dict[str, Any]:
        result: dict[str, Any] = {"name": item.name}
        if item.host is not None:
            result["host"] = item.host
        return result
