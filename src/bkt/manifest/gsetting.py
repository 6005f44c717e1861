"""GSettings manifest (``gsettings.yaml``)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..component import Resource
from .base import ItemManifest


def to_gvariant_text(value: Any) -> str:
    """Render a YAML scalar the way ``gsettings get`` prints it.

    Booleans become ``true``/``false``; strings are passed through
    unchanged, so GVariant strings must keep their quotes in YAML.

    Raises:
        ValueError: If the value is not a scalar
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ValueError(f"'value' must be a scalar, got {type(value).__name__}")


@dataclass(frozen=True)
class GSetting(Resource):
    """One GSettings key and its desired value.

    ``value`` is in GVariant text format, exactly as ``gsettings get``
    prints it (strings keep their quotes).
    """

    schema: str
    key: str
    value: str
    comment: str | None = None

    def id(self) -> str:
        return f"{self.schema}:{self.key}"

    def content_differs(self, other: object) -> bool:
        if not isinstance(other, GSetting):
            return True
        return self.value != other.value


class GSettingsManifest(ItemManifest[GSetting]):
    """Declared GSettings values."""

    KEY = "settings"
    FILENAME = "gsettings.yaml"

    @classmethod
    def item_from_dict(cls, data: Any) -> GSetting:
        return GSetting(
            schema=data["schema"],
            key=data["key"],
            value=to_gvariant_text(data["value"]),
            comment=data.get("comment"),
        )

    @classmethod
    def item_to_dict(cls, item: GSetting) -> dict[str, Any]:
        result: dict[str, Any] = {"schema": item.schema, "key": item.key, "value": item.value}
        if item.comment:
            result["comment"] = item.comment
        return result
