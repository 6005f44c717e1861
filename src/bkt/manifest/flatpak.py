"""Flatpak application manifest (``flatpak-apps.yaml``)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..component import Resource
from .base import ItemManifest

DEFAULT_REMOTE = "flathub"


class FlatpakScope(Enum):
    """Flatpak installation an app lives in."""

    SYSTEM = "system"
    USER = "user"


@dataclass(frozen=True)
class FlatpakApp(Resource):
    """A Flatpak application.

    ``branch`` is only compared when the manifest pins it; the live system
    always reports a branch. ``commit`` is applied when the app is
    installed and never compared, since the scan does not report it.
    """

    app_id: str
    remote: str = DEFAULT_REMOTE
    scope: FlatpakScope = FlatpakScope.SYSTEM
    branch: str | None = None
    commit: str | None = None
    overrides: tuple[str, ...] = ()

    def id(self) -> str:
        return self.app_id

    @property
    def ref(self) -> str:
        if self.branch:
            return f"{self.app_id}//{self.branch}"
        return self.app_id

    def content_differs(self, other: object) -> bool:
        if not isinstance(other, FlatpakApp):
            return True
        if self.remote != other.remote or self.scope != other.scope:
            return True
        return other.branch is not None and self.branch != other.branch


class FlatpakManifest(ItemManifest[FlatpakApp]):
    """Declared Flatpak applications."""

    KEY = "apps"
    FILENAME = "flatpak-apps.yaml"

    @classmethod
    def item_from_dict(cls, data: Any) -> FlatpakApp:
        if isinstance(data, str):
            return FlatpakApp(app_id=data)
        return FlatpakApp(
            app_id=data["id"],
            remote=data.get("remote", DEFAULT_REMOTE),
            scope=FlatpakScope(data.get("scope", FlatpakScope.SYSTEM.value)),
            branch=data.get("branch"),
            commit=data.get("commit"),
            overrides=tuple(data.get("overrides") or ()),
        )

    @classmethod
    def item_to_dict(cls, item: FlatpakApp) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": item.app_id,
            "remote": item.remote,
            "scope": item.scope.value,
        }
        if item.branch is not None:
            result["branch"] = item.branch
        if item.commit is not None:
            result["commit"] = item.commit
        if item.overrides:
            result["overrides"] = list(item.overrides)
        return result
