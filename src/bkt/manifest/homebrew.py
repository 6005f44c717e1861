"""Homebrew manifest (``homebrew.yaml``)."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from ..component import Resource
from .base import ItemManifest


@dataclass(frozen=True)
class BrewFormula(Resource):
    """A Homebrew formula, optionally from a third-party tap."""

    name: str
    tap: str | None = None

    @classmethod
    def parse(cls, spec: str) -> BrewFormula:
        """Parse ``name`` or a fully qualified ``owner/repo/name``."""
        if spec.count("/") == 2:
            tap, name = spec.rsplit("/", 1)
            return cls(name=name, tap=tap)
        return cls(name=spec)

    def id(self) -> str:
        return self.name

    @property
    def qualified_name(self) -> str:
        return f"{self.tap}/{self.name}" if self.tap else self.name


@dataclass(frozen=True)
class HomebrewManifest(ItemManifest[BrewFormula]):
    """Declared Homebrew formulae and extra taps."""

    KEY = "formulae"
    FILENAME = "homebrew.yaml"

    taps: tuple[str, ...] = ()

    @classmethod
    def item_from_dict(cls, data: Any) -> BrewFormula:
        if isinstance(data, str):
            return BrewFormula.parse(data)
        formula = BrewFormula.parse(data["name"])
        tap = data.get("tap", formula.tap)
        return BrewFormula(name=formula.name, tap=tap)

    @classmethod
    def item_to_dict(cls, item: BrewFormula) -> Any:
        if item.tap:
            return {"name": item.name, "tap": item.tap}
        return item.name

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> HomebrewManifest:
        manifest = super().from_dict(d)
        taps = d.get("taps") or []
        if not isinstance(taps, list):
            raise ValueError("'taps' must be a list")
        return replace(manifest, taps=tuple(dict.fromkeys(str(t) for t in taps)))

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.taps:
            result["taps"] = list(self.taps)
        return result

    @classmethod
    def merged(cls, base: HomebrewManifest, overlay: HomebrewManifest) -> HomebrewManifest:
        manifest = super().merged(base, overlay)
        return replace(manifest, taps=tuple(sorted({*base.taps, *overlay.taps})))

    def required_taps(self, formulae: list[BrewFormula] | None = None) -> list[str]:
        """Taps needed by ``formulae`` (default: all declared) plus explicit taps."""
        selected = self.items if formulae is None else formulae
        return sorted({*self.taps, *(f.tap for f in selected if f.tap)})
