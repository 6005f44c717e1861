"""Manifest types and the layered YAML store."""

from .base import ItemManifest
from .extension import ExtensionItem, ExtensionManifest
from .flatpak import FlatpakApp, FlatpakManifest, FlatpakScope
from .gsetting import GSetting, GSettingsManifest
from .homebrew import BrewFormula, HomebrewManifest
from .shim import Shim, ShimsManifest
from .store import ManifestStore
from .system import Package, SystemPackagesManifest

__all__ = [
    "BrewFormula",
    "ExtensionItem",
    "ExtensionManifest",
    "FlatpakApp",
    "FlatpakManifest",
    "FlatpakScope",
    "GSetting",
    "GSettingsManifest",
    "HomebrewManifest",
    "ItemManifest",
    "ManifestStore",
    "Package",
    "Shim",
    "ShimsManifest",
    "SystemPackagesManifest",
]
