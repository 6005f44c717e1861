"""Built-in subsystems."""

from ..subsystem import Subsystem
from .extension import ExtensionSubsystem
from .flatpak import FlatpakSubsystem
from .gsetting import GSettingSubsystem
from .homebrew import HomebrewSubsystem
from .shim import ShimSubsystem
from .system import SystemSubsystem


def builtin_subsystems() -> list[Subsystem]:
    """Fresh instances of every built-in subsystem, in execution order."""
    return [
        ExtensionSubsystem(),
        FlatpakSubsystem(),
        GSettingSubsystem(),
        ShimSubsystem(),
        HomebrewSubsystem(),
        SystemSubsystem(),
    ]


__all__ = [
    "ExtensionSubsystem",
    "FlatpakSubsystem",
    "GSettingSubsystem",
    "HomebrewSubsystem",
    "ShimSubsystem",
    "SystemSubsystem",
    "builtin_subsystems",
]
