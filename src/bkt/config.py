"""Default locations for manifests and generated files.

Every location can be overridden through an environment variable, and the
CLI options take precedence over both.
"""

import os
from pathlib import Path

DEFAULT_SYSTEM_MANIFEST_DIR = "/usr/share/bootc-bootstrap"
"""Read-only manifests baked into the image."""

SYSTEM_MANIFEST_DIR_ENV_VAR = "BKT_SYSTEM_MANIFEST_DIR"
"""Environment variable for overriding the system manifest directory."""

USER_CONFIG_SUBDIR = "bootc"
"""Directory under ``$XDG_CONFIG_HOME`` holding the user manifest layer."""

CONFIG_DIR_ENV_VAR = "BKT_CONFIG_DIR"
"""Environment variable for overriding the user manifest directory."""

DEFAULT_SHIMS_SUBDIR = ".local/toolbox/shims"
"""Directory under ``$HOME`` where host shims are written."""

SHIMS_DIR_ENV_VAR = "BKT_SHIMS_DIR"
"""Environment variable for overriding the shims directory."""

FORCE_HOST_ENV_VAR = "BKT_FORCE_HOST"
"""When set, treat the invocation as running on the host even inside a toolbox."""

TOOLBOX_MARKER = "/run/.toolboxenv"
"""File present inside toolbox containers."""


def system_manifest_dir() -> Path:
    """Return the system manifest directory."""
    return Path(os.environ.get(SYSTEM_MANIFEST_DIR_ENV_VAR) or DEFAULT_SYSTEM_MANIFEST_DIR)


def user_config_dir() -> Path:
    """
    Return the user manifest directory.

    Resolution order: ``$BKT_CONFIG_DIR``, then ``$XDG_CONFIG_HOME/bootc``,
    then ``~/.config/bootc``.
    """
    override = os.environ.get(CONFIG_DIR_ENV_VAR)
    if override:
        return Path(override)
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / USER_CONFIG_SUBDIR


def shims_dir() -> Path:
    """Return the directory host shims are written to."""
    override = os.environ.get(SHIMS_DIR_ENV_VAR)
    if override:
        return Path(override)
    return Path.home() / DEFAULT_SHIMS_SUBDIR
