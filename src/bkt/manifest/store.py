"""Loading and saving layered YAML manifests.

Each manifest kind lives in two layers: the system layer shipped with the
image (read-only) and the user layer under the config directory. The
user layer is merged over the system layer.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Generic, TypeVar

import yaml

from ..exceptions import ManifestError

logger = logging.getLogger(__name__)

M = TypeVar("M")


class ManifestStore(Generic[M]):
    """Reads and writes one manifest kind across both layers."""

    def __init__(self, manifest_cls: type[M], system_dir: Path, user_dir: Path) -> None:
        self.manifest_cls: Any = manifest_cls
        self.system_dir = Path(system_dir)
        self.user_dir = Path(user_dir)

    @property
    def system_path(self) -> Path:
        return self.system_dir / self.manifest_cls.FILENAME

    @property
    def user_path(self) -> Path:
        return self.user_dir / self.manifest_cls.FILENAME

    def load_file(self, path: Path) -> M:
        """Load one manifest file. A missing file is an empty manifest.

        Raises:
            ManifestError: If the file cannot be read or parsed
        """
        if not path.exists():
            logger.debug("Manifest %s not found, using empty manifest", path)
            return self.manifest_cls()

        try:
            data = yaml.safe_load(path.read_text())
        except (OSError, yaml.YAMLError) as e:
            raise ManifestError(str(path), str(e)) from e

        if data is None:
            return self.manifest_cls()
        if not isinstance(data, dict):
            raise ManifestError(str(path), "expected a mapping at the top level")

        try:
            return self.manifest_cls.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise ManifestError(str(path), str(e)) from e

    def load_system(self) -> M:
        return self.load_file(self.system_path)

    def load_user(self) -> M:
        return self.load_file(self.user_path)

    def load_merged(self) -> M:
        return self.manifest_cls.merged(self.load_system(), self.load_user())

    def save_user(self, manifest: M) -> None:
        """Write ``manifest`` to the user layer, creating directories as needed."""
        path = self.user_path
        path.parent.mkdir(parents=True, exist_ok=True)
        text = yaml.safe_dump(
            manifest.to_dict(),  # type: ignore[attr-defined]
            default_flow_style=False,
            sort_keys=False,
        )
        path.write_text(text)
        logger.debug("Wrote %s", path)
