from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from ..errors import StagingError
from .platforms import PlatformKey

logger = logging.getLogger(__name__)

BIN_DIR = "bin"
APP_DIR = "app"
APP_PYTHON_DIR = "app/python"
PYDEPS_DIR = "pydeps"
REQUIREMENTS_FILE = "requirements.txt"
MANIFEST_FILE = "manifest.json"
VERIFIED_MARKER = ".verified"


@dataclass(frozen=True)
class StagingTree:
    root: Path

    @property
    def bin_dir(self) -> Path:
        return self.root / BIN_DIR

    @property
    def app_dir(self) -> Path:
        return self.root / APP_DIR

    @property
    def app_python_dir(self) -> Path:
        return self.root / APP_PYTHON_DIR

    @property
    def pydeps_dir(self) -> Path:
        return self.root / PYDEPS_DIR

    @property
    def requirements_path(self) -> Path:
        return self.root / REQUIREMENTS_FILE

    @property
    def manifest_path(self) -> Path:
        return self.root / MANIFEST_FILE

    @property
    def verified_marker(self) -> Path:
        return self.pydeps_dir / VERIFIED_MARKER


def staging_path(root: Path, platform_key: PlatformKey, stage_dir: str = ".runtime_stage") -> Path:
    return Path(root) / stage_dir / platform_key.key


def prepare_staging(root: Path, platform_key: PlatformKey, *, stage_dir: str = ".runtime_stage") -> StagingTree:
    """Create a fresh staging tree, destroying any previous one at the same path."""

    tree = StagingTree(root=staging_path(root, platform_key, stage_dir))

    try:
        if tree.root.exists():
            logger.info("Removing previous staging tree %s", tree.root)
            shutil.rmtree(tree.root)
        # parents before children
        for d in (tree.root, tree.bin_dir, tree.app_dir, tree.app_python_dir, tree.pydeps_dir):
            d.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StagingError(f"Cannot prepare staging tree {tree.root}: {e}") from e

    logger.info("Staging tree ready: %s", tree.root)
    return tree
