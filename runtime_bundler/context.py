from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional

from .build_config import BuildConfig
from .lib.archive import Archive
from .lib.platforms import PlatformKey
from .lib.runtime_fetch import RuntimeBinary
from .lib.staging import StagingTree


@dataclass(frozen=True)
class BuildContext:
    cfg: BuildConfig
    version: str
    root: Path
    platform: Optional[PlatformKey] = None
    tree: Optional[StagingTree] = None
    python: Optional[str] = None
    runtime: Optional[RuntimeBinary] = None
    manifest_path: Optional[Path] = None
    launcher_path: Optional[Path] = None
    archive: Optional[Archive] = None

    @property
    def dist_dir(self) -> Path:
        return self.root / self.cfg.dist_dir

    def evolve(self, **changes: Any) -> "BuildContext":
        return replace(self, **changes)

    def require_platform(self) -> PlatformKey:
        if self.platform is None:
            raise RuntimeError("platform has not been resolved yet")
        return self.platform

    def require_tree(self) -> StagingTree:
        if self.tree is None:
            raise RuntimeError("staging tree has not been prepared yet")
        return self.tree
