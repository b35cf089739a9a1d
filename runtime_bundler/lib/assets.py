from __future__ import annotations

import logging
import shutil
from pathlib import Path

from ..errors import StagingError

logger = logging.getLogger(__name__)


def copy_tree(src: Path, dst: Path) -> None:
    if not src.exists():
        raise StagingError(f"Source path missing: {src}")

    dst.mkdir(parents=True, exist_ok=True)
    for item in src.rglob("*"):
        rel = item.relative_to(src)
        out = dst / rel
        if item.is_dir():
            out.mkdir(parents=True, exist_ok=True)
        else:
            out.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(item, out)


def copy_path(src: Path, dst_dir: Path) -> Path:
    """Copy a file or directory into ``dst_dir`` keeping its name."""

    if not src.exists():
        raise StagingError(f"Source path missing: {src}")

    out = dst_dir / src.name
    if src.is_dir():
        copy_tree(src, out)
    else:
        dst_dir.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src, out)
    logger.info("Copied %s -> %s", src, out)
    return out
