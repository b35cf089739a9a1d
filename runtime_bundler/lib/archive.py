from __future__ import annotations

import hashlib
import logging
import os
import tarfile
import tempfile
from dataclasses import dataclass
from pathlib import Path

from .platforms import PlatformKey
from .staging import StagingTree

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Archive:
    path: Path
    sha256: str

    @property
    def digest_line(self) -> str:
        # Same layout as `shasum -a 256` / `sha256sum`.
        return f"{self.sha256}  {self.path}"


def artifact_name(product: str, version: str, platform_key: PlatformKey) -> str:
    return f"{product}-runtime-v{version}-{platform_key.key}.tar.gz"


def sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def pack_archive(
    tree: StagingTree,
    dist_dir: Path,
    *,
    product: str,
    version: str,
    platform_key: PlatformKey,
) -> Archive:
    """Pack the staging tree into ``dist_dir``.

    The tarball is written under a temporary name and renamed into place once
    complete, so a failed pack never leaves a partial artifact behind.
    """

    dist_dir.mkdir(parents=True, exist_ok=True)
    artifact = dist_dir / artifact_name(product, version, platform_key)
    logger.info("Packing runtime artifact: %s", artifact)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{artifact.name}.", suffix=".part", dir=dist_dir)
    os.close(fd)
    tmp = Path(tmp_name)
    try:
        with tarfile.open(tmp, "w:gz") as tf:
            for entry in sorted(tree.root.iterdir(), key=lambda p: p.name):
                tf.add(entry, arcname=entry.name)
        os.replace(tmp, artifact)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise

    return Archive(path=artifact, sha256=sha256_file(artifact))
