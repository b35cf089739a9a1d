from __future__ import annotations

import hashlib
import logging
import shutil
import tarfile
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Optional

import httpx

from ..errors import DownloadFailure
from .platforms import PlatformKey, runtime_target
from .staging import StagingTree

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuntimeBinary:
    name: str
    version: str
    target: str
    path: Path


def runtime_url(url_template: str, *, version: str, target: str) -> str:
    return url_template.format(version=version, target=target)


def _check_member_name(name: str) -> PurePosixPath:
    if "\\" in name or ":" in name:
        raise DownloadFailure(f"Refusing to extract suspicious path: {name!r}")
    p = PurePosixPath(name)
    if p.is_absolute() or ".." in p.parts:
        raise DownloadFailure(f"Refusing to extract path outside scratch dir: {name!r}")
    return p


def download(url: str, dest: Path, *, client: Optional[httpx.Client] = None, timeout: float = 60.0) -> str:
    """Stream ``url`` to ``dest``; returns the SHA-256 of the downloaded bytes."""

    owns_client = client is None
    c = client or httpx.Client(timeout=timeout)
    h = hashlib.sha256()
    try:
        with c.stream("GET", url, follow_redirects=True) as resp:
            resp.raise_for_status()
            with dest.open("wb") as fh:
                for chunk in resp.iter_bytes():
                    fh.write(chunk)
                    h.update(chunk)
    except httpx.HTTPStatusError as e:
        raise DownloadFailure(f"HTTP {e.response.status_code} fetching {url}") from e
    except httpx.HTTPError as e:
        raise DownloadFailure(f"Error fetching {url}: {e}") from e
    finally:
        if owns_client:
            c.close()
    return h.hexdigest()


def unpack(archive: Path, dest: Path) -> None:
    dest.mkdir(parents=True, exist_ok=True)
    name = archive.name.lower()

    if name.endswith(".zip"):
        try:
            with zipfile.ZipFile(archive) as zf:
                for info in zf.infolist():
                    p = _check_member_name(info.filename)
                    out = dest.joinpath(*p.parts)
                    if info.is_dir():
                        out.mkdir(parents=True, exist_ok=True)
                        continue
                    out.parent.mkdir(parents=True, exist_ok=True)
                    with zf.open(info) as src, out.open("wb") as dst:
                        shutil.copyfileobj(src, dst)
        except zipfile.BadZipFile as e:
            raise DownloadFailure(f"Corrupt zip archive {archive.name}: {e}") from e
        return

    if name.endswith((".tar.gz", ".tgz")):
        try:
            with tarfile.open(archive, "r:gz") as tf:
                members = tf.getmembers()
                for m in members:
                    _check_member_name(m.name)
                    if not (m.isfile() or m.isdir()):
                        raise DownloadFailure(f"Refusing to extract non-regular member: {m.name!r}")
                tf.extractall(dest, members=members, filter="data")
        except tarfile.TarError as e:
            raise DownloadFailure(f"Corrupt tar archive {archive.name}: {e}") from e
        return

    raise DownloadFailure(f"Unknown runtime archive format: {archive.name}")


def single_binary(unpacked: Path, binary_name: str) -> Path:
    files = sorted(p for p in unpacked.rglob("*") if p.is_file())
    if len(files) != 1 or files[0].name != binary_name:
        found = ", ".join(str(f.relative_to(unpacked)) for f in files) or "nothing"
        raise DownloadFailure(f"Expected a single '{binary_name}' executable, found: {found}")
    return files[0]


def fetch_runtime(
    tree: StagingTree,
    platform_key: PlatformKey,
    *,
    version: str,
    url_template: str,
    binary_name: str,
    client: Optional[httpx.Client] = None,
    timeout: float = 60.0,
    scratch_parent: Optional[Path] = None,
) -> RuntimeBinary:
    """Download the runtime for ``platform_key`` and install it into ``bin/``.

    The scratch directory is released on every exit path, including
    KeyboardInterrupt and SIGTERM (the build CLI turns the latter into an
    exception).
    """

    target = runtime_target(platform_key)
    url = runtime_url(url_template, version=version, target=target)
    archive_name = url.split("?", 1)[0].rsplit("/", 1)[-1]

    logger.info("Downloading %s %s (%s)", binary_name, version, target)
    with tempfile.TemporaryDirectory(prefix="runtime-fetch-", dir=scratch_parent) as tmp:
        scratch = Path(tmp)
        archive = scratch / archive_name
        digest = download(url, archive, client=client, timeout=timeout)
        logger.info("Downloaded %s sha256=%s (not verified)", archive_name, digest)

        unpacked = scratch / "unpacked"
        unpack(archive, unpacked)
        binary = single_binary(unpacked, binary_name)

        dest = tree.bin_dir / binary_name
        tree.bin_dir.mkdir(parents=True, exist_ok=True)
        shutil.move(str(binary), str(dest))
        dest.chmod(0o755)

    logger.info("Installed %s", dest)
    return RuntimeBinary(name=binary_name, version=version, target=target, path=dest)
