from __future__ import annotations

import io
import logging
import zipfile
from pathlib import Path
from typing import Dict

import pytest

from runtime_bundler.lib.platforms import CpuArch, HostOS, PlatformKey
from runtime_bundler.lib.staging import StagingTree, prepare_staging


@pytest.fixture(autouse=True)
def _reset_logging():
    root = logging.getLogger()
    launcher_logger = logging.getLogger("runtime_launcher")
    saved = list(root.handlers)
    yield
    for h in list(root.handlers):
        if h not in saved:
            root.removeHandler(h)
    for attr in ("_runtime_bundler_configured", "_runtime_bundler_log_path"):
        if hasattr(root, attr):
            delattr(root, attr)
    launcher_logger.handlers.clear()
    launcher_logger.propagate = True
    launcher_logger.setLevel(logging.NOTSET)


@pytest.fixture
def darwin_arm64() -> PlatformKey:
    return PlatformKey(HostOS.DARWIN, CpuArch.ARM64)


@pytest.fixture
def tree(tmp_path: Path, darwin_arm64: PlatformKey) -> StagingTree:
    return prepare_staging(tmp_path, darwin_arm64)


def _zip_bytes(files: Dict[str, bytes]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, data in files.items():
            zf.writestr(name, data)
    return buf.getvalue()


@pytest.fixture
def make_zip():
    return _zip_bytes
