from __future__ import annotations

import logging
import platform
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from ..errors import UnsupportedPlatform

logger = logging.getLogger(__name__)


class HostOS(str, Enum):
    DARWIN = "darwin"
    LINUX = "linux"


class CpuArch(str, Enum):
    ARM64 = "arm64"
    X64 = "x64"


_ARCH_ALIASES = {
    "arm64": CpuArch.ARM64,
    "aarch64": CpuArch.ARM64,
    "x86_64": CpuArch.X64,
    "amd64": CpuArch.X64,
}


@dataclass(frozen=True)
class PlatformKey:
    os: HostOS
    arch: CpuArch

    @property
    def key(self) -> str:
        return f"{self.os.value}-{self.arch.value}"

    def __str__(self) -> str:
        return self.key


# Deno publishes one archive per target triple.
RUNTIME_TARGETS: Dict[PlatformKey, str] = {
    PlatformKey(HostOS.DARWIN, CpuArch.ARM64): "aarch64-apple-darwin",
    PlatformKey(HostOS.DARWIN, CpuArch.X64): "x86_64-apple-darwin",
    PlatformKey(HostOS.LINUX, CpuArch.ARM64): "aarch64-unknown-linux-gnu",
    PlatformKey(HostOS.LINUX, CpuArch.X64): "x86_64-unknown-linux-gnu",
}


def normalize_os(system: str) -> HostOS:
    try:
        return HostOS(system.strip().lower())
    except ValueError:
        raise UnsupportedPlatform(f"Unsupported OS: {system}") from None


def normalize_arch(machine: str) -> CpuArch:
    arch = _ARCH_ALIASES.get(machine.strip().lower())
    if arch is None:
        raise UnsupportedPlatform(f"Unsupported arch: {machine}")
    return arch


def resolve_platform(system: Optional[str] = None, machine: Optional[str] = None) -> PlatformKey:
    """Resolve the host (or the given) OS/arch into a platform key.

    Reads nothing but ``platform``; callers rely on this happening before any
    directory is created.
    """

    system = platform.system() if system is None else system
    machine = platform.machine() if machine is None else machine
    key = PlatformKey(os=normalize_os(system), arch=normalize_arch(machine))
    logger.debug("Resolved platform %s (system=%s, machine=%s)", key, system, machine)
    return key


def runtime_target(key: PlatformKey) -> str:
    target = RUNTIME_TARGETS.get(key)
    if target is None:
        raise UnsupportedPlatform(f"Unsupported platform-arch: {key}")
    return target
