from __future__ import annotations

import itertools
from pathlib import Path

import pytest

from runtime_bundler.errors import UnsupportedPlatform
from runtime_bundler.lib.platforms import (
    RUNTIME_TARGETS,
    CpuArch,
    HostOS,
    PlatformKey,
    resolve_platform,
    runtime_target,
)


@pytest.mark.parametrize(
    "system,machine,expected",
    [
        ("Darwin", "arm64", "darwin-arm64"),
        ("Darwin", "x86_64", "darwin-x64"),
        ("Linux", "aarch64", "linux-arm64"),
        ("Linux", "x86_64", "linux-x64"),
        ("linux", "AMD64", "linux-x64"),
    ],
)
def test_supported_pairs_resolve_to_canonical_key(system: str, machine: str, expected: str) -> None:
    assert resolve_platform(system, machine).key == expected


def test_keys_are_stable_and_distinct() -> None:
    pairs = [("Darwin", "arm64"), ("Darwin", "x86_64"), ("Linux", "aarch64"), ("Linux", "x86_64")]
    first = [resolve_platform(s, m) for s, m in pairs]
    second = [resolve_platform(s, m) for s, m in pairs]
    assert first == second
    assert len({k.key for k in first}) == 4


@pytest.mark.parametrize(
    "system,machine",
    [
        ("Linux", "armv7l"),
        ("Linux", "i686"),
        ("Darwin", "ppc64le"),
        ("Windows", "AMD64"),
        ("FreeBSD", "x86_64"),
    ],
)
def test_unsupported_pairs_fail_without_side_effects(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, system: str, machine: str
) -> None:
    monkeypatch.chdir(tmp_path)
    with pytest.raises(UnsupportedPlatform):
        resolve_platform(system, machine)
    assert list(tmp_path.iterdir()) == []


def test_host_values_come_from_platform_module(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("platform.system", lambda: "Linux")
    monkeypatch.setattr("platform.machine", lambda: "aarch64")
    assert resolve_platform() == PlatformKey(HostOS.LINUX, CpuArch.ARM64)


def test_runtime_target_table_is_exhaustive() -> None:
    for os_, arch in itertools.product(HostOS, CpuArch):
        assert runtime_target(PlatformKey(os_, arch))
    assert len(set(RUNTIME_TARGETS.values())) == len(RUNTIME_TARGETS) == 4
    assert runtime_target(PlatformKey(HostOS.DARWIN, CpuArch.ARM64)) == "aarch64-apple-darwin"
    assert runtime_target(PlatformKey(HostOS.LINUX, CpuArch.X64)) == "x86_64-unknown-linux-gnu"


def test_runtime_target_missing_entry_is_unsupported(monkeypatch: pytest.MonkeyPatch) -> None:
    key = PlatformKey(HostOS.LINUX, CpuArch.ARM64)
    monkeypatch.delitem(RUNTIME_TARGETS, key)
    with pytest.raises(UnsupportedPlatform):
        runtime_target(key)
