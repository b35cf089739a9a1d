from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

import runtime_bundler.lib.interpreters as interpreters
import runtime_bundler.lib.pydeps as pydeps
from runtime_bundler.errors import DependencyInstallFailure, NoInterpreterFound
from runtime_bundler.lib.command import CmdResult
from runtime_bundler.lib.requirements import Requirement
from runtime_bundler.lib.staging import StagingTree

REQS = [Requirement("dspy", ">=3.1.2"), Requirement("rich", ">=13.0.0")]


def _result(argv: List[str], rc: int, stderr: str = "") -> CmdResult:
    return CmdResult(argv=argv, returncode=rc, stdout="", stderr=stderr)


def test_find_build_python_skips_missing_candidates(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(interpreters, "run_cmd", lambda argv, **kw: _result(list(argv), 0))

    def which(name: str) -> Optional[str]:
        return "/usr/bin/python3.11" if name == "python3.11" else None

    assert interpreters.find_build_python(["python3", "python3.11"], which=which) == "python3.11"


def test_find_build_python_requires_pip(monkeypatch: pytest.MonkeyPatch) -> None:
    probed: List[str] = []

    def fake_run(argv: List[str], **kw: Any) -> CmdResult:
        probed.append(argv[0])
        assert argv[1:] == ["-m", "pip", "--version"]
        return _result(argv, 1 if argv[0] == "python3" else 0)

    monkeypatch.setattr(interpreters, "run_cmd", fake_run)

    chosen = interpreters.find_build_python(["python3", "/usr/bin/python3"], which=lambda n: n)

    assert chosen == "/usr/bin/python3"
    assert probed == ["python3", "/usr/bin/python3"]


def test_find_build_python_without_candidates_fails(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(interpreters, "run_cmd", lambda argv, **kw: _result(list(argv), 1))
    with pytest.raises(NoInterpreterFound, match="python3.11"):
        interpreters.find_build_python(["python3", "python3.11"], which=lambda n: n)


def test_bundle_installs_into_pydeps_only(tree: StagingTree, monkeypatch: pytest.MonkeyPatch) -> None:
    calls: List[Dict[str, Any]] = []

    def fake_run(argv: List[str], **kw: Any) -> CmdResult:
        calls.append({"argv": list(argv), **kw})
        return _result(argv, 0)

    monkeypatch.setattr(pydeps, "find_build_python", lambda candidates: "/usr/bin/python3")
    monkeypatch.setattr(pydeps, "run_cmd", fake_run)

    used = pydeps.bundle_pydeps(tree, REQS, ["python3"], break_system_packages=True)

    assert used == "/usr/bin/python3"
    assert tree.requirements_path.read_text(encoding="utf-8") == "dspy>=3.1.2\nrich>=13.0.0\n"
    (call,) = calls
    assert call["argv"] == [
        "/usr/bin/python3", "-m", "pip", "install", "--break-system-packages",
        "--target", str(tree.pydeps_dir), "-r", str(tree.requirements_path),
    ]
    assert call["env"]["PYTHONNOUSERSITE"] == "1"
    assert not tree.verified_marker.exists()


def test_bundle_install_failure_is_fatal(tree: StagingTree, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(pydeps, "find_build_python", lambda candidates: "python3")
    monkeypatch.setattr(pydeps, "run_cmd", lambda argv, **kw: _result(list(argv), 1, "No matching distribution"))

    with pytest.raises(DependencyInstallFailure, match="No matching distribution"):
        pydeps.bundle_pydeps(tree, REQS, ["python3"], break_system_packages=False)

    # The fallback description is written before the install is attempted.
    assert tree.requirements_path.exists()


def test_pip_argv_without_break_flag(tree: StagingTree) -> None:
    argv = pydeps.pip_install_argv("python3", tree, break_system_packages=False)
    assert "--break-system-packages" not in argv
