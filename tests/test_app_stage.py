from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

import pytest

import runtime_bundler.lib.app_stage as app_stage
from runtime_bundler.errors import StagingError
from runtime_bundler.lib.command import CmdResult
from runtime_bundler.lib.staging import StagingTree


def _project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    (root / "npx" / "dist").mkdir(parents=True)
    (root / "npx" / "dist" / "index.js").write_text("console.log('hi')\n", encoding="utf-8")
    (root / "npx" / "python" / "cli").mkdir(parents=True)
    (root / "npx" / "python" / "cli" / "__main__.py").write_text("", encoding="utf-8")
    (root / "npx" / "python" / "pyproject.toml").write_text("[project]\n", encoding="utf-8")
    return root


def test_stage_application_copies_node_and_python_sources(
    tmp_path: Path, tree: StagingTree, monkeypatch: pytest.MonkeyPatch
) -> None:
    root = _project(tmp_path)
    calls: List[Dict[str, Any]] = []

    def fake_run(argv, **kw):
        calls.append({"argv": list(argv), **kw})
        return CmdResult(argv=list(argv), returncode=0, stdout="", stderr="")

    monkeypatch.setattr(app_stage, "run_cmd", fake_run)

    app_stage.stage_application(
        tree,
        project_root=root,
        node_source_dir="npx",
        node_build_commands=[["npm", "install"], ["npx", "tsc", "-p", "tsconfig.runtime.json"]],
        node_dist_dir="dist",
        node_package_name="asyncreview-runtime",
        node_dependencies={"chalk": "^5.3.0"},
        node_install_command=["npm", "install", "--production", "--no-save"],
        python_sources=["npx/python/cli", "npx/python/pyproject.toml"],
    )

    assert (tree.app_dir / "dist" / "index.js").exists()
    assert (tree.app_python_dir / "cli" / "__main__.py").exists()
    assert (tree.app_python_dir / "pyproject.toml").exists()
    assert json.loads((tree.app_dir / "package.json").read_text(encoding="utf-8")) == {
        "name": "asyncreview-runtime",
        "type": "module",
        "dependencies": {"chalk": "^5.3.0"},
    }
    assert [(c["argv"], c["cwd"]) for c in calls] == [
        (["npm", "install"], str(root / "npx")),
        (["npx", "tsc", "-p", "tsconfig.runtime.json"], str(root / "npx")),
        (["npm", "install", "--production", "--no-save"], str(tree.app_dir)),
    ]


def test_missing_python_source_is_a_staging_error(tmp_path: Path, tree: StagingTree) -> None:
    with pytest.raises(StagingError, match="missing"):
        app_stage.stage_python_sources(tree, sources=[tmp_path / "does-not-exist"])


def test_missing_compiled_node_cli(tmp_path: Path, tree: StagingTree, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "npx").mkdir()
    monkeypatch.setattr(app_stage, "run_cmd", lambda argv, **kw: CmdResult(list(argv), 0, "", ""))

    with pytest.raises(StagingError, match="Compiled Node CLI"):
        app_stage.stage_node_cli(
            tree,
            source_dir=tmp_path / "npx",
            build_commands=[],
            dist_dir="dist",
            package_name="x",
            dependencies={},
            install_command=[],
        )
