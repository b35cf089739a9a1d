from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..errors import StagingError
from .assets import copy_path, copy_tree
from .command import run_cmd
from .staging import StagingTree

logger = logging.getLogger(__name__)


def render_runtime_package_json(name: str, dependencies: Dict[str, str]) -> str:
    doc = {"name": name, "type": "module", "dependencies": dependencies}
    return json.dumps(doc, indent=2) + "\n"


def stage_node_cli(
    tree: StagingTree,
    *,
    source_dir: Path,
    build_commands: Sequence[Sequence[str]],
    dist_dir: str,
    package_name: str,
    dependencies: Dict[str, str],
    install_command: Sequence[str],
) -> None:
    """Build the Node CLI, copy its compiled output and install runtime deps."""

    if not source_dir.is_dir():
        raise StagingError(f"Node CLI source dir missing: {source_dir}")

    for argv in build_commands:
        run_cmd(argv, cwd=str(source_dir))

    compiled = source_dir / dist_dir
    if not compiled.is_dir():
        raise StagingError(f"Compiled Node CLI not found: {compiled}")
    copy_tree(compiled, tree.app_dir / "dist")

    # The runtime package.json pins only what the compiled CLI needs at run time.
    (tree.app_dir / "package.json").write_text(
        render_runtime_package_json(package_name, dependencies), encoding="utf-8"
    )
    if install_command:
        run_cmd(install_command, cwd=str(tree.app_dir))


def stage_python_sources(tree: StagingTree, *, sources: Sequence[Path]) -> List[Path]:
    copied: List[Path] = []
    for src in sources:
        copied.append(copy_path(src, tree.app_python_dir))
    return copied


def stage_application(
    tree: StagingTree,
    *,
    project_root: Path,
    node_source_dir: Optional[str],
    node_build_commands: Sequence[Sequence[str]],
    node_dist_dir: str,
    node_package_name: str,
    node_dependencies: Dict[str, str],
    node_install_command: Sequence[str],
    python_sources: Sequence[str],
) -> None:
    if node_source_dir:
        logger.info("Staging Node.js CLI from %s", node_source_dir)
        stage_node_cli(
            tree,
            source_dir=project_root / node_source_dir,
            build_commands=node_build_commands,
            dist_dir=node_dist_dir,
            package_name=node_package_name,
            dependencies=node_dependencies,
            install_command=node_install_command,
        )
    else:
        logger.info("No Node.js CLI configured; app/ carries Python sources only")

    if python_sources:
        logger.info("Copying python CLI sources")
        stage_python_sources(tree, sources=[project_root / s for s in python_sources])
