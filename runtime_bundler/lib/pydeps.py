from __future__ import annotations

import logging
from typing import Sequence

from ..errors import DependencyInstallFailure
from .command import run_cmd
from .interpreters import find_build_python
from .requirements import Requirement, write_requirements
from .staging import StagingTree

logger = logging.getLogger(__name__)


def pip_install_argv(python: str, tree: StagingTree, *, break_system_packages: bool) -> list[str]:
    argv = [python, "-m", "pip", "install"]
    if break_system_packages:
        argv.append("--break-system-packages")
    argv += ["--target", str(tree.pydeps_dir), "-r", str(tree.requirements_path)]
    return argv


def bundle_pydeps(
    tree: StagingTree,
    requirements: Sequence[Requirement],
    candidates: Sequence[str],
    *,
    break_system_packages: bool = True,
) -> str:
    """Install pinned requirements into ``pydeps/``; returns the interpreter used.

    requirements.txt is written before anything is installed, so the launcher
    always has the fallback description even if the install later fails.
    """

    python = find_build_python(candidates)

    write_requirements(tree.requirements_path, requirements)
    logger.info("Wrote %s (%d requirements)", tree.requirements_path, len(requirements))

    r = run_cmd(
        pip_install_argv(python, tree, break_system_packages=break_system_packages),
        check=False,
        env={"PYTHONNOUSERSITE": "1", "PIP_USER": "0"},
    )
    if not r.ok:
        raise DependencyInstallFailure(
            f"pip install into {tree.pydeps_dir} failed ({r.returncode}):\n{r.stderr.strip()}"
        )

    return python
