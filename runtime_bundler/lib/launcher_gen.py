from __future__ import annotations

import json
import logging
import shlex
import shutil
import textwrap
from pathlib import Path
from typing import Sequence

from .. import launcher as launcher_module
from ..launcher import SETTINGS_FILE, LauncherSettings
from .staging import StagingTree

logger = logging.getLogger(__name__)

LAUNCHER_SCRIPT = "launcher.py"

_SHIM_TEMPLATE = textwrap.dedent(
    """\
    #!/usr/bin/env sh
    set -eu

    RUNTIME_ROOT="$(CDPATH= cd -- "$(dirname -- "$0")/.." && pwd)"

    for py in {candidates}; do
      if command -v "$py" >/dev/null 2>&1; then
        exec "$py" "$RUNTIME_ROOT/app/{script}" "$@"
      fi
    done

    echo "ERROR: Python 3 not found. Please install Python 3.11+." >&2
    exit 1
    """
)


def render_shim(candidates: Sequence[str]) -> str:
    return _SHIM_TEMPLATE.format(
        candidates=" ".join(shlex.quote(c) for c in candidates),
        script=LAUNCHER_SCRIPT,
    )


def write_launcher(tree: StagingTree, settings: LauncherSettings) -> Path:
    """Write ``bin/<product>`` plus the launcher script and its settings.

    Returns the path of the shim.
    """

    tree.app_dir.mkdir(parents=True, exist_ok=True)
    script = tree.app_dir / LAUNCHER_SCRIPT
    shutil.copyfile(Path(launcher_module.__file__), script)
    script.chmod(0o644)

    (tree.app_dir / SETTINGS_FILE).write_text(json.dumps(settings.to_dict(), indent=2) + "\n", encoding="utf-8")

    shim = tree.bin_dir / settings.product
    shim.write_text(render_shim(settings.python_candidates), encoding="utf-8")
    shim.chmod(0o755)

    logger.info("Wrote %s", shim)
    return shim
