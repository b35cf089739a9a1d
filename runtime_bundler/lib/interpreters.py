from __future__ import annotations

import logging
import shutil
from typing import Callable, Optional, Sequence

from ..errors import NoInterpreterFound
from .command import run_cmd

logger = logging.getLogger(__name__)


def has_pip(python: str) -> bool:
    r = run_cmd([python, "-m", "pip", "--version"], check=False)
    return r.ok


def find_build_python(
    candidates: Sequence[str],
    *,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> str:
    """Return the first candidate that exists and has a working pip."""

    for py in candidates:
        if which(py) is None:
            logger.debug("Interpreter candidate %s not found", py)
            continue
        if has_pip(py):
            logger.info("Using Python: %s", py)
            return py
        logger.debug("Interpreter candidate %s has no usable pip", py)

    raise NoInterpreterFound(
        "No system python with pip found (tried: " + ", ".join(candidates) + "). "
        "Install Python 3.11+ with pip."
    )
