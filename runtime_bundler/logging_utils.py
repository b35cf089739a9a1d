from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional


def configure_logging(
    log_path: Optional[str] = None,
    level: int = logging.INFO,
    also_console: bool = True,
) -> Optional[str]:
    """Configure logging for a build.

    Notes:
    - No file is written unless ``log_path`` is given; platform resolution must
      not touch the filesystem, and the log file would be the first thing to.
    - Calling this twice keeps the first configuration.

    Returns the file path being used, or None for console-only logging.
    """

    logger = logging.getLogger()
    logger.setLevel(level)

    if getattr(logger, "_runtime_bundler_configured", False):
        return getattr(logger, "_runtime_bundler_log_path", log_path)

    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    if log_path:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(fmt)
        handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console.setFormatter(fmt)
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_runtime_bundler_configured", True)
    setattr(logger, "_runtime_bundler_log_path", log_path)

    logging.getLogger(__name__).debug("Logging initialized (file=%s)", log_path)
    return log_path
