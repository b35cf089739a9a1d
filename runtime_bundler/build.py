from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path
from typing import Any, List, Optional

from .build_config import load_build_config
from .context import BuildContext
from .errors import BuildError, MissingVersionArgument
from .logging_utils import configure_logging
from .pipeline import Stage, run_pipeline
from .stages import (
    BundlePydepsStage,
    FetchRuntimeStage,
    PackArchiveStage,
    PrepareStagingStage,
    ResolvePlatformStage,
    StageApplicationStage,
    WriteLauncherStage,
    WriteManifestStage,
)

logger = logging.getLogger(__name__)


DEFAULT_BUILD_CONFIG = "build_config.yaml"


def build_stages() -> List[Stage]:
    return [
        ResolvePlatformStage(),
        PrepareStagingStage(),
        StageApplicationStage(),
        BundlePydepsStage(),
        FetchRuntimeStage(),
        WriteManifestStage(),
        WriteLauncherStage(),
        PackArchiveStage(),
    ]


def run_build(
    *,
    version: Optional[str],
    root: Path,
    config_path: Optional[str] = None,
    log_path: Optional[str] = None,
    stop_after: Optional[str] = None,
    verbose: bool = False,
) -> BuildContext:
    """Run every build stage for ``version``; returns the final context."""

    if not version:
        raise MissingVersionArgument("version required, e.g. 1.2.3")

    configure_logging(log_path=log_path, level=logging.DEBUG if verbose else logging.INFO)

    if config_path is None:
        cfg = load_build_config(str(root / DEFAULT_BUILD_CONFIG), required=False)
    else:
        cfg = load_build_config(config_path)

    ctx = BuildContext(cfg=cfg, version=version, root=root)
    result = run_pipeline(ctx=ctx, stages=build_stages(), stop_after=stop_after)
    return result.ctx


def _raise_on_sigterm(signum: int, frame: Any) -> None:
    # Unwind through context managers so scratch dirs get removed.
    raise SystemExit(128 + signum)


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(
        prog="runtime-bundler",
        description="Build a self-contained, platform-specific runtime bundle.",
    )
    p.add_argument("version", nargs="?", default=None, help="Bundle version, e.g. 1.2.3")
    p.add_argument("--config", default=None, help=f"Build config (YAML); defaults to <root>/{DEFAULT_BUILD_CONFIG}")
    p.add_argument("--root", default=".", help="Project root holding the app sources, stage and dist dirs")
    p.add_argument("--log", default=None, help="Also write the build log to this file")
    p.add_argument(
        "--stop-after",
        default=None,
        choices=[s.stage_id for s in build_stages()],
        help="Stop after this stage (leaves the staging tree for inspection)",
    )
    p.add_argument("-v", "--verbose", action="store_true")

    args = p.parse_args(argv)

    previous = signal.signal(signal.SIGTERM, _raise_on_sigterm)
    try:
        ctx = run_build(
            version=args.version,
            root=Path(args.root).resolve(),
            config_path=args.config,
            log_path=args.log,
            stop_after=args.stop_after,
            verbose=bool(args.verbose),
        )
    except BuildError as e:
        print(f"ERROR [{e.kind}]: {e}", file=sys.stderr)
        return 2 if isinstance(e, MissingVersionArgument) else 1
    finally:
        signal.signal(signal.SIGTERM, previous)

    if ctx.archive is not None:
        print("==> SHA256:")
        print(ctx.archive.digest_line)
        print(f"==> Artifact: {ctx.archive.path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
