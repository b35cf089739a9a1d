"""Bundle launcher.

This file is copied verbatim into every bundle as ``app/launcher.py`` and is
started by the ``bin/<product>`` shim on the end user's machine, so it must
only import the standard library.

On each invocation it:

- derives every path from its own location (the bundle is relocatable),
- checks for ``pydeps/.verified``; when absent, probes the bundled
  dependencies under the local interpreter and reinstalls them from
  ``requirements.txt`` if the probe import fails (ABI mismatch),
- replaces itself with the application entrypoint, forwarding all arguments.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import shutil
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger("runtime_launcher")

SETTINGS_FILE = "launcher.json"
MARKER_NAME = ".verified"
LOCK_NAME = ".launcher.lock"

DEFAULT_CANDIDATES: Tuple[str, ...] = (
    "python3",
    "python3.12",
    "python3.11",
    "/opt/homebrew/bin/python3",
    "/usr/local/bin/python3",
    "/usr/bin/python3",
)


class LauncherError(RuntimeError):
    pass


class NoInterpreterFound(LauncherError):
    pass


class DependencyInstallFailure(LauncherError):
    pass


@dataclass(frozen=True)
class LauncherSettings:
    product: str = "asyncreview"
    python_candidates: Tuple[str, ...] = DEFAULT_CANDIDATES
    probe_module: str = "pydantic_core"
    command: str = "node"
    entrypoint: str = "app/dist/index.js"
    cache_env: str = "DENO_DIR"
    cache_dir: str = ".deno_cache"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product": self.product,
            "python_candidates": list(self.python_candidates),
            "probe_module": self.probe_module,
            "command": self.command,
            "entrypoint": self.entrypoint,
            "cache_env": self.cache_env,
            "cache_dir": self.cache_dir,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LauncherSettings":
        defaults = cls()
        return cls(
            product=str(data.get("product") or defaults.product),
            python_candidates=tuple(data.get("python_candidates") or defaults.python_candidates),
            probe_module=str(data.get("probe_module") or defaults.probe_module),
            command=str(data.get("command") or defaults.command),
            entrypoint=str(data.get("entrypoint") or defaults.entrypoint),
            cache_env=str(data.get("cache_env") or defaults.cache_env),
            cache_dir=str(data.get("cache_dir") or defaults.cache_dir),
        )

    @classmethod
    def load(cls, path: Path) -> "LauncherSettings":
        if not path.exists():
            return cls()
        return cls.from_dict(json.loads(path.read_text(encoding="utf-8")))


@dataclass(frozen=True)
class BundlePaths:
    root: Path

    @property
    def bin_dir(self) -> Path:
        return self.root / "bin"

    @property
    def pydeps_dir(self) -> Path:
        return self.root / "pydeps"

    @property
    def app_python_dir(self) -> Path:
        return self.root / "app" / "python"

    @property
    def requirements(self) -> Path:
        return self.root / "requirements.txt"

    @property
    def marker(self) -> Path:
        return self.pydeps_dir / MARKER_NAME

    @property
    def lock_file(self) -> Path:
        return self.root / LOCK_NAME


@dataclass(frozen=True)
class LaunchEnvironment:
    """Environment changes for the launched process tree.

    Applied to a copy of the base environment; the launcher's own
    ``os.environ`` is never modified.
    """

    path_prepend: str
    pythonpath: str
    cache_env: str
    cache_dir: str
    extra: Dict[str, str] = field(default_factory=dict)

    def apply(self, base: Mapping[str, str]) -> Dict[str, str]:
        env = dict(base)
        current_path = base.get("PATH")
        env["PATH"] = self.path_prepend + (os.pathsep + current_path if current_path else "")
        env["PYTHONPATH"] = self.pythonpath
        # The cache dir is the only setting a caller may override.
        env[self.cache_env] = base.get(self.cache_env) or self.cache_dir
        env.update(self.extra)
        return env


def launch_environment(paths: BundlePaths, settings: LauncherSettings) -> LaunchEnvironment:
    return LaunchEnvironment(
        path_prepend=str(paths.bin_dir),
        pythonpath=os.pathsep.join([str(paths.pydeps_dir), str(paths.app_python_dir)]),
        cache_env=settings.cache_env,
        cache_dir=str(paths.root / settings.cache_dir),
    )


class Launcher:
    """Two-state dependency check (UNVERIFIED -> VERIFIED) plus dispatch."""

    UNVERIFIED = "UNVERIFIED"
    VERIFIED = "VERIFIED"

    def __init__(
        self,
        root: Path,
        settings: Optional[LauncherSettings] = None,
        *,
        base_env: Optional[Mapping[str, str]] = None,
        run: Callable[..., Any] = subprocess.run,
        which: Callable[[str], Optional[str]] = shutil.which,
    ) -> None:
        self.paths = BundlePaths(Path(root))
        self.settings = settings or LauncherSettings()
        self.base_env: Dict[str, str] = dict(os.environ if base_env is None else base_env)
        self.launch_env = launch_environment(self.paths, self.settings)
        self._run = run
        self._which = which

    @property
    def state(self) -> str:
        return self.VERIFIED if self.paths.marker.exists() else self.UNVERIFIED

    def environment(self) -> Dict[str, str]:
        return self.launch_env.apply(self.base_env)

    def select_interpreter(self) -> str:
        for py in self.settings.python_candidates:
            found = self._which(py)
            if found:
                return found
        raise NoInterpreterFound("Python 3 not found. Please install Python 3.11+.")

    def probe(self, python: str) -> bool:
        """Return True when the ABI-sensitive probe module imports from pydeps/."""

        env = self.environment()
        env["PYTHONPATH"] = str(self.paths.pydeps_dir)
        r = self._run(
            [python, "-c", f"import {self.settings.probe_module}"],
            env=env,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
        return r.returncode == 0

    def clear_pydeps(self) -> None:
        pydeps = self.paths.pydeps_dir
        pydeps.mkdir(parents=True, exist_ok=True)
        for child in pydeps.iterdir():
            if child.is_dir() and not child.is_symlink():
                shutil.rmtree(child)
            else:
                child.unlink()

    def repair(self, python: str) -> None:
        """Reinstall pydeps/ from requirements.txt with the local interpreter.

        A plain install is tried first; if the host's package policy rejects
        it, a second attempt adds ``--break-system-packages``.
        """

        requirements = self.paths.requirements
        if not requirements.is_file():
            raise DependencyInstallFailure(f"{requirements} is missing; cannot reinstall bundled Python deps.")

        env = {k: v for k, v in self.base_env.items() if k != "PYTHONPATH"}
        last_error = ""
        for extra in ([], ["--break-system-packages"]):
            self.clear_pydeps()
            argv = [
                python, "-m", "pip", "install", "--quiet", *extra,
                "--target", str(self.paths.pydeps_dir),
                "-r", str(requirements),
            ]
            r = self._run(argv, env=env, stdout=subprocess.DEVNULL, stderr=subprocess.PIPE, text=True)
            if r.returncode == 0:
                return
            last_error = (getattr(r, "stderr", "") or "").strip()
            logger.debug("pip install %s failed (%s): %s", " ".join(extra) or "(plain)", r.returncode, last_error)

        raise DependencyInstallFailure(
            "Could not install Python deps for your Python version. "
            f"Try: {python} -m pip install --target {self.paths.pydeps_dir} -r {requirements}\n{last_error}"
        )

    @contextlib.contextmanager
    def _locked(self) -> Iterator[None]:
        import fcntl

        with open(self.paths.lock_file, "a") as fh:
            fcntl.flock(fh.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(fh.fileno(), fcntl.LOCK_UN)

    def ensure_verified(self) -> bool:
        """Move to VERIFIED; returns True when a repair was needed."""

        if self.state == self.VERIFIED:
            return False

        with self._locked():
            # Another launcher may have finished while we waited.
            if self.state == self.VERIFIED:
                return False

            python = self.select_interpreter()
            repaired = False
            if not self.probe(python):
                logger.info("Reinstalling Python deps for your Python version (one-time)...")
                self.repair(python)
                logger.info("Done")
                repaired = True

            self.paths.pydeps_dir.mkdir(parents=True, exist_ok=True)
            self.paths.marker.touch()
            return repaired

    def launch_argv(self, args: Sequence[str]) -> List[str]:
        return [self.settings.command, str(self.paths.root / self.settings.entrypoint), *args]


def spawn_and_wait(argv: Sequence[str], env: Mapping[str, str]) -> int:
    rc = subprocess.run(list(argv), env=dict(env)).returncode
    # Mirror the shell convention for signal deaths.
    return 128 - rc if rc < 0 else rc


def dispatch(
    argv: Sequence[str],
    env: Mapping[str, str],
    *,
    exec_fn: Optional[Callable[[str, List[str], Dict[str, str]], Any]] = None,
) -> int:
    """Replace this process with ``argv``; spawn and wait where exec is unavailable."""

    if exec_fn is None and os.name == "posix":
        exec_fn = os.execvpe
    if exec_fn is not None:
        sys.stdout.flush()
        sys.stderr.flush()
        exec_fn(argv[0], list(argv), dict(env))
    return spawn_and_wait(argv, env)


def _configure_logging() -> None:
    if logger.handlers:
        return
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False


def bundle_root() -> Path:
    # <root>/app/launcher.py
    return Path(__file__).resolve().parent.parent


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    root: Optional[Path] = None,
    exec_fn: Optional[Callable[[str, List[str], Dict[str, str]], Any]] = None,
) -> int:
    _configure_logging()
    args = list(sys.argv[1:] if argv is None else argv)
    root = Path(root) if root is not None else bundle_root()
    settings = LauncherSettings.load(root / "app" / SETTINGS_FILE)
    launcher = Launcher(root, settings)

    try:
        launcher.ensure_verified()
    except LauncherError as e:
        logger.error("ERROR: %s", e)
        return 1
    except OSError as e:
        logger.error(
            "ERROR: could not prepare bundled Python deps in %s: %s\nMake that directory writable, or unpack the bundle somewhere writable, and retry.",
            root,
            e,
        )
        return 1

    try:
        return dispatch(launcher.launch_argv(args), launcher.environment(), exec_fn=exec_fn)
    except FileNotFoundError:
        logger.error("ERROR: '%s' not found on PATH. Please install it and retry.", settings.command)
        return 127


if __name__ == "__main__":
    raise SystemExit(main())
