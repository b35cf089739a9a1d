from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigError

DEFAULT_REQUIREMENTS = [
    "dspy>=3.1.2",
    "rich>=13.0.0",
    "python-dotenv>=1.0.0",
    "httpx>=0.28.1",
]

DEFAULT_BUILD_CANDIDATES = [
    "python3",
    "python3.11",
    "/opt/homebrew/bin/python3",
    "/usr/local/bin/python3",
    "/usr/bin/python3",
]

DEFAULT_LAUNCH_CANDIDATES = [
    "python3",
    "python3.12",
    "python3.11",
    "/opt/homebrew/bin/python3",
    "/usr/local/bin/python3",
    "/usr/bin/python3",
]

DEFAULT_NODE_DEPENDENCIES = {
    "commander": "^12.1.0",
    "inquirer": "^9.2.12",
    "chalk": "^5.3.0",
    "ora": "^8.0.1",
    "tar": "^7.0.0",
}

DEFAULT_NODE_SOURCE_DIR = "npx"

DEFAULT_PYTHON_SOURCES = [
    "npx/python/cli",
    "npx/python/cr",
    "npx/python/pyproject.toml",
]


def _section(raw: Dict[str, Any], *keys: str) -> Dict[str, Any]:
    cur: Any = raw
    for k in keys:
        cur = (cur or {}).get(k) if isinstance(cur, dict) else None
    return cur if isinstance(cur, dict) else {}


@dataclass(frozen=True)
class BuildConfig:
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def product(self) -> str:
        return str(self.raw.get("product") or "asyncreview")

    @property
    def stage_dir(self) -> str:
        return str(_section(self.raw, "paths").get("stage_dir") or ".runtime_stage")

    @property
    def dist_dir(self) -> str:
        return str(_section(self.raw, "paths").get("dist_dir") or "dist")

    # python

    @property
    def requirements(self) -> List[str]:
        reqs = _section(self.raw, "python").get("requirements")
        return [str(r) for r in reqs] if reqs is not None else list(DEFAULT_REQUIREMENTS)

    @property
    def build_candidates(self) -> List[str]:
        c = _section(self.raw, "python").get("build_candidates")
        return [str(x) for x in c] if c else list(DEFAULT_BUILD_CANDIDATES)

    @property
    def launch_candidates(self) -> List[str]:
        c = _section(self.raw, "python").get("launch_candidates")
        return [str(x) for x in c] if c else list(DEFAULT_LAUNCH_CANDIDATES)

    @property
    def probe_module(self) -> str:
        return str(_section(self.raw, "python").get("probe_module") or "pydantic_core")

    @property
    def break_system_packages(self) -> bool:
        v = _section(self.raw, "python").get("break_system_packages")
        return True if v is None else bool(v)

    # runtime (deno)

    @property
    def runtime_name(self) -> str:
        return str(_section(self.raw, "runtime").get("name") or "deno")

    @property
    def runtime_version(self) -> str:
        return str(_section(self.raw, "runtime").get("version") or "2.6.6")

    @property
    def runtime_url_template(self) -> str:
        return str(
            _section(self.raw, "runtime").get("url_template")
            or "https://github.com/denoland/deno/releases/download/v{version}/deno-{target}.zip"
        )

    @property
    def runtime_binary(self) -> str:
        return str(_section(self.raw, "runtime").get("binary") or self.runtime_name)

    @property
    def runtime_cache_env(self) -> str:
        return str(_section(self.raw, "runtime").get("cache_env") or "DENO_DIR")

    @property
    def runtime_cache_dir(self) -> str:
        return str(_section(self.raw, "runtime").get("cache_dir") or ".deno_cache")

    @property
    def download_timeout(self) -> float:
        v = _section(self.raw, "runtime").get("timeout_seconds")
        return float(v) if v is not None else 60.0

    # launcher

    @property
    def launch_command(self) -> str:
        return str(_section(self.raw, "launch").get("command") or "node")

    @property
    def launch_entrypoint(self) -> str:
        return str(_section(self.raw, "launch").get("entrypoint") or "app/dist/index.js")

    # application sources

    @property
    def node_source_dir(self) -> Optional[str]:
        # An explicit null or empty value disables the Node build.
        node = _section(self.raw, "app", "node")
        if "source_dir" not in node:
            return DEFAULT_NODE_SOURCE_DIR
        v = node.get("source_dir")
        return str(v) if v else None

    @property
    def node_build_commands(self) -> List[List[str]]:
        cmds = _section(self.raw, "app", "node").get("build_commands")
        if cmds is None:
            return [["npm", "install"], ["npx", "tsc", "-p", "tsconfig.runtime.json"]]
        return [[str(a) for a in c] for c in cmds]

    @property
    def node_dist_dir(self) -> str:
        return str(_section(self.raw, "app", "node").get("dist_dir") or "dist")

    @property
    def node_package_name(self) -> str:
        return str(_section(self.raw, "app", "node").get("package_name") or f"{self.product}-runtime")

    @property
    def node_dependencies(self) -> Dict[str, str]:
        deps = _section(self.raw, "app", "node").get("dependencies")
        if deps is None:
            return dict(DEFAULT_NODE_DEPENDENCIES)
        return {str(k): str(v) for k, v in deps.items()}

    @property
    def node_install_command(self) -> List[str]:
        cmd = _section(self.raw, "app", "node").get("install_command")
        return [str(a) for a in cmd] if cmd else ["npm", "install", "--production", "--no-save"]

    @property
    def python_sources(self) -> List[str]:
        sources = _section(self.raw, "app", "python").get("sources")
        if sources is None:
            return list(DEFAULT_PYTHON_SOURCES)
        return [str(s) for s in sources]


def load_build_config(path: Optional[str], *, required: bool = True) -> BuildConfig:
    """Load a YAML build config.

    A missing file is an error only when ``required``; otherwise the built-in
    defaults apply.
    """

    if path is None:
        return BuildConfig(raw={})

    p = Path(path)
    if not p.exists():
        if required:
            raise ConfigError(f"Build config not found: {path}")
        return BuildConfig(raw={})

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ConfigError("build config must be YAML")

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping/object")

    return BuildConfig(raw=raw)
