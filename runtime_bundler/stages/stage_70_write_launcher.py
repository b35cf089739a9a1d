from __future__ import annotations

from ..context import BuildContext
from ..launcher import LauncherSettings
from ..lib.launcher_gen import write_launcher


class WriteLauncherStage:
    stage_id = "70_write_launcher"

    def run(self, ctx: BuildContext) -> BuildContext:
        cfg = ctx.cfg
        settings = LauncherSettings(
            product=cfg.product,
            python_candidates=tuple(cfg.launch_candidates),
            probe_module=cfg.probe_module,
            command=cfg.launch_command,
            entrypoint=cfg.launch_entrypoint,
            cache_env=cfg.runtime_cache_env,
            cache_dir=cfg.runtime_cache_dir,
        )
        return ctx.evolve(launcher_path=write_launcher(ctx.require_tree(), settings))
