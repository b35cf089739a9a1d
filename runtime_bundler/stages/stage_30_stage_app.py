from __future__ import annotations

from ..context import BuildContext
from ..lib.app_stage import stage_application


class StageApplicationStage:
    stage_id = "30_stage_app"

    def run(self, ctx: BuildContext) -> BuildContext:
        cfg = ctx.cfg
        stage_application(
            ctx.require_tree(),
            project_root=ctx.root,
            node_source_dir=cfg.node_source_dir,
            node_build_commands=cfg.node_build_commands,
            node_dist_dir=cfg.node_dist_dir,
            node_package_name=cfg.node_package_name,
            node_dependencies=cfg.node_dependencies,
            node_install_command=cfg.node_install_command,
            python_sources=cfg.python_sources,
        )
        return ctx
