from __future__ import annotations

from ..context import BuildContext
from ..lib.pydeps import bundle_pydeps
from ..lib.requirements import parse_requirements


class BundlePydepsStage:
    stage_id = "40_bundle_pydeps"

    def run(self, ctx: BuildContext) -> BuildContext:
        python = bundle_pydeps(
            ctx.require_tree(),
            parse_requirements(ctx.cfg.requirements),
            ctx.cfg.build_candidates,
            break_system_packages=ctx.cfg.break_system_packages,
        )
        return ctx.evolve(python=python)
