from __future__ import annotations

from ..context import BuildContext
from ..lib.staging import prepare_staging


class PrepareStagingStage:
    stage_id = "20_prepare_staging"

    def run(self, ctx: BuildContext) -> BuildContext:
        tree = prepare_staging(ctx.root, ctx.require_platform(), stage_dir=ctx.cfg.stage_dir)
        return ctx.evolve(tree=tree)
