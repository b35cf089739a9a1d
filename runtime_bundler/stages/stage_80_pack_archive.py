from __future__ import annotations

from ..context import BuildContext
from ..lib.archive import pack_archive


class PackArchiveStage:
    stage_id = "80_pack_archive"

    def run(self, ctx: BuildContext) -> BuildContext:
        archive = pack_archive(
            ctx.require_tree(),
            ctx.dist_dir,
            product=ctx.cfg.product,
            version=ctx.version,
            platform_key=ctx.require_platform(),
        )
        return ctx.evolve(archive=archive)
