from __future__ import annotations

from ..context import BuildContext
from ..lib.manifest import write_manifest


class WriteManifestStage:
    stage_id = "60_write_manifest"

    def run(self, ctx: BuildContext) -> BuildContext:
        path = write_manifest(ctx.require_tree(), ctx.version, ctx.require_platform())
        return ctx.evolve(manifest_path=path)
