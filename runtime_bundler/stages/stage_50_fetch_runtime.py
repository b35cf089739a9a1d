from __future__ import annotations

from ..context import BuildContext
from ..lib.runtime_fetch import fetch_runtime


class FetchRuntimeStage:
    stage_id = "50_fetch_runtime"

    def run(self, ctx: BuildContext) -> BuildContext:
        cfg = ctx.cfg
        runtime = fetch_runtime(
            ctx.require_tree(),
            ctx.require_platform(),
            version=cfg.runtime_version,
            url_template=cfg.runtime_url_template,
            binary_name=cfg.runtime_binary,
            timeout=cfg.download_timeout,
        )
        return ctx.evolve(runtime=runtime)
