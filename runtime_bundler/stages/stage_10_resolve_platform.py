from __future__ import annotations

import logging

from ..context import BuildContext
from ..lib.platforms import resolve_platform, runtime_target

logger = logging.getLogger(__name__)


class ResolvePlatformStage:
    stage_id = "10_resolve_platform"

    def run(self, ctx: BuildContext) -> BuildContext:
        key = resolve_platform()
        # Fail here, not halfway through the build, if the runtime has no download for us.
        runtime_target(key)
        logger.info("Platform: %s", key)
        logger.info("Version: %s", ctx.version)
        return ctx.evolve(platform=key)
