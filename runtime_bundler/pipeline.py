from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from .context import BuildContext

logger = logging.getLogger(__name__)


class Stage(Protocol):
    """A single build stage over an immutable context."""

    stage_id: str

    def run(self, ctx: BuildContext) -> BuildContext:
        ...


@dataclass(frozen=True)
class PipelineResult:
    ctx: BuildContext
    ran_stages: List[str]


def run_pipeline(
    *,
    ctx: BuildContext,
    stages: Sequence[Stage],
    stop_after: Optional[str] = None,
) -> PipelineResult:
    """Run stages in order; the first failure aborts the build."""

    if stop_after is not None and stop_after not in {s.stage_id for s in stages}:
        raise ValueError(f"Unknown stage: {stop_after}")

    ran: List[str] = []

    for stage in stages:
        logger.info("==> %s", stage.stage_id)
        try:
            ctx = stage.run(ctx)
        except Exception:
            logger.error("Stage %s failed", stage.stage_id)
            raise
        ran.append(stage.stage_id)

        if stop_after is not None and stage.stage_id == stop_after:
            logger.info("Stopping after %s", stop_after)
            break

    return PipelineResult(ctx=ctx, ran_stages=ran)
