from __future__ import annotations

from pathlib import Path

import pytest

from runtime_bundler.build_config import BuildConfig
from runtime_bundler.context import BuildContext
from runtime_bundler.pipeline import run_pipeline


class _Record:
    def __init__(self, stage_id: str, fail: bool = False) -> None:
        self.stage_id = stage_id
        self.fail = fail

    def run(self, ctx: BuildContext) -> BuildContext:
        if self.fail:
            raise RuntimeError(f"{self.stage_id} broke")
        return ctx.evolve(python=(ctx.python or "") + self.stage_id)


def _ctx(tmp_path: Path) -> BuildContext:
    return BuildContext(cfg=BuildConfig(), version="1.0.0", root=tmp_path)


def test_stages_run_in_order_on_fresh_contexts(tmp_path: Path) -> None:
    start = _ctx(tmp_path)
    result = run_pipeline(ctx=start, stages=[_Record("a"), _Record("b")])

    assert result.ran_stages == ["a", "b"]
    assert result.ctx.python == "ab"
    assert start.python is None


def test_first_failure_aborts(tmp_path: Path) -> None:
    with pytest.raises(RuntimeError, match="b broke"):
        run_pipeline(ctx=_ctx(tmp_path), stages=[_Record("a"), _Record("b", fail=True), _Record("c", fail=True)])


def test_stop_after(tmp_path: Path) -> None:
    result = run_pipeline(ctx=_ctx(tmp_path), stages=[_Record("a"), _Record("b")], stop_after="a")
    assert result.ran_stages == ["a"]
    with pytest.raises(ValueError):
        run_pipeline(ctx=_ctx(tmp_path), stages=[_Record("a")], stop_after="zzz")
