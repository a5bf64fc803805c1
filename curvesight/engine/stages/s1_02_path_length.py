"""S1.02 — Curvature-weighted path length vs. flat Manhattan baseline."""

from __future__ import annotations

from curvesight.engine.context import CycleContext
from curvesight.engine.paths import PathEvaluator
from curvesight.engine.registry import Layer, stage


@stage(
    id="S1.02",
    layer=Layer.ANALYSIS,
    dependencies=["S0.01"],
    description="Z-bias path length through the dense signal",
)
def path_length(ctx: CycleContext) -> None:
    ctx.path_metrics = PathEvaluator(ctx.config.z_bias_factor).evaluate(ctx.signal)
