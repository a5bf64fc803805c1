"""S1.01 — Hotspot detection.

Threshold from the configured source: signal percentile, or the belief's
threshold_mean as left by the previous cycle's update.
"""

from __future__ import annotations

from curvesight.engine.context import CycleContext
from curvesight.engine.hotspots import BeliefThreshold, HotspotDetector, PercentileThreshold
from curvesight.engine.registry import Layer, stage


@stage(
    id="S1.01",
    layer=Layer.ANALYSIS,
    dependencies=["S0.02"],
    description="Flag grid points strictly above the active threshold",
)
def hotspot_detection(ctx: CycleContext) -> None:
    if ctx.config.threshold_mode == "belief":
        source = BeliefThreshold()
    else:
        source = PercentileThreshold(ctx.config.hotspot_percentile)
    belief = ctx.belief.state if ctx.belief is not None else None
    ctx.threshold, ctx.hotspots = HotspotDetector(source).detect(ctx.signal, belief)
