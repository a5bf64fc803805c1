"""S1.03 — Group contiguous hotspots into zones with their peaks."""

from __future__ import annotations

from curvesight.engine.context import CycleContext
from curvesight.engine.hotspots import hotspot_zones
from curvesight.engine.registry import Layer, stage


@stage(
    id="S1.03",
    layer=Layer.ANALYSIS,
    dependencies=["S1.01"],
    description="Contiguous hotspot zones",
)
def zones(ctx: CycleContext) -> None:
    grid = ctx.reconstruction.grid if ctx.reconstruction is not None else None
    ctx.zones = hotspot_zones(ctx.signal, ctx.hotspots, grid)
