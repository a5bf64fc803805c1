"""S0.01 — Sparse-to-dense reconstruction.

Periodogram-selected sinusoids plus wavelet-smoothed residual detail on the
configured grid. Produces the signal and per-point confidence every later
stage reads.
"""

from __future__ import annotations

from curvesight.engine.context import CycleContext
from curvesight.engine.reconstruction import SignalReconstructor
from curvesight.engine.registry import Layer, stage


@stage(
    id="S0.01",
    layer=Layer.RECONSTRUCTION,
    description="Reconstruct dense curvature signal from sparse samples",
)
def reconstruction(ctx: CycleContext) -> None:
    ctx.reconstruction = SignalReconstructor(ctx.config).run(ctx.samples)
