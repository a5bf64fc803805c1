"""S0.02 — Belief prior.

First cycle: create the BeliefTensor, calibrating its threshold from the
first reconstructed signal unless a prior mean is configured. Later cycles
check the carried belief still matches the grid.
"""

from __future__ import annotations

from curvesight.engine.belief import BeliefTensor
from curvesight.engine.context import CycleContext
from curvesight.engine.registry import Layer, stage
from curvesight.errors import ResolutionMismatch


@stage(
    id="S0.02",
    layer=Layer.RECONSTRUCTION,
    dependencies=["S0.01"],
    description="Initialise or validate the threshold belief",
)
def belief_prior(ctx: CycleContext) -> None:
    size = len(ctx.signal)
    if ctx.belief is None:
        ctx.belief = BeliefTensor(size, ctx.config, calibration_signal=ctx.signal)
    elif ctx.belief.grid_size != size:
        raise ResolutionMismatch(
            f"Belief tracks {ctx.belief.grid_size} grid points, signal has {size}"
        )
