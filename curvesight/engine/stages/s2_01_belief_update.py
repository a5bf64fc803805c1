"""S2.01 — Belief update.

Runs last: reconstruction confidence and external priors move the threshold
belief, which the next cycle's detection reads. Any earlier failure skips
it, leaving the belief as it was.
"""

from __future__ import annotations

from curvesight.engine.context import CycleContext
from curvesight.engine.registry import Layer, stage


@stage(
    id="S2.01",
    layer=Layer.BELIEF,
    dependencies=["S1.01", "S1.02", "S1.03"],
    description="Fuse reconstruction evidence and priors into the threshold belief",
)
def belief_update(ctx: CycleContext) -> None:
    if ctx.belief is None:
        raise RuntimeError("Belief prior stage has not run")
    ctx.belief_state = ctx.belief.update(ctx.confidence, ctx.priors, signal=ctx.signal)
