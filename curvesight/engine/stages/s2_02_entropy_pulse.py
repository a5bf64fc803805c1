"""S2.02 — Coherence pulse.

After the update, a belief whose entropy exceeds ``entropy_pulse_threshold``
has its variance contracted. Disabled when the threshold is None.
"""

from __future__ import annotations

from curvesight.engine.belief import EntropyPulse
from curvesight.engine.context import CycleContext
from curvesight.engine.registry import Layer, stage


@stage(
    id="S2.02",
    layer=Layer.BELIEF,
    dependencies=["S2.01"],
    description="Contract a high-entropy threshold belief",
)
def entropy_pulse(ctx: CycleContext) -> None:
    cfg = ctx.config
    if cfg.entropy_pulse_threshold is None or ctx.belief is None:
        return
    pulse = EntropyPulse(cfg.entropy_pulse_threshold, cfg.entropy_pulse_contraction)
    ctx.pulsed = pulse.maybe_trigger(ctx.belief)
    if ctx.pulsed:
        ctx.belief_state = ctx.belief.state
