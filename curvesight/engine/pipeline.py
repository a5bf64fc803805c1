"""Pipeline orchestrator: runs cycle stages in dependency order and owns the belief."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from curvesight.engine.belief import BeliefTensor, ConstraintSource
from curvesight.engine.config import PipelineConfig
from curvesight.engine.context import CycleContext
from curvesight.engine.registry import Layer, StageRegistry, get_registry
from curvesight.models.results import BeliefState, HotspotZone, PathMetrics, SpectralComponent
from curvesight.models.samples import SparseSample

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class CycleResult:
    """Everything a caller gets back from one cycle."""

    cycle: int
    signal: NDArray[np.float64]
    confidence: NDArray[np.float64]
    grid_positions: NDArray[np.float64]
    threshold: float
    hotspots: list[int]
    zones: list[HotspotZone]
    path_metrics: PathMetrics
    belief: BeliefState
    components: list[SpectralComponent] = field(default_factory=list)
    elapsed_ms: float = 0.0
    # True when the coherence pulse contracted the belief this cycle
    pulsed: bool = False

    @property
    def dominant_frequency(self) -> float | None:
        return self.components[0].frequency if self.components else None


class Pipeline:
    """Runs reconstruct → detect/evaluate → update cycles for one sample stream.

    Each instance owns one BeliefTensor; independent runs need independent
    pipelines.
    """

    def __init__(
        self,
        registry: StageRegistry | None = None,
        config: PipelineConfig | None = None,
        belief: BeliefTensor | None = None,
    ) -> None:
        if registry is None:
            from curvesight.engine.stages import register_stages

            register_stages()
            registry = get_registry()
        self.registry = registry
        self.config = (config or PipelineConfig()).validate()
        self.belief = belief
        self.cycles = 0

    def run(self, ctx: CycleContext, stage_ids: Iterable[str] | None = None) -> CycleContext:
        """Run every registered stage on ``ctx``, or only ``stage_ids`` and their dependencies.

        A failing stage is logged, recorded in ``ctx.errors`` and re-raised;
        later stages do not run.
        """
        start = time.perf_counter()
        ordered = self.registry.resolve_order(stage_ids)
        logger.debug("Cycle %d: %d stages queued", ctx.cycle, len(ordered))

        for spec in ordered:
            t0 = time.perf_counter()
            try:
                spec.fn(ctx)
            except Exception as e:
                ctx.errors[spec.id] = str(e)
                logger.warning("  %s FAILED: %s", spec.id, e)
                raise
            ctx.completed_stages.add(spec.id)
            elapsed = (time.perf_counter() - t0) * 1000
            ctx.timings_ms[spec.id] = elapsed
            logger.debug("  %s completed in %.1fms", spec.id, elapsed)

        total = (time.perf_counter() - start) * 1000
        ctx.timings_ms["total"] = total
        logger.info(
            "Cycle %d complete: %d/%d stages in %.0fms, %d hotspots",
            ctx.cycle,
            len(ctx.completed_stages),
            len(ordered),
            total,
            len(ctx.hotspots),
        )
        return ctx

    def run_cycle(
        self,
        samples: Sequence[SparseSample],
        priors: Iterable[ConstraintSource] = (),
        *,
        update_belief: bool = True,
    ) -> CycleResult:
        """One full cycle. On error the pipeline's belief is left as it was.

        With ``update_belief=False`` only the reconstruction and analysis
        stages run: the result reflects the current belief, and neither the
        belief nor the cycle counter moves.
        """
        ctx = CycleContext(
            samples=list(samples),
            priors=list(priors),
            config=self.config,
            cycle=self.cycles + 1,
            belief=self.belief,
        )
        stage_ids = None if update_belief else self.registry.below(Layer.BELIEF)
        self.run(ctx, stage_ids)

        if update_belief:
            # Adopt a belief created on the first cycle only once the cycle succeeded.
            self.belief = ctx.belief
            self.cycles = ctx.cycle
        recon = ctx.reconstruction
        belief_state = ctx.belief_state
        if belief_state is None and ctx.belief is not None:
            belief_state = ctx.belief.state
        return CycleResult(
            cycle=ctx.cycle,
            signal=recon.signal,
            confidence=recon.confidence,
            grid_positions=recon.grid.positions,
            threshold=ctx.threshold,
            hotspots=ctx.hotspots,
            zones=ctx.zones,
            path_metrics=ctx.path_metrics,
            belief=belief_state,
            components=recon.components,
            elapsed_ms=ctx.timings_ms.get("total", 0.0),
            pulsed=ctx.pulsed,
        )

    def preview(self, samples: Sequence[SparseSample]) -> CycleResult:
        """Reconstruct and analyse ``samples`` without touching the belief."""
        return self.run_cycle(samples, update_belief=False)

    @property
    def belief_state(self) -> BeliefState | None:
        return self.belief.state if self.belief is not None else None


def create_pipeline(config: PipelineConfig | None = None) -> Pipeline:
    """Factory function for creating a pipeline instance."""
    return Pipeline(config=config)
