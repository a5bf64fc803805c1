"""CycleContext: the mutable state object flowing through one reconstruction cycle.

Inputs (samples, priors, config, belief) are set by the pipeline; each stage
fills in its own outputs. The BeliefTensor is owned by the pipeline and
outlives the context.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from curvesight.engine.config import PipelineConfig
from curvesight.models.results import BeliefState, HotspotZone, PathMetrics
from curvesight.models.samples import SparseSample

if TYPE_CHECKING:
    from curvesight.engine.belief import BeliefTensor, ConstraintSource
    from curvesight.engine.reconstruction import Reconstruction


@dataclass
class CycleContext:
    samples: list[SparseSample] = field(default_factory=list)
    priors: list[ConstraintSource] = field(default_factory=list)
    config: PipelineConfig = field(default_factory=PipelineConfig)
    cycle: int = 0
    # Belief carried over from the previous cycle (None before the first one)
    belief: BeliefTensor | None = None

    # --- S0: reconstruction ---
    reconstruction: Reconstruction | None = None

    # --- S1: analysis ---
    threshold: float | None = None
    hotspots: list[int] = field(default_factory=list)
    zones: list[HotspotZone] = field(default_factory=list)
    path_metrics: PathMetrics | None = None

    # --- S2: belief ---
    belief_state: BeliefState | None = None
    pulsed: bool = False

    # --- Pipeline metadata ---
    completed_stages: set[str] = field(default_factory=set)
    errors: dict[str, str] = field(default_factory=dict)
    timings_ms: dict[str, float] = field(default_factory=dict)

    @property
    def signal(self) -> NDArray[np.float64]:
        if self.reconstruction is None:
            raise RuntimeError("Reconstruction stage has not run")
        return self.reconstruction.signal

    @property
    def confidence(self) -> NDArray[np.float64]:
        if self.reconstruction is None:
            raise RuntimeError("Reconstruction stage has not run")
        return self.reconstruction.confidence
