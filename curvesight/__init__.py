"""CurveSight: sparse curvature reconstruction, hotspot detection and threshold belief."""

from curvesight.engine import (
    BeliefTensor,
    HotspotDetector,
    PathEvaluator,
    Pipeline,
    PipelineConfig,
    SignalReconstructor,
    create_pipeline,
)
from curvesight.errors import (
    CurvatureError,
    DegenerateSignal,
    InsufficientData,
    InvalidConfiguration,
    InvalidPrior,
    ResolutionMismatch,
)
from curvesight.models.results import BeliefState, FrequencyEstimate, PathMetrics
from curvesight.models.samples import PriorConstraint, SparseSample

__version__ = "0.1.0"

__all__ = [
    "BeliefState",
    "BeliefTensor",
    "CurvatureError",
    "DegenerateSignal",
    "FrequencyEstimate",
    "HotspotDetector",
    "InsufficientData",
    "InvalidConfiguration",
    "InvalidPrior",
    "PathEvaluator",
    "PathMetrics",
    "Pipeline",
    "PipelineConfig",
    "PriorConstraint",
    "ResolutionMismatch",
    "SignalReconstructor",
    "SparseSample",
    "create_pipeline",
]
