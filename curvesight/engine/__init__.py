"""CurveSight curvature engine."""

from curvesight.engine.belief import BeliefTensor, ConstraintSource, EntropyPulse, PercentileBandSource
from curvesight.engine.config import PipelineConfig
from curvesight.engine.context import CycleContext
from curvesight.engine.hotspots import BeliefThreshold, HotspotDetector, PercentileThreshold, detect
from curvesight.engine.paths import PathEvaluator, evaluate, trace_trajectory
from curvesight.engine.pipeline import CycleResult, Pipeline, create_pipeline
from curvesight.engine.reconstruction import Reconstruction, SignalReconstructor, reconstruct
from curvesight.engine.registry import Layer, get_registry, stage

__all__ = [
    "BeliefTensor",
    "BeliefThreshold",
    "ConstraintSource",
    "CycleContext",
    "CycleResult",
    "EntropyPulse",
    "HotspotDetector",
    "Layer",
    "PathEvaluator",
    "PercentileBandSource",
    "PercentileThreshold",
    "Pipeline",
    "PipelineConfig",
    "Reconstruction",
    "SignalReconstructor",
    "create_pipeline",
    "detect",
    "evaluate",
    "get_registry",
    "reconstruct",
    "stage",
    "trace_trajectory",
]
