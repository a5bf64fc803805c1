"""Output value types: the structured results of a reconstruction cycle."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class FrequencyEstimate(BaseModel):
    model_config = ConfigDict(frozen=True)

    frequency: float
    power: float


class SpectralComponent(BaseModel):
    """A selected periodogram bin with its fitted sinusoid."""

    model_config = ConfigDict(frozen=True)

    frequency: float
    power: float
    amplitude: float = 0.0
    phase: float = 0.0  # radians, cosine convention


class PathMetrics(BaseModel):
    model_config = ConfigDict(frozen=True)

    curvature_path_length: float
    manhattan_length: float
    z_bias_contribution: float


class Trajectory(BaseModel):
    """Planar path traced by treating curvature as a turning rate."""

    model_config = ConfigDict(frozen=True)

    x: list[float] = Field(default_factory=list)
    y: list[float] = Field(default_factory=list)
    heading: list[float] = Field(default_factory=list)
    arc_length: float = 0.0
    chord_manhattan: float = 0.0


class HotspotZone(BaseModel):
    """Contiguous run of hotspot indices (``stop`` inclusive)."""

    model_config = ConfigDict(frozen=True)

    start: int
    stop: int
    peak: int
    peak_value: float
    start_position: float = 0.0
    stop_position: float = 0.0

    @property
    def width(self) -> int:
        return self.stop - self.start + 1


class BeliefState(BaseModel):
    """Snapshot of the Bayesian threshold/confidence belief."""

    model_config = ConfigDict(frozen=True)

    threshold_mean: float
    threshold_variance: float
    signal_confidence: list[float] = Field(default_factory=list)
    updates: int = 0

    @property
    def threshold_std(self) -> float:
        return self.threshold_variance**0.5
