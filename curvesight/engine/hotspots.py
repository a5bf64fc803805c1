"""Hotspot detection: grid points whose curvature strictly exceeds a threshold.

The threshold comes from one of two sources, modelled as a tagged variant:
  PercentileThreshold: percentile of the signal's own distribution
  BeliefThreshold:     threshold_mean of the current BeliefState
Ties at exactly the threshold are never hotspots.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

import numpy as np
from numpy.typing import NDArray
from scipy import ndimage

from curvesight.errors import DegenerateSignal, InvalidConfiguration
from curvesight.models.results import BeliefState, HotspotZone
from curvesight.utils.grid import SignalGrid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PercentileThreshold:
    percentile: float = 90.0

    def __post_init__(self) -> None:
        if not (0.0 <= self.percentile <= 100.0):
            raise InvalidConfiguration(f"percentile must be in [0, 100], got {self.percentile}")


@dataclass(frozen=True)
class BeliefThreshold:
    """Confidence-adjusted mode: use the belief's threshold_mean as-is."""


ThresholdSource = Union[PercentileThreshold, BeliefThreshold]


def detect(signal: NDArray[np.float64], threshold: float) -> list[int]:
    """Ascending indices whose value is strictly greater than ``threshold``.

    A flat signal carries no anomaly: it yields no hotspots for any threshold.
    """
    values = _as_signal(signal)
    if np.all(values == values[0]):
        return []
    return [int(i) for i in np.flatnonzero(values > threshold)]


def percentile_threshold(signal: NDArray[np.float64], percentile: float) -> float:
    return float(np.percentile(_as_signal(signal), percentile))


class HotspotDetector:
    """Resolves the active threshold from its source, then applies ``detect``."""

    def __init__(self, source: ThresholdSource | None = None) -> None:
        self.source = source if source is not None else PercentileThreshold()

    def threshold_for(self, signal: NDArray[np.float64], belief: BeliefState | None = None) -> float:
        if isinstance(self.source, PercentileThreshold):
            return percentile_threshold(signal, self.source.percentile)
        if belief is None:
            raise InvalidConfiguration("Belief threshold mode needs a BeliefState")
        return belief.threshold_mean

    def detect(
        self, signal: NDArray[np.float64], belief: BeliefState | None = None
    ) -> tuple[float, list[int]]:
        """Return (threshold used, hotspot indices)."""
        values = _as_signal(signal)
        threshold = self.threshold_for(values, belief)
        hotspots = detect(values, threshold)
        logger.debug(
            "Detected %d/%d hotspots above %.4g (%s)",
            len(hotspots),
            len(values),
            threshold,
            type(self.source).__name__,
        )
        return threshold, hotspots


def hotspot_zones(
    signal: NDArray[np.float64],
    indices: list[int],
    grid: SignalGrid | None = None,
) -> list[HotspotZone]:
    """Group contiguous hotspot indices into zones, each with its peak."""
    values = _as_signal(signal)
    if not indices:
        return []
    mask = np.zeros(len(values), dtype=bool)
    mask[indices] = True
    labels, _ = ndimage.label(mask)

    zones: list[HotspotZone] = []
    for sl in ndimage.find_objects(labels):
        start, stop = sl[0].start, sl[0].stop - 1
        peak = start + int(np.argmax(values[start : stop + 1]))
        zones.append(
            HotspotZone(
                start=start,
                stop=stop,
                peak=peak,
                peak_value=float(values[peak]),
                start_position=grid.position_of(start) if grid is not None else float(start),
                stop_position=grid.position_of(stop) if grid is not None else float(stop),
            )
        )
    return zones


def _as_signal(signal: NDArray[np.float64]) -> NDArray[np.float64]:
    values = np.asarray(signal, dtype=np.float64)
    if values.ndim != 1 or len(values) == 0:
        raise DegenerateSignal("Hotspot detection needs a non-empty 1-D signal")
    return values
