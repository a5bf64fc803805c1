"""Sparse-to-dense curvature reconstruction.

Stage 1: Lomb-Scargle periodogram over the irregular samples selects the
dominant frequencies (highest power, lowest frequency on ties).
Stage 2: a weighted least-squares sinusoid fit at those frequencies is
evaluated on the uniform grid; the fit residuals are interpolated onto the
grid, passed through the wavelet smoothing kernel and added back.
Stage 3: per-grid-point confidence from the nearest sample's uncertainty,
its residual, and the distance to it.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray
from scipy.spatial import cKDTree

from curvesight.engine.config import PipelineConfig
from curvesight.errors import InsufficientData, InvalidConfiguration
from curvesight.models.results import FrequencyEstimate, SpectralComponent
from curvesight.models.samples import SparseSample
from curvesight.utils.grid import SignalGrid
from curvesight.utils.spectral import fit_sinusoids, lomb_scargle_parallel, rank_bins
from curvesight.utils.wavelet import dominant_wavelet, wavelet_smooth

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Periodogram:
    """Normalized power per scanned frequency."""

    frequencies: NDArray[np.float64]
    power: NDArray[np.float64]

    def estimates(self) -> list[FrequencyEstimate]:
        return [
            FrequencyEstimate(frequency=float(f), power=float(p))
            for f, p in zip(self.frequencies, self.power)
        ]

    def ranked(self) -> NDArray[np.int64]:
        return rank_bins(self.frequencies, self.power)

    def dominant(self) -> FrequencyEstimate:
        i = int(self.ranked()[0])
        return FrequencyEstimate(frequency=float(self.frequencies[i]), power=float(self.power[i]))


@dataclass(frozen=True, eq=False)
class Reconstruction:
    """Everything one reconstruction call produces."""

    grid: SignalGrid
    signal: NDArray[np.float64]
    confidence: NDArray[np.float64]
    periodogram: Periodogram
    components: list[SpectralComponent] = field(default_factory=list)
    offset: float = 0.0
    residuals: NDArray[np.float64] = field(default_factory=lambda: np.empty(0))
    residual_variance: float = 0.0
    wavelet: str = "haar"

    @property
    def dominant_frequency(self) -> float | None:
        if not self.components:
            return None
        return self.components[0].frequency


class SignalReconstructor:
    """Turns sparse samples into a dense signal on a uniform grid. Stateless."""

    def __init__(self, config: PipelineConfig | None = None) -> None:
        self.config = (config or PipelineConfig()).validate()

    def reconstruct(self, samples: Sequence[SparseSample], grid_size: int) -> NDArray[np.float64]:
        return self.run(samples, grid_size).signal

    def run(self, samples: Sequence[SparseSample], grid_size: int | None = None) -> Reconstruction:
        cfg = self.config
        size = cfg.grid_size if grid_size is None else grid_size
        if size < 2:
            raise InvalidConfiguration(f"grid_size must be >= 2, got {size}")

        t, y, u = self._validated_arrays(samples)
        weights = self._weights(u)
        grid = self._grid(t, size)

        periodogram = self.periodogram(t, y, weights)
        selected = self._select(periodogram, n_distinct=len(np.unique(t)))
        freqs = periodogram.frequencies[selected]

        offset, a, b = fit_sinusoids(t, y, freqs, weights)
        model_at_samples = _evaluate(t, offset, freqs, a, b)
        residuals = y - model_at_samples

        level = cfg.smoothing_kernel_width
        detail = _interpolate_residuals(t, residuals, grid.positions)
        wavelet = cfg.wavelet
        if wavelet == "auto":
            wavelet = dominant_wavelet(detail, max(level, 1))
        smoothed = wavelet_smooth(detail, level, wavelet, cfg.wavelet_threshold_mode)

        signal = _evaluate(grid.positions, offset, freqs, a, b) + smoothed
        signal.flags.writeable = False

        w_norm = weights / np.sum(weights)
        residual_variance = float(np.sum(w_norm * residuals**2))
        confidence = _confidence(t, u, residuals, residual_variance, grid.positions)
        confidence.flags.writeable = False

        components = [
            SpectralComponent(
                frequency=float(periodogram.frequencies[i]),
                power=float(periodogram.power[i]),
                amplitude=float(math.hypot(ak, bk)),
                phase=float(math.atan2(-bk, ak)),
            )
            for i, ak, bk in zip(selected, a, b)
        ]
        logger.debug(
            "Reconstructed %d samples onto %d points: %d components, residual var %.3g, wavelet %s",
            len(t),
            size,
            len(components),
            residual_variance,
            wavelet,
        )
        return Reconstruction(
            grid=grid,
            signal=signal,
            confidence=confidence,
            periodogram=periodogram,
            components=components,
            offset=offset,
            residuals=residuals,
            residual_variance=residual_variance,
            wavelet=wavelet,
        )

    def periodogram(
        self,
        positions: NDArray[np.float64],
        values: NDArray[np.float64],
        weights: NDArray[np.float64] | None = None,
    ) -> Periodogram:
        freqs = self.scan_frequencies(positions)
        power = lomb_scargle_parallel(positions, values, freqs, weights, self.config.scan_workers)
        return Periodogram(frequencies=freqs, power=power)

    def scan_frequencies(self, positions: NDArray[np.float64]) -> NDArray[np.float64]:
        """Evenly spaced scan, endpoints included.

        Default range: 1/span (one full cycle across the samples) to
        0.5/mean spacing (Nyquist-like limit of the average sampling rate).
        """
        cfg = self.config
        if cfg.frequency_scan_range is not None:
            lo, hi = cfg.frequency_scan_range
        else:
            distinct = np.unique(positions)
            span = float(distinct[-1] - distinct[0])
            mean_spacing = span / (len(distinct) - 1)
            lo = 1.0 / span
            hi = max(0.5 / mean_spacing, lo)
        return np.unique(np.linspace(lo, hi, cfg.frequency_scan_steps))

    def _validated_arrays(
        self, samples: Sequence[SparseSample]
    ) -> tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
        cfg = self.config
        if len(samples) < cfg.min_samples_for_reconstruction:
            raise InsufficientData(
                f"Need at least {cfg.min_samples_for_reconstruction} samples, got {len(samples)}"
            )
        t = np.array([s.position for s in samples], dtype=np.float64)
        y = np.array([s.value for s in samples], dtype=np.float64)
        u = np.array([s.uncertainty for s in samples], dtype=np.float64)

        if not (np.all(np.isfinite(t)) and np.all(np.isfinite(y)) and np.all(np.isfinite(u))):
            raise InvalidConfiguration("Sample positions, values and uncertainties must be finite")
        if np.any(u < 0):
            raise InvalidConfiguration("Sample uncertainty must be non-negative")
        if cfg.domain_length is not None and (np.any(t < 0) or np.any(t >= cfg.domain_length)):
            raise InvalidConfiguration(
                f"Sample positions must lie in [0, {cfg.domain_length})"
            )
        if len(np.unique(t)) < 2:
            raise InsufficientData("Need at least 2 distinct sample positions")

        order = np.argsort(t, kind="stable")
        return t[order], y[order], u[order]

    def _weights(self, uncertainty: NDArray[np.float64]) -> NDArray[np.float64]:
        # Inverse-variance only when every sample carries a positive uncertainty.
        if self.config.weight_by_uncertainty and np.all(uncertainty > 0):
            return 1.0 / uncertainty**2
        return np.ones(len(uncertainty))

    def _grid(self, positions: NDArray[np.float64], size: int) -> SignalGrid:
        if self.config.domain_length is not None:
            return SignalGrid.domain(self.config.domain_length, size)
        return SignalGrid.spanning(positions, size)

    def _select(self, periodogram: Periodogram, n_distinct: int) -> NDArray[np.int64]:
        # 2k + 1 parameters must stay determined by the distinct positions.
        k = min(self.config.max_components, (n_distinct - 1) // 2)
        chosen = [int(i) for i in periodogram.ranked()[:k] if periodogram.power[i] > 0.0]
        return np.array(chosen, dtype=np.int64)


def reconstruct(
    samples: Sequence[SparseSample],
    grid_size: int,
    config: PipelineConfig | None = None,
) -> NDArray[np.float64]:
    """Functional entry point: dense signal of exactly ``grid_size`` points."""
    return SignalReconstructor(config).reconstruct(samples, grid_size)


def _evaluate(
    positions: NDArray[np.float64],
    offset: float,
    freqs: NDArray[np.float64],
    a: NDArray[np.float64],
    b: NDArray[np.float64],
) -> NDArray[np.float64]:
    out = np.full(len(positions), offset, dtype=np.float64)
    if len(freqs) == 0:
        return out
    arg = 2.0 * np.pi * positions[:, None] * freqs[None, :]
    return out + np.cos(arg) @ a + np.sin(arg) @ b


def _interpolate_residuals(
    positions: NDArray[np.float64],
    residuals: NDArray[np.float64],
    grid_positions: NDArray[np.float64],
) -> NDArray[np.float64]:
    # Repeated positions average their residuals so the abscissa is increasing.
    xs, inverse = np.unique(positions, return_inverse=True)
    sums = np.bincount(inverse, weights=residuals)
    counts = np.bincount(inverse)
    return np.interp(grid_positions, xs, sums / counts)


def _confidence(
    positions: NDArray[np.float64],
    uncertainty: NDArray[np.float64],
    residuals: NDArray[np.float64],
    residual_variance: float,
    grid_positions: NDArray[np.float64],
) -> NDArray[np.float64]:
    """c = 1 / (1 + v), v = u_j² + r_j² + (d / h)² · s² for nearest sample j."""
    distinct = np.unique(positions)
    h = float(distinct[-1] - distinct[0]) / (len(distinct) - 1)
    tree = cKDTree(positions[:, None])
    dist, nearest = tree.query(grid_positions[:, None])
    variance = (
        uncertainty[nearest] ** 2
        + residuals[nearest] ** 2
        + (dist / h) ** 2 * residual_variance
    )
    return 1.0 / (1.0 + variance)
