"""Pipeline configuration: controls reconstruction, detection and belief behavior."""

from __future__ import annotations

import math
from dataclasses import dataclass

from curvesight.errors import InvalidConfiguration

THRESHOLD_MODES = ("percentile", "belief")
WAVELET_THRESHOLD_MODES = ("hard", "soft")


@dataclass
class PipelineConfig:
    """All recognized engine options with their defaults."""

    # Dense grid resolution
    grid_size: int = 128
    # Fixed domain [0, L); None = closed span of the samples
    domain_length: float | None = None

    # Periodogram
    min_samples_for_reconstruction: int = 3
    frequency_scan_steps: int = 200
    frequency_scan_range: tuple[float, float] | None = None  # None = 1/span .. 0.5/mean spacing
    max_components: int = 3
    weight_by_uncertainty: bool = True
    scan_workers: int = 1

    # Wavelet smoothing of the residual detail
    smoothing_kernel_width: int = 2
    wavelet: str = "haar"  # or "auto" for entropy-based selection
    wavelet_threshold_mode: str = "hard"

    # Hotspot detection
    threshold_mode: str = "percentile"  # "percentile" | "belief"
    hotspot_percentile: float = 90.0

    # Path evaluation
    z_bias_factor: float = 1.0

    # Belief
    initial_threshold_prior_mean: float | None = None  # None = calibrate from first signal
    initial_threshold_prior_variance: float = 1.0
    initial_threshold_percentile: float = 90.0
    initial_signal_confidence: float = 0.5
    min_threshold_variance: float = 1e-4

    # Coherence pulse after each belief update; None = never
    entropy_pulse_threshold: float | None = None
    entropy_pulse_contraction: float = 0.5

    def validate(self) -> PipelineConfig:
        """Raise InvalidConfiguration on the first bad option; return self."""
        if self.grid_size < 2:
            raise InvalidConfiguration(f"grid_size must be >= 2, got {self.grid_size}")
        if self.domain_length is not None and not (
            math.isfinite(self.domain_length) and self.domain_length > 0
        ):
            raise InvalidConfiguration(f"domain_length must be positive, got {self.domain_length}")
        if self.min_samples_for_reconstruction < 2:
            raise InvalidConfiguration(
                f"min_samples_for_reconstruction must be >= 2, got {self.min_samples_for_reconstruction}"
            )
        if self.frequency_scan_steps < 1:
            raise InvalidConfiguration(
                f"frequency_scan_steps must be >= 1, got {self.frequency_scan_steps}"
            )
        if self.frequency_scan_range is not None:
            lo, hi = self.frequency_scan_range
            if not (0 < lo <= hi and math.isfinite(hi)):
                raise InvalidConfiguration(
                    f"frequency_scan_range must satisfy 0 < low <= high, got {self.frequency_scan_range}"
                )
        if self.max_components < 0:
            raise InvalidConfiguration(f"max_components must be >= 0, got {self.max_components}")
        if self.scan_workers < 1:
            raise InvalidConfiguration(f"scan_workers must be >= 1, got {self.scan_workers}")
        if self.smoothing_kernel_width < 0:
            raise InvalidConfiguration(
                f"smoothing_kernel_width must be >= 0, got {self.smoothing_kernel_width}"
            )
        if self.wavelet_threshold_mode not in WAVELET_THRESHOLD_MODES:
            raise InvalidConfiguration(f"Unknown wavelet_threshold_mode: {self.wavelet_threshold_mode}")
        if self.threshold_mode not in THRESHOLD_MODES:
            raise InvalidConfiguration(f"Unknown threshold_mode: {self.threshold_mode}")
        _check_percentile("hotspot_percentile", self.hotspot_percentile)
        _check_percentile("initial_threshold_percentile", self.initial_threshold_percentile)
        if not (math.isfinite(self.z_bias_factor) and self.z_bias_factor >= 0):
            raise InvalidConfiguration(f"z_bias_factor must be >= 0, got {self.z_bias_factor}")
        if not (0 < self.initial_signal_confidence < 1):
            raise InvalidConfiguration(
                f"initial_signal_confidence must be in (0, 1), got {self.initial_signal_confidence}"
            )
        if not self.min_threshold_variance > 0:
            raise InvalidConfiguration(
                f"min_threshold_variance must be positive, got {self.min_threshold_variance}"
            )
        if not self.initial_threshold_prior_variance > 0:
            raise InvalidConfiguration(
                "initial_threshold_prior_variance must be positive, "
                f"got {self.initial_threshold_prior_variance}"
            )
        if self.entropy_pulse_threshold is not None and not math.isfinite(self.entropy_pulse_threshold):
            raise InvalidConfiguration(
                f"entropy_pulse_threshold must be finite, got {self.entropy_pulse_threshold}"
            )
        if not (0 < self.entropy_pulse_contraction <= 1):
            raise InvalidConfiguration(
                f"entropy_pulse_contraction must be in (0, 1], got {self.entropy_pulse_contraction}"
            )
        return self


def _check_percentile(name: str, value: float) -> None:
    if not (0.0 <= value <= 100.0):
        raise InvalidConfiguration(f"{name} must be in [0, 100], got {value}")
