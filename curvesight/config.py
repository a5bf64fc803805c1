"""Runtime settings from environment variables (CURVESIGHT_*) and .env."""

from __future__ import annotations

from dataclasses import fields

from pydantic_settings import BaseSettings

from curvesight.engine.config import PipelineConfig


class Settings(BaseSettings):
    log_level: str = "info"

    # Engine overrides; None keeps the PipelineConfig default
    grid_size: int | None = None
    domain_length: float | None = None
    min_samples_for_reconstruction: int | None = None
    frequency_scan_steps: int | None = None
    # JSON pair in the environment, e.g. CURVESIGHT_FREQUENCY_SCAN_RANGE='[0.05, 0.5]'
    frequency_scan_range: tuple[float, float] | None = None
    max_components: int | None = None
    weight_by_uncertainty: bool | None = None
    scan_workers: int | None = None
    smoothing_kernel_width: int | None = None
    wavelet: str | None = None
    wavelet_threshold_mode: str | None = None
    threshold_mode: str | None = None
    hotspot_percentile: float | None = None
    z_bias_factor: float | None = None
    initial_threshold_prior_mean: float | None = None
    initial_threshold_prior_variance: float | None = None
    initial_threshold_percentile: float | None = None
    initial_signal_confidence: float | None = None
    min_threshold_variance: float | None = None
    entropy_pulse_threshold: float | None = None
    entropy_pulse_contraction: float | None = None

    model_config = {"env_prefix": "CURVESIGHT_", "env_file": ".env", "env_file_encoding": "utf-8"}

    def pipeline_config(self) -> PipelineConfig:
        """PipelineConfig with every set override applied, validated."""
        names = {f.name for f in fields(PipelineConfig)}
        overrides = {
            k: v for k, v in self.model_dump().items() if k in names and v is not None
        }
        return PipelineConfig(**overrides).validate()


settings = Settings()
