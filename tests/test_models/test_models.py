"""Tests for value types, engine config and environment settings."""

import pydantic
import pytest

from curvesight.config import Settings
from curvesight.engine.config import PipelineConfig
from curvesight.errors import CurvatureError, InvalidConfiguration, InvalidPrior, ResolutionMismatch
from curvesight.models.results import BeliefState, HotspotZone
from curvesight.models.samples import PriorConstraint, SparseSample


def test_sample_from_tuple():
    assert SparseSample.from_tuple((1.0, 2.0)) == SparseSample(position=1.0, value=2.0)
    s = SparseSample.from_tuple((1.0, 2.0, 0.3))
    assert s.uncertainty == 0.3


def test_sample_is_frozen():
    s = SparseSample(position=0.0, value=1.0)
    with pytest.raises(pydantic.ValidationError):
        s.value = 2.0


def test_prior_constraint_bounds():
    c = PriorConstraint(lower=1.0, upper=2.0)
    assert c.weight == 1.0
    assert c.contains(1.5)
    assert not c.contains(2.5)
    assert c.nearest_bound(0.0) == 1.0
    assert c.nearest_bound(3.0) == 2.0
    assert c.nearest_bound(1.2) == 1.2


def test_zone_width_is_inclusive():
    zone = HotspotZone(start=3, stop=5, peak=4, peak_value=1.0)
    assert zone.width == 3


def test_belief_state_std():
    assert BeliefState(threshold_mean=0.0, threshold_variance=4.0).threshold_std == 2.0


def test_error_hierarchy():
    assert issubclass(InvalidPrior, InvalidConfiguration)
    assert issubclass(ResolutionMismatch, InvalidConfiguration)
    assert issubclass(InvalidConfiguration, CurvatureError)
    assert issubclass(CurvatureError, ValueError)


def test_default_config_is_valid():
    cfg = PipelineConfig()
    assert cfg.validate() is cfg


@pytest.mark.parametrize(
    "overrides",
    [
        {"grid_size": 1},
        {"domain_length": 0.0},
        {"min_samples_for_reconstruction": 1},
        {"frequency_scan_range": (0.5, 0.1)},
        {"scan_workers": 0},
        {"smoothing_kernel_width": -1},
        {"threshold_mode": "median"},
        {"wavelet_threshold_mode": "garrote-ish"},
        {"hotspot_percentile": 101.0},
        {"z_bias_factor": -0.5},
        {"initial_signal_confidence": 1.0},
        {"min_threshold_variance": 0.0},
        {"entropy_pulse_contraction": 0.0},
        {"entropy_pulse_threshold": float("inf")},
    ],
)
def test_invalid_config(overrides):
    with pytest.raises(InvalidConfiguration):
        PipelineConfig(**overrides).validate()


def test_settings_defaults_keep_engine_defaults():
    cfg = Settings(_env_file=None).pipeline_config()
    assert cfg == PipelineConfig()


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("CURVESIGHT_GRID_SIZE", "64")
    monkeypatch.setenv("CURVESIGHT_THRESHOLD_MODE", "belief")
    cfg = Settings(_env_file=None).pipeline_config()
    assert cfg.grid_size == 64
    assert cfg.threshold_mode == "belief"


def test_settings_invalid_override(monkeypatch):
    monkeypatch.setenv("CURVESIGHT_HOTSPOT_PERCENTILE", "150")
    with pytest.raises(InvalidConfiguration):
        Settings(_env_file=None).pipeline_config()


def test_settings_cover_every_engine_option():
    engine_options = set(PipelineConfig.__dataclass_fields__)
    assert engine_options <= set(Settings.model_fields)


def test_settings_parse_structured_options(monkeypatch):
    monkeypatch.setenv("CURVESIGHT_FREQUENCY_SCAN_RANGE", "[0.05, 0.5]")
    monkeypatch.setenv("CURVESIGHT_WEIGHT_BY_UNCERTAINTY", "false")
    monkeypatch.setenv("CURVESIGHT_WAVELET_THRESHOLD_MODE", "soft")
    monkeypatch.setenv("CURVESIGHT_INITIAL_THRESHOLD_PERCENTILE", "75")
    monkeypatch.setenv("CURVESIGHT_INITIAL_SIGNAL_CONFIDENCE", "0.25")
    cfg = Settings(_env_file=None).pipeline_config()
    assert cfg.frequency_scan_range == (0.05, 0.5)
    assert cfg.weight_by_uncertainty is False
    assert cfg.wavelet_threshold_mode == "soft"
    assert cfg.initial_threshold_percentile == 75.0
    assert cfg.initial_signal_confidence == 0.25
