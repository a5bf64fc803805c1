"""Tests for the periodogram and wavelet helpers."""

import numpy as np
import pytest

from curvesight.utils.spectral import fit_sinusoids, lomb_scargle_power, rank_bins
from curvesight.utils.wavelet import (
    coefficient_entropy,
    dominant_wavelet,
    max_level,
    score_wavelet,
    wavelet_smooth,
)


def test_nyquist_sampling_does_not_produce_nan():
    t = np.array([0.0, 1.0, 2.0, 3.0])
    y = np.array([1.0, -1.0, 1.0, -1.0])
    power = lomb_scargle_power(t, y, np.array([0.25, 0.5]))
    assert np.all(np.isfinite(power))
    assert power[1] == pytest.approx(1.0)


def test_constant_series_has_no_power():
    t = np.array([0.0, 0.7, 1.9, 3.2])
    power = lomb_scargle_power(t, np.full(4, 3.0), np.linspace(0.1, 0.5, 5))
    assert np.all(power == 0.0)


def test_weights_do_not_change_uniform_result():
    rng = np.random.default_rng(3)
    t = np.sort(rng.uniform(0, 10, 25))
    y = np.sin(2 * np.pi * 0.2 * t)
    freqs = np.linspace(0.1, 1.0, 50)
    np.testing.assert_allclose(
        lomb_scargle_power(t, y, freqs),
        lomb_scargle_power(t, y, freqs, np.full(25, 4.0)),
    )


def test_rank_prefers_lower_frequency_on_ties():
    freqs = np.array([0.1, 0.2, 0.3, 0.4])
    power = np.array([0.5, 0.9, 0.9, 0.1])
    assert list(rank_bins(freqs, power)) == [1, 2, 0, 3]


def test_fit_recovers_amplitude_and_offset():
    t = np.linspace(0, 10, 37)
    y = 0.5 + 2.0 * np.cos(2 * np.pi * 0.3 * t) - 1.0 * np.sin(2 * np.pi * 0.3 * t)
    offset, a, b = fit_sinusoids(t, y, np.array([0.3]))
    assert offset == pytest.approx(0.5)
    assert a[0] == pytest.approx(2.0)
    assert b[0] == pytest.approx(-1.0)


def test_coefficient_entropy_bounds():
    assert coefficient_entropy(np.array([0.0, 0.0])) == 0.0
    assert coefficient_entropy(np.array([5.0, 0.0, 0.0])) == 0.0
    assert coefficient_entropy(np.ones(4)) == pytest.approx(2.0)


def test_sparse_signal_scores_higher():
    step = np.repeat([1.0, -1.0], 16)
    rng = np.random.default_rng(5)
    noise = rng.normal(size=32)
    assert score_wavelet(step, "haar", 3) > score_wavelet(noise, "haar", 3)


def test_dominant_wavelet_for_step_is_haar():
    step = np.repeat([0.0, 1.0, 0.0, 1.0], 8)
    assert dominant_wavelet(step, 3) == "haar"


def test_zero_level_smoothing_is_identity():
    x = np.array([0.1, 2.0, -1.0, 0.5])
    out = wavelet_smooth(x, 0)
    assert np.array_equal(out, x)
    assert out is not x


def test_smoothing_preserves_length_and_suppresses_spike():
    x = np.zeros(64)
    x[::2] = 0.05
    x[31] = 0.02
    out = wavelet_smooth(x, 3)
    assert out.shape == x.shape
    # Alternating fine-scale texture is all detail; shrinkage flattens it.
    assert np.ptp(out) <= np.ptp(x)


def test_max_level():
    assert max_level(1, "haar") == 0
    assert max_level(8, "haar") == 3
