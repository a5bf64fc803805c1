"""Shared test fixtures."""

from __future__ import annotations

import numpy as np
import pytest

from curvesight.models.samples import SparseSample

# Alternating sign at unit spacing: period 2, frequency 0.5.
ALTERNATING_ROWS = [(0.0, 1.0, 0.1), (1.0, -1.0, 0.1), (2.0, 1.0, 0.1), (3.0, -1.0, 0.1)]

# Pure cosine at 0.25 cycles per unit, irregularly sampled.
SINUSOID_FREQUENCY = 0.25


def make_samples(rows: list[tuple[float, ...]]) -> list[SparseSample]:
    return [SparseSample.from_tuple(r) for r in rows]


def sinusoid_samples(n: int = 40, span: float = 20.0, seed: int = 7) -> list[SparseSample]:
    rng = np.random.default_rng(seed)
    t = np.sort(rng.uniform(0.0, span, n))
    y = np.cos(2 * np.pi * SINUSOID_FREQUENCY * t)
    return [SparseSample(position=float(a), value=float(b), uncertainty=0.05) for a, b in zip(t, y)]


def noisy_samples(n: int = 30, span: float = 10.0, seed: int = 11) -> list[SparseSample]:
    rng = np.random.default_rng(seed)
    t = np.sort(rng.uniform(0.0, span, n))
    y = np.sin(2 * np.pi * 0.3 * t) + 0.5 * np.exp(-((t - 6.0) ** 2)) + rng.normal(0.0, 0.1, n)
    return [SparseSample(position=float(a), value=float(b), uncertainty=0.1) for a, b in zip(t, y)]


@pytest.fixture
def alternating_samples() -> list[SparseSample]:
    return make_samples(ALTERNATING_ROWS)


@pytest.fixture
def sinusoid() -> list[SparseSample]:
    return sinusoid_samples()


@pytest.fixture
def noisy() -> list[SparseSample]:
    return noisy_samples()
