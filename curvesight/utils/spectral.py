"""Leaf-node spectral helpers for irregular sampling. No engine imports."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import numpy as np
from numpy.typing import NDArray

# Quadrature terms whose denominator falls below this fraction of the total
# basis energy carry no information (e.g. sin(ωt) ≡ 0 at the Nyquist-like
# frequency of integer sampling) and contribute zero power.
_DEGENERATE_BASIS_RTOL = 1e-10


def lomb_scargle_power(
    positions: NDArray[np.float64],
    values: NDArray[np.float64],
    frequencies: NDArray[np.float64],
    weights: NDArray[np.float64] | None = None,
) -> NDArray[np.float64]:
    """Normalized Lomb-Scargle power at each frequency (cycles per unit position).

    Values are centered on their weighted mean. Power is the fraction of the
    centered sum of squares captured by the best-fit sinusoid, so it lies in
    [0, 1]. A constant series has zero power everywhere.
    """
    t = np.asarray(positions, dtype=np.float64)
    y = np.asarray(values, dtype=np.float64)
    freqs = np.asarray(frequencies, dtype=np.float64)
    if weights is None:
        w = np.full(t.shape, 1.0 / len(t))
    else:
        w = np.asarray(weights, dtype=np.float64)
        w = w / np.sum(w)

    y = y - np.sum(w * y)
    yy = float(np.sum(w * y * y))
    if yy <= 0.0 or len(freqs) == 0:
        return np.zeros(len(freqs))

    omega = 2.0 * np.pi * freqs[:, None]
    two_wt = 2.0 * omega * t[None, :]
    tau = np.arctan2(np.sum(w * np.sin(two_wt), axis=1), np.sum(w * np.cos(two_wt), axis=1))
    tau = tau[:, None] / (2.0 * omega)

    phase = omega * (t[None, :] - tau)
    cos_p = np.cos(phase)
    sin_p = np.sin(phase)

    cc = np.sum(w * cos_p * cos_p, axis=1)
    ss = np.sum(w * sin_p * sin_p, axis=1)
    yc = np.sum(w * y * cos_p, axis=1)
    ys = np.sum(w * y * sin_p, axis=1)

    floor = _DEGENERATE_BASIS_RTOL * (cc + ss)
    with np.errstate(divide="ignore", invalid="ignore"):
        cos_term = np.where(cc > floor, yc * yc / cc, 0.0)
        sin_term = np.where(ss > floor, ys * ys / ss, 0.0)

    power = (cos_term + sin_term) / yy
    return np.clip(power, 0.0, 1.0)


def lomb_scargle_parallel(
    positions: NDArray[np.float64],
    values: NDArray[np.float64],
    frequencies: NDArray[np.float64],
    weights: NDArray[np.float64] | None = None,
    workers: int = 1,
) -> NDArray[np.float64]:
    """Same result as ``lomb_scargle_power``, with the scan split over a thread pool.

    Chunks are contiguous and concatenated in order, so the output does not
    depend on ``workers``.
    """
    if workers <= 1 or len(frequencies) < 2 * workers:
        return lomb_scargle_power(positions, values, frequencies, weights)

    chunks = np.array_split(np.asarray(frequencies, dtype=np.float64), workers)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        parts = list(
            pool.map(lambda chunk: lomb_scargle_power(positions, values, chunk, weights), chunks)
        )
    return np.concatenate(parts)


def rank_bins(frequencies: NDArray[np.float64], power: NDArray[np.float64]) -> NDArray[np.int64]:
    """Bin indices by descending power; equal power prefers the lower frequency."""
    return np.lexsort((frequencies, -power))


def fit_sinusoids(
    positions: NDArray[np.float64],
    values: NDArray[np.float64],
    frequencies: NDArray[np.float64],
    weights: NDArray[np.float64] | None = None,
) -> tuple[float, NDArray[np.float64], NDArray[np.float64]]:
    """Weighted least-squares fit of ``mean + Σ a_k cos(ω_k t) + b_k sin(ω_k t)``.

    Returns (offset, cos coefficients, sin coefficients). Rank-deficient
    columns (a sine sampled only at its zeros) resolve to zero via lstsq's
    minimum-norm solution.
    """
    t = np.asarray(positions, dtype=np.float64)
    y = np.asarray(values, dtype=np.float64)
    design = design_matrix(t, frequencies)
    if weights is None:
        sqrt_w = np.ones(len(t))
    else:
        sqrt_w = np.sqrt(np.asarray(weights, dtype=np.float64))

    beta, *_ = np.linalg.lstsq(design * sqrt_w[:, None], y * sqrt_w, rcond=None)
    k = len(frequencies)
    return float(beta[0]), beta[1 : k + 1], beta[k + 1 :]


def design_matrix(positions: NDArray[np.float64], frequencies: NDArray[np.float64]) -> NDArray[np.float64]:
    """Columns: 1, cos(ω_k t) for each k, sin(ω_k t) for each k."""
    t = np.asarray(positions, dtype=np.float64)
    omega = 2.0 * np.pi * np.asarray(frequencies, dtype=np.float64)
    arg = t[:, None] * omega[None, :]
    return np.hstack([np.ones((len(t), 1)), np.cos(arg), np.sin(arg)])
