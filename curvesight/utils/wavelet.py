"""Wavelet smoothing kernel and entropy-based basis selection. No engine imports.

The kernel width is the decomposition depth: each extra level doubles the
support of the coarsest basis function, so detail below that scale is shrunk
toward zero (smoother, lower resolution).
"""

from __future__ import annotations

import numpy as np
import pywt
from numpy.typing import NDArray

# Candidate bases for ``wavelet="auto"``, in tie-break order.
CANDIDATE_WAVELETS: tuple[str, ...] = ("haar", "db2", "db4", "sym4", "bior2.2")
# MAD → σ for Gaussian noise.
_MAD_TO_SIGMA = 0.6745
# Keeps 1/H finite for a single-coefficient (zero entropy) decomposition.
_ENTROPY_EPSILON = 1e-6


def max_level(length: int, wavelet: str) -> int:
    """Deepest useful decomposition level for a series of ``length`` samples."""
    if length < 2:
        return 0
    return int(pywt.dwt_max_level(length, pywt.Wavelet(wavelet).dec_len))


def coefficient_entropy(coeffs: NDArray[np.float64]) -> float:
    """Shannon entropy (bits) of the normalized coefficient magnitudes."""
    mags = np.abs(np.asarray(coeffs, dtype=np.float64))
    norm = float(np.sum(mags))
    if norm == 0.0:
        return 0.0
    p = mags[mags > 0] / norm
    return float(-np.sum(p * np.log2(p)))


def score_wavelet(values: NDArray[np.float64], wavelet: str, level: int) -> float:
    """Sparsity score 1/(H + ε): compact decompositions score higher."""
    level = min(level, max_level(len(values), wavelet))
    if level <= 0:
        return 1.0 / _ENTROPY_EPSILON
    coeffs = pywt.wavedec(np.asarray(values, dtype=np.float64), wavelet, level=level)
    return 1.0 / (coefficient_entropy(np.concatenate(coeffs)) + _ENTROPY_EPSILON)


def dominant_wavelet(
    values: NDArray[np.float64],
    level: int,
    candidates: tuple[str, ...] = CANDIDATE_WAVELETS,
) -> str:
    """Basis giving the sparsest decomposition of ``values``."""
    best = candidates[0]
    best_score = -np.inf
    for name in candidates:
        score = score_wavelet(values, name, level)
        if score > best_score:
            best, best_score = name, score
    return best


def wavelet_smooth(
    values: NDArray[np.float64],
    level: int,
    wavelet: str = "haar",
    mode: str = "hard",
) -> NDArray[np.float64]:
    """Multi-level DWT with universal-threshold shrinkage of detail coefficients.

    ``level`` <= 0 returns a copy of the input unchanged.
    """
    data = np.asarray(values, dtype=np.float64)
    n = len(data)
    level = min(level, max_level(n, wavelet))
    if level <= 0:
        return data.copy()

    coeffs = pywt.wavedec(data, wavelet, level=level)
    sigma = float(np.median(np.abs(coeffs[-1]))) / _MAD_TO_SIGMA
    threshold = sigma * np.sqrt(2.0 * np.log(n))

    shrunk = [coeffs[0]]
    for detail in coeffs[1:]:
        shrunk.append(pywt.threshold(detail, threshold, mode=mode))
    return pywt.waverec(shrunk, wavelet)[:n]
