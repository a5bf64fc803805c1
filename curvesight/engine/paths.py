"""Path evaluation: curvature as a z-axis displacement along the grid.

Each grid step has unit flat length; curvature κ at the step's left point
lifts it by z_bias_factor·κ, so the step length becomes sqrt(1 + (z·κ)²).
A flat signal reduces to the Manhattan baseline of N - 1 steps.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from curvesight.errors import DegenerateSignal, InvalidConfiguration
from curvesight.models.results import PathMetrics, Trajectory


class PathEvaluator:
    def __init__(self, z_bias_factor: float = 1.0) -> None:
        if not (np.isfinite(z_bias_factor) and z_bias_factor >= 0):
            raise InvalidConfiguration(f"z_bias_factor must be >= 0, got {z_bias_factor}")
        self.z_bias_factor = float(z_bias_factor)

    def evaluate(self, signal: NDArray[np.float64]) -> PathMetrics:
        kappa = _as_path(signal)
        manhattan = float(len(kappa) - 1)
        steps = np.hypot(1.0, self.z_bias_factor * kappa[:-1])
        curved = float(np.sum(steps))
        return PathMetrics(
            curvature_path_length=curved,
            manhattan_length=manhattan,
            z_bias_contribution=curved - manhattan,
        )

    def trace(self, signal: NDArray[np.float64], dt: float = 1.0) -> Trajectory:
        return trace_trajectory(signal, dt)


def evaluate(signal: NDArray[np.float64], z_bias_factor: float = 1.0) -> PathMetrics:
    return PathEvaluator(z_bias_factor).evaluate(signal)


def trace_trajectory(signal: NDArray[np.float64], dt: float = 1.0) -> Trajectory:
    """Integrate curvature as a turning rate into a planar path.

    heading θ += κ·dt, then x += cos θ·dt, y += sin θ·dt at every sample.
    Zero curvature traces a straight line along +x. The path starts at the
    origin, which is not among the returned points; ``arc_length`` and
    ``chord_manhattan`` both measure the N steps from there.
    """
    kappa = _as_path(signal)
    if not dt > 0:
        raise InvalidConfiguration(f"dt must be positive, got {dt}")

    heading = np.cumsum(kappa * dt)
    x = np.cumsum(np.cos(heading) * dt)
    y = np.cumsum(np.sin(heading) * dt)
    return Trajectory(
        x=x.tolist(),
        y=y.tolist(),
        heading=heading.tolist(),
        arc_length=float(len(kappa) * dt),
        chord_manhattan=float(abs(x[-1]) + abs(y[-1])),
    )


def _as_path(signal: NDArray[np.float64]) -> NDArray[np.float64]:
    kappa = np.asarray(signal, dtype=np.float64)
    if kappa.ndim != 1 or len(kappa) < 2:
        raise DegenerateSignal("A path needs at least 2 grid points")
    return kappa
