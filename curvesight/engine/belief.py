"""BeliefTensor: Bayesian state for the hotspot threshold and per-point confidence.

Two evidence channels drive ``update``:
  1. Reconstruction confidence (internal). Confidence c maps to a predictive
     variance v = 1/c - 1. The threshold belief takes a Gaussian conjugate
     step whose evidence precision is the mean per-point precision 1/v
     (zero where c = 0); each grid point fuses its own precision, so
     confidence never decreases.
  2. Prior constraints (external). A constraint whose interval excludes the
     mean pulls it toward the nearest bound by weight·distance; several
     pulls combine by weight-weighted average. The squared shift is added to
     the variance.
Variance is floored at ``min_threshold_variance``.

The belief is explicit state owned by one pipeline run. It is not safe to
share across concurrent runs.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Iterator, Sequence
from typing import Protocol, runtime_checkable

import numpy as np
from numpy.typing import NDArray

from curvesight.engine.config import PipelineConfig
from curvesight.errors import InvalidConfiguration, InvalidPrior, ResolutionMismatch
from curvesight.models.results import BeliefState
from curvesight.models.samples import PriorConstraint

logger = logging.getLogger(__name__)

# Confidence of exactly 1 would mean infinite precision.
_MAX_CONFIDENCE = 1.0 - 1e-12
# Caps evidence precision at 1 / this variance.
_MIN_EVIDENCE_VARIANCE = 1e-12


@runtime_checkable
class ConstraintSource(Protocol):
    """Anything that can produce soft (lower, upper, weight) bounds."""

    def constraints(self) -> Iterable[PriorConstraint]: ...


class PercentileBandSource:
    """Band between two percentiles of a reference signal."""

    def __init__(
        self,
        reference: NDArray[np.float64],
        low: float = 75.0,
        high: float = 97.5,
        weight: float = 0.5,
    ) -> None:
        self.reference = np.asarray(reference, dtype=np.float64)
        self.low = low
        self.high = high
        self.weight = weight

    def constraints(self) -> Iterator[PriorConstraint]:
        lo, hi = np.percentile(self.reference, [self.low, self.high])
        yield PriorConstraint(lower=float(lo), upper=float(hi), weight=self.weight)


def collect_constraints(sources: Iterable[ConstraintSource]) -> list[PriorConstraint]:
    """Flatten sources and validate every constraint."""
    out: list[PriorConstraint] = []
    for source in sources:
        for c in source.constraints():
            if not (math.isfinite(c.lower) and math.isfinite(c.upper)):
                raise InvalidPrior(f"Constraint bounds must be finite, got [{c.lower}, {c.upper}]")
            if c.lower > c.upper:
                raise InvalidPrior(f"Constraint lower bound {c.lower} exceeds upper bound {c.upper}")
            if not (math.isfinite(c.weight) and 0.0 <= c.weight <= 1.0):
                raise InvalidPrior(f"Constraint weight must be in [0, 1], got {c.weight}")
            out.append(c)
    return out


def confidence_to_variance(confidence: NDArray[np.float64]) -> NDArray[np.float64]:
    c = np.clip(confidence, 0.0, _MAX_CONFIDENCE)
    with np.errstate(divide="ignore"):
        return np.where(c > 0, 1.0 / c - 1.0, np.inf)


class BeliefTensor:
    """Gaussian belief over the threshold plus per-point signal confidence."""

    def __init__(
        self,
        grid_size: int,
        config: PipelineConfig | None = None,
        calibration_signal: NDArray[np.float64] | None = None,
    ) -> None:
        self.config = (config or PipelineConfig()).validate()
        if grid_size < 2:
            raise InvalidConfiguration(f"grid_size must be >= 2, got {grid_size}")
        self.grid_size = grid_size

        cfg = self.config
        if cfg.initial_threshold_prior_mean is not None:
            mean = float(cfg.initial_threshold_prior_mean)
        elif calibration_signal is not None:
            mean = float(np.percentile(calibration_signal, cfg.initial_threshold_percentile))
        else:
            mean = 0.0
        if not math.isfinite(mean):
            raise InvalidConfiguration(f"Initial threshold mean must be finite, got {mean}")

        self._mean = mean
        self._variance = max(cfg.initial_threshold_prior_variance, cfg.min_threshold_variance)
        self._confidence = np.full(grid_size, cfg.initial_signal_confidence, dtype=np.float64)
        self._updates = 0

    @property
    def state(self) -> BeliefState:
        return BeliefState(
            threshold_mean=self._mean,
            threshold_variance=self._variance,
            signal_confidence=self._confidence.tolist(),
            updates=self._updates,
        )

    @property
    def threshold(self) -> float:
        return self._mean

    @property
    def variance(self) -> float:
        return self._variance

    def entropy(self) -> float:
        """Differential entropy of the Gaussian threshold belief (nats)."""
        return 0.5 * math.log(2.0 * math.pi * math.e * self._variance)

    def update(
        self,
        reconstruction_confidence: Sequence[float] | NDArray[np.float64],
        priors: Iterable[ConstraintSource] = (),
        signal: NDArray[np.float64] | None = None,
    ) -> BeliefState:
        """One belief step. Validates everything before mutating anything."""
        cfg = self.config
        conf = np.asarray(reconstruction_confidence, dtype=np.float64)
        if conf.shape != (self.grid_size,):
            raise ResolutionMismatch(
                f"Expected {self.grid_size} confidence values, got {conf.shape[0] if conf.ndim else 0}"
            )
        if not np.all(np.isfinite(conf)) or np.any(conf < 0) or np.any(conf > 1):
            raise InvalidConfiguration("Reconstruction confidence must lie in [0, 1]")
        if signal is not None:
            signal = np.asarray(signal, dtype=np.float64)
            if signal.shape != (self.grid_size,):
                raise ResolutionMismatch(
                    f"Expected a {self.grid_size}-point signal, got shape {signal.shape}"
                )
        constraints = collect_constraints(priors)

        # 1. Evidence fusion
        point_precision = 1.0 / confidence_to_variance(conf)
        # 1/inf = 0: zero-confidence points carry no precision
        evidence_precision = min(float(np.mean(point_precision)), 1.0 / _MIN_EVIDENCE_VARIANCE)
        evidence_mean = (
            float(np.percentile(signal, cfg.hotspot_percentile)) if signal is not None else self._mean
        )
        prior_precision = 1.0 / self._variance
        precision = prior_precision + evidence_precision
        mean = (prior_precision * self._mean + evidence_precision * evidence_mean) / precision
        variance = 1.0 / precision

        old_point_precision = 1.0 / confidence_to_variance(self._confidence)
        new_point_precision = old_point_precision + point_precision
        confidence = new_point_precision / (1.0 + new_point_precision)

        # 2. Prior constraints
        shift = _constraint_shift(mean, constraints)
        if shift != 0.0:
            mean += shift
            variance += shift * shift

        # 3. Floor
        variance = max(variance, cfg.min_threshold_variance)

        logger.debug(
            "Belief update %d: mean %.4g -> %.4g, var %.3g -> %.3g, %d constraints (shift %.3g)",
            self._updates + 1,
            self._mean,
            mean,
            self._variance,
            variance,
            len(constraints),
            shift,
        )
        self._mean = mean
        self._variance = variance
        self._confidence = np.minimum(confidence, 1.0)
        self._updates += 1
        return self.state

    def contract(self, factor: float) -> BeliefState:
        """Scale variance by ``factor`` in (0, 1], floored."""
        if not (0.0 < factor <= 1.0):
            raise InvalidConfiguration(f"Contraction factor must be in (0, 1], got {factor}")
        self._variance = max(self._variance * factor, self.config.min_threshold_variance)
        return self.state


def _constraint_shift(mean: float, constraints: list[PriorConstraint]) -> float:
    """Weight-weighted average of the pulls from constraints the mean violates."""
    total_weight = 0.0
    weighted_pull = 0.0
    for c in constraints:
        if c.contains(mean) or c.weight == 0.0:
            continue
        pull = c.weight * (c.nearest_bound(mean) - mean)
        weighted_pull += c.weight * pull
        total_weight += c.weight
    if total_weight == 0.0:
        return 0.0
    return weighted_pull / total_weight


class EntropyPulse:
    """Re-coheres a belief whose entropy has drifted above ``threshold``."""

    def __init__(self, threshold: float, contraction: float = 0.5) -> None:
        if not (0.0 < contraction <= 1.0):
            raise InvalidConfiguration(f"contraction must be in (0, 1], got {contraction}")
        self.threshold = threshold
        self.contraction = contraction

    def should_trigger(self, belief: BeliefTensor) -> bool:
        return belief.entropy() > self.threshold

    def trigger(self, belief: BeliefTensor) -> BeliefState:
        before = belief.entropy()
        state = belief.contract(self.contraction)
        logger.info("Coherence pulse: entropy %.3f -> %.3f", before, belief.entropy())
        return state

    def maybe_trigger(self, belief: BeliefTensor) -> bool:
        if not self.should_trigger(belief):
            return False
        self.trigger(belief)
        return True
