"""Tests for the Bayesian threshold belief."""

import math

import numpy as np
import pytest

from curvesight.engine.belief import (
    BeliefTensor,
    ConstraintSource,
    EntropyPulse,
    PercentileBandSource,
    collect_constraints,
)
from curvesight.engine.config import PipelineConfig
from curvesight.errors import InvalidConfiguration, InvalidPrior, ResolutionMismatch
from curvesight.models.samples import PriorConstraint

N = 16


def _belief(**overrides) -> BeliefTensor:
    cfg = PipelineConfig(initial_threshold_prior_mean=0.0, **overrides)
    return BeliefTensor(N, cfg)


def test_initial_state():
    state = _belief(initial_threshold_prior_variance=2.0).state
    assert state.threshold_mean == 0.0
    assert state.threshold_variance == 2.0
    assert state.signal_confidence == [0.5] * N
    assert state.updates == 0


def test_calibration_signal_sets_initial_mean():
    signal = np.arange(N, dtype=float)
    cfg = PipelineConfig(initial_threshold_percentile=50.0)
    belief = BeliefTensor(N, cfg, calibration_signal=signal)
    assert belief.threshold == pytest.approx(7.5)


def test_variance_non_increasing_and_floored():
    belief = _belief(min_threshold_variance=1e-3)
    variances = [belief.variance]
    for _ in range(30):
        variances.append(belief.update(np.full(N, 0.99)).threshold_variance)
    assert all(b <= a for a, b in zip(variances, variances[1:]))
    assert min(variances) >= 1e-3
    assert variances[-1] == pytest.approx(1e-3)


def test_conjugate_update_moves_toward_evidence():
    belief = _belief(hotspot_percentile=50.0)
    signal = np.full(N, 4.0)
    signal[0] = 3.0
    # confidence 0.5 -> evidence variance 1, same as the prior variance
    state = belief.update(np.full(N, 0.5), signal=signal)
    assert state.threshold_mean == pytest.approx(2.0)
    assert state.threshold_variance == pytest.approx(0.5)


def test_without_signal_mean_is_unchanged():
    belief = _belief()
    state = belief.update(np.full(N, 0.8))
    assert state.threshold_mean == 0.0
    assert state.threshold_variance < 1.0


def test_point_confidence_never_decreases():
    belief = _belief()
    before = np.array(belief.state.signal_confidence)
    conf = np.linspace(0.0, 1.0, N)
    after = np.array(belief.update(conf).signal_confidence)
    assert np.all(after >= before)
    assert np.all(after <= 1.0)
    # Zero-confidence evidence leaves a point as it was.
    assert after[0] == pytest.approx(before[0])


def test_full_weight_prior_enforces_bound():
    belief = _belief()
    state = belief.update(np.full(N, 0.5), [PriorConstraint(lower=2.0, upper=3.0, weight=1.0)])
    assert state.threshold_mean == pytest.approx(2.0)


def test_zero_weight_prior_is_ignored():
    a = _belief()
    b = _belief()
    sa = a.update(np.full(N, 0.5))
    sb = b.update(np.full(N, 0.5), [PriorConstraint(lower=2.0, upper=3.0, weight=0.0)])
    assert sa == sb


def test_partial_weight_pulls_part_way():
    state = _belief().update(np.full(N, 0.5), [PriorConstraint(lower=-10.0, upper=-4.0, weight=0.25)])
    assert state.threshold_mean == pytest.approx(-1.0)


def test_satisfied_prior_changes_nothing():
    a = _belief().update(np.full(N, 0.5))
    b = _belief().update(np.full(N, 0.5), [PriorConstraint(lower=-1.0, upper=1.0, weight=1.0)])
    assert a == b


def test_multiple_constraints_combine_by_weighted_average():
    priors = [
        PriorConstraint(lower=1.0, upper=2.0, weight=1.0),
        PriorConstraint(lower=3.0, upper=4.0, weight=0.5),
    ]
    state = _belief().update(np.full(N, 0.5), priors)
    # pulls 1.0 (w=1) and 1.5 (w=0.5): (1*1 + 0.5*1.5) / 1.5
    assert state.threshold_mean == pytest.approx(7.0 / 6.0)
    # Conflicting prior widens the belief by the squared shift.
    assert state.threshold_variance == pytest.approx(0.5 + (7.0 / 6.0) ** 2)


def test_inverted_bounds_raise_and_leave_state_untouched():
    belief = _belief()
    belief.update(np.full(N, 0.7))
    before = belief.state
    with pytest.raises(InvalidPrior):
        belief.update(np.full(N, 0.9), [PriorConstraint(lower=3.0, upper=1.0)])
    assert belief.state == before


@pytest.mark.parametrize("weight", [-0.1, 1.5, float("nan")])
def test_bad_weight_is_invalid_prior(weight):
    with pytest.raises(InvalidPrior):
        _belief().update(np.full(N, 0.5), [PriorConstraint(lower=0.0, upper=1.0, weight=weight)])


def test_negative_weight_is_also_invalid_configuration():
    with pytest.raises(InvalidConfiguration):
        _belief().update(np.full(N, 0.5), [PriorConstraint(lower=0.0, upper=1.0, weight=-1.0)])


def test_length_mismatch():
    with pytest.raises(ResolutionMismatch):
        _belief().update(np.full(N + 1, 0.5))
    with pytest.raises(ResolutionMismatch):
        _belief().update(np.full(N, 0.5), signal=np.zeros(3))


def test_confidence_out_of_range():
    with pytest.raises(InvalidConfiguration):
        _belief().update(np.full(N, 1.5))


def test_prior_constraint_is_a_source():
    c = PriorConstraint(lower=0.0, upper=1.0, weight=0.3)
    assert isinstance(c, ConstraintSource)
    assert list(c.constraints()) == [c]


def test_percentile_band_source():
    source = PercentileBandSource(np.arange(101, dtype=float), low=10.0, high=90.0, weight=0.4)
    (c,) = collect_constraints([source])
    assert (c.lower, c.upper, c.weight) == pytest.approx((10.0, 90.0, 0.4))

    belief = _belief()
    state = belief.update(np.full(N, 0.5), [source])
    assert state.threshold_mean == pytest.approx(0.4 * 10.0)


def test_entropy_tracks_variance():
    belief = _belief(initial_threshold_prior_variance=1.0)
    assert belief.entropy() == pytest.approx(0.5 * math.log(2 * math.pi * math.e))
    belief.update(np.full(N, 0.9))
    assert belief.entropy() < 0.5 * math.log(2 * math.pi * math.e)


def test_entropy_pulse_contracts_variance():
    belief = _belief(initial_threshold_prior_variance=4.0)
    pulse = EntropyPulse(threshold=1.0, contraction=0.5)
    assert pulse.should_trigger(belief)
    assert pulse.maybe_trigger(belief)
    assert belief.variance == pytest.approx(2.0)

    calm = EntropyPulse(threshold=100.0)
    assert not calm.maybe_trigger(belief)
    assert belief.variance == pytest.approx(2.0)


def test_contract_respects_floor():
    belief = _belief(min_threshold_variance=0.5)
    belief.contract(0.01)
    assert belief.variance == 0.5


def test_invalid_grid_size():
    with pytest.raises(InvalidConfiguration):
        BeliefTensor(1)


def test_zero_confidence_point_does_not_discard_evidence():
    conf = np.full(N, 0.99)
    conf[0] = 0.0
    state = _belief(hotspot_percentile=50.0).update(conf, signal=np.full(N, 4.0))
    # Mean precision 15 * 99 / 16 against a unit-precision prior.
    precision = 1.0 + 15 * 99.0 / 16
    assert state.threshold_mean == pytest.approx(4.0 * (precision - 1.0) / precision)
    assert state.threshold_variance == pytest.approx(1.0 / precision)


def test_near_zero_confidence_behaves_like_zero():
    signal = np.full(N, 4.0)
    zero = np.full(N, 0.99)
    zero[0] = 0.0
    tiny = zero.copy()
    tiny[0] = 1e-9
    a = _belief(hotspot_percentile=50.0).update(zero, signal=signal)
    b = _belief(hotspot_percentile=50.0).update(tiny, signal=signal)
    assert a.threshold_mean == pytest.approx(b.threshold_mean, rel=1e-6)
    assert a.threshold_variance == pytest.approx(b.threshold_variance, rel=1e-6)


def test_all_zero_confidence_leaves_threshold_alone():
    state = _belief().update(np.zeros(N), signal=np.full(N, 4.0))
    assert state.threshold_mean == 0.0
    assert state.threshold_variance == 1.0
