import logging

import numpy as np
import pytest
from prefect import flow
from scipy import integrate

from probchain.core.mcmc import (
    acceptance_probability,
    metropolis_hastings,
    sample_normal_mean,
    MHResult,
    MetropolisHastings,
    NormalMeanPosterior,
)
from probchain.core.gibbs import GibbsSampler
from probchain.core.targets import log_target, make_log_target, make_log_target_from_data
from probchain.core.trace import Trace

# literal sample summary for the Cauchy-prior model; not the mean of course_data
N, YBAR = 10, 1.19


@pytest.fixture(scope="module")
def exact_posterior_mean():
    # normalizing constant and first moment of exp(log g) by quadrature
    dens = lambda mu: np.exp(log_target(mu, N, YBAR))
    z, _ = integrate.quad(dens, -10.0, 10.0)
    m1, _ = integrate.quad(lambda mu: mu * dens(mu), -10.0, 10.0)
    return m1 / z


# ------------------------- Acceptance probability -------------------------

@pytest.mark.parametrize("log_alpha", [-np.inf, -1e6, -3.2, -1e-12, 0.0, 0.5, 40.0, 1e6, np.inf, np.nan])
def test_acceptance_probability_in_unit_interval(log_alpha):
    p = acceptance_probability(log_alpha)
    assert 0.0 <= p <= 1.0


def test_acceptance_probability_values():
    assert acceptance_probability(0.0) == 1.0
    assert acceptance_probability(2.0) == 1.0
    assert acceptance_probability(np.log(0.25)) == pytest.approx(0.25)
    assert acceptance_probability(-np.inf) == 0.0


def test_acceptance_probability_over_random_pairs(rng):
    log_g = make_log_target(N, YBAR)
    for _ in range(200):
        a, b = rng.normal(0.0, 20.0, size=2)
        assert 0.0 <= acceptance_probability(log_g(b) - log_g(a)) <= 1.0


# ------------------------------ Trace shape ------------------------------

@pytest.mark.parametrize("m", [1, 7, 250])
def test_trace_length_matches_iterations(m):
    res = sample_normal_mean(N, YBAR, m, 0.0, 0.9, rng=np.random.default_rng(m))

    assert isinstance(res, MHResult)
    assert res.samples.shape == (m,)
    assert res.n_iter == m
    assert 0 <= res.n_accepted <= m
    assert res.acceptance_rate == res.n_accepted / m


def test_result_samples_are_read_only():
    res = sample_normal_mean(N, YBAR, 20, 0.0, 0.9, rng=np.random.default_rng(6))
    with pytest.raises(ValueError):
        res.samples[0] = 1.0
    assert not res.to_trace().samples.flags.writeable


def test_rejections_repeat_previous_state():
    res = sample_normal_mean(N, YBAR, 500, 0.0, 3.0, rng=np.random.default_rng(5))
    moves = np.count_nonzero(np.diff(np.concatenate([[0.0], res.samples])))
    # every accepted proposal is a move, every rejection a repeat
    assert moves == res.n_accepted


def test_same_seed_same_chain_and_independent_chains():
    a = sample_normal_mean(N, YBAR, 300, 0.0, 0.9, rng=np.random.default_rng(11))
    b = sample_normal_mean(N, YBAR, 300, 0.0, 0.9, rng=np.random.default_rng(11))
    c = sample_normal_mean(N, YBAR, 300, 0.0, 0.9, rng=np.random.default_rng(12))

    np.testing.assert_array_equal(a.samples, b.samples)
    assert not np.array_equal(a.samples, c.samples)


def test_integer_seed_is_accepted():
    a = sample_normal_mean(N, YBAR, 50, 0.0, 0.9, rng=3)
    b = sample_normal_mean(N, YBAR, 50, 0.0, 0.9, rng=np.random.default_rng(3))
    np.testing.assert_array_equal(a.samples, b.samples)


# ---------------------------- Statistical checks ----------------------------

def test_posterior_mean_after_burn_in(exact_posterior_mean):
    assert 0.85 < exact_posterior_mean < 1.15

    res = sample_normal_mean(N, YBAR, 1000, 0.0, 0.9, rng=np.random.default_rng(43))
    kept = res.samples[100:]
    assert abs(kept.mean() - exact_posterior_mean) < 0.3


def test_acceptance_rate_decreases_with_proposal_sd():
    rates = [
        sample_normal_mean(N, YBAR, 1000, 0.0, sd, rng=np.random.default_rng(2024)).acceptance_rate
        for sd in (0.05, 0.9, 3.0)
    ]
    low, mid, high = rates

    assert low >= mid >= high
    assert low > 0.5
    assert 0.23 <= mid <= 0.5
    assert high < 0.23


def test_far_initial_value_converges(exact_posterior_mean):
    far = sample_normal_mean(N, YBAR, 1000, 30.0, 0.9, rng=np.random.default_rng(7))
    near = sample_normal_mean(N, YBAR, 1000, 0.0, 0.9, rng=np.random.default_rng(8))

    far_mean = far.samples[500:].mean()
    near_mean = near.samples[500:].mean()
    assert abs(far_mean - near_mean) < 0.3
    assert abs(far_mean - exact_posterior_mean) < 0.3
    # the head of the chain is still walking in from 30
    assert far.samples[0] > 20.0


def test_generic_target_standard_normal():
    res = metropolis_hastings(lambda x: -0.5 * x * x, 20000, 0.0, 2.4, rng=np.random.default_rng(1))
    kept = res.samples[1000:]
    assert abs(kept.mean()) < 0.1
    assert abs(kept.std() - 1.0) < 0.1


def test_minus_inf_target_rejects_outside_support():
    # half-normal: proposals below zero must never be accepted
    log_half = lambda x: -0.5 * x * x if x >= 0 else -np.inf
    res = metropolis_hastings(log_half, 2000, 1.0, 1.0, rng=np.random.default_rng(9))
    assert np.all(res.samples >= 0.0)


# ------------------------------ Preconditions ------------------------------

@pytest.mark.parametrize("kwargs", [
    dict(n_iter=0),
    dict(n_iter=-5),
    dict(n_iter=2.5),
    dict(proposal_std=0.0),
    dict(proposal_std=-1.0),
    dict(proposal_std=np.inf),
    dict(init=np.nan),
])
def test_preconditions_fail_fast(kwargs):
    args = dict(log_target=make_log_target(N, YBAR), n_iter=10, init=0.0, proposal_std=0.9)
    args.update(kwargs)
    with pytest.raises(ValueError):
        metropolis_hastings(**args, rng=np.random.default_rng(0))


def test_nan_initial_log_target_raises():
    with pytest.raises(ValueError):
        metropolis_hastings(lambda x: np.nan, 10, 0.0, 1.0)


def test_run_is_logged(caplog):
    with caplog.at_level(logging.INFO, logger="probchain.core.mcmc"):
        sample_normal_mean(N, YBAR, 200, 0.0, 0.05, rng=np.random.default_rng(0))
    messages = [r.getMessage() for r in caplog.records]
    assert any("acceptance rate" in m for m in messages)
    assert any("consider retuning" in m for m in messages)


# --------------------------------- Modules ---------------------------------

def test_sampler_module_matches_function():
    mh = MetropolisHastings()
    log_g = make_log_target(N, YBAR)

    res = mh.sample_posterior.fn(
        log_target=log_g,
        num_samples=200,
        initial_state=0.0,
        proposal_std=0.9,
        seed=np.random.default_rng(4),
    )
    ref = metropolis_hastings(log_g, 200, 0.0, 0.9, rng=np.random.default_rng(4))
    np.testing.assert_array_equal(res.samples, ref.samples)


def test_sampler_module_validates_inputs():
    mh = MetropolisHastings()
    with pytest.raises(TypeError):
        mh.sample_posterior.fn(num_samples=10, initial_state=0.0)  # log_target missing
    with pytest.raises(TypeError):
        mh.sample_posterior.fn(log_target=abs, num_samples="10", initial_state=0.0)


def test_posterior_module_applies_burn_in(course_data):
    post = NormalMeanPosterior(sampler=MetropolisHastings())
    tr = post.calculate_posterior.fn(
        data=course_data,
        num_samples=1000,
        proposal_std=0.9,
        burn_in=100,
        seed=np.random.default_rng(43),
    )

    assert isinstance(tr, Trace)
    assert tr.names == ("mu",)
    assert tr.n == 900
    assert tr.acceptance_rate is not None
    ref = metropolis_hastings(make_log_target_from_data(course_data), 1000, 0.0, 0.9,
                              rng=np.random.default_rng(43))
    np.testing.assert_array_equal(tr["mu"], ref.samples[100:])


def test_posterior_module_rejects_wrong_sampler_type():
    with pytest.raises(TypeError):
        NormalMeanPosterior(sampler=GibbsSampler())


def test_posterior_module_runs_inside_a_flow(course_data, prefect_backend):
    post = NormalMeanPosterior(sampler=MetropolisHastings())

    @flow
    def normal_mean_posterior():
        return post.calculate_posterior(data=course_data, num_samples=200, burn_in=10, seed=1)

    tr = normal_mean_posterior()
    assert isinstance(tr, Trace)
    assert tr.n == 190
    ref = post.calculate_posterior.fn(data=course_data, num_samples=200, burn_in=10, seed=1)
    np.testing.assert_array_equal(tr["mu"], ref["mu"])
