"""
Gibbs sampler for a normal sample with unknown mean and variance.

Model:
    y_i | mu, sig2 ~ Normal(mu, sig2)
    mu             ~ Normal(mu_0, sig2_0)
    sig2           ~ InverseGamma(nu_0, beta_0)

Both full conditionals are conjugate, so each Gibbs step is an exact draw:

    mu   | sig2, y ~ Normal(m, v),          v = 1 / (n / sig2 + 1 / sig2_0)
                                            m = v (n ybar / sig2 + mu_0 / sig2_0)
    sig2 | mu, y   ~ InverseGamma(nu_0 + n / 2, beta_0 + sum((y - mu)^2) / 2)
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Tuple
import logging
import math
import numbers

import numpy as np

from ..custom_types import ArrayLike, PRNG, SeedLike
from ._utils import _as_rng, _check_count, _check_finite, _check_positive, _check_positive_int, _to_1d_vector
from .module import Module, InputSpec
from .summary import summarize
from .trace import Trace

__all__ = [
    "NormalPrior",
    "mu_full_conditional",
    "sig2_full_conditional",
    "update_mu",
    "update_sig2",
    "gibbs_normal",
    "GibbsSampler",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalPrior:
    """Hyperparameters of the normal / inverse-gamma prior.

    Attributes:
        mu_0: Prior mean of ``mu``.
        sig2_0: Prior variance of ``mu`` (> 0).
        nu_0: Inverse-gamma shape for ``sig2`` (> 0).
        beta_0: Inverse-gamma scale for ``sig2`` (> 0).
    """
    mu_0: float
    sig2_0: float
    nu_0: float
    beta_0: float

    def __post_init__(self):
        object.__setattr__(self, "mu_0", _check_finite("mu_0", self.mu_0))
        object.__setattr__(self, "sig2_0", _check_positive("sig2_0", self.sig2_0))
        object.__setattr__(self, "nu_0", _check_positive("nu_0", self.nu_0))
        object.__setattr__(self, "beta_0", _check_positive("beta_0", self.beta_0))

    @classmethod
    def from_prior_sample_size(cls, mu_0: float, sig2_0: float, n_0: float, s2_0: float) -> "NormalPrior":
        """Builds the variance prior from a prior effective sample size.

        A prior worth ``n_0`` observations with prior guess ``s2_0`` for the
        variance gives ``nu_0 = n_0 / 2`` and ``beta_0 = n_0 s2_0 / 2``.
        """
        n_0 = _check_positive("n_0", n_0)
        s2_0 = _check_positive("s2_0", s2_0)
        return cls(mu_0=mu_0, sig2_0=sig2_0, nu_0=n_0 / 2.0, beta_0=n_0 * s2_0 / 2.0)


def mu_full_conditional(n: int, ybar: float, sig2: float, mu_0: float, sig2_0: float) -> Tuple[float, float]:
    """Mean and variance of ``mu | sig2, y``.

    With ``n = 0`` the data terms vanish and this is the prior
    ``(mu_0, sig2_0)``.
    """
    n = _check_count("n", n)
    sig2 = _check_positive("sig2", sig2)
    sig2_0 = _check_positive("sig2_0", sig2_0)

    post_var = 1.0 / (n / sig2 + 1.0 / sig2_0)
    post_mean = post_var * (n * ybar / sig2 + mu_0 / sig2_0)
    return post_mean, post_var


def update_mu(n: int, ybar: float, sig2: float, mu_0: float, sig2_0: float, *, rng: SeedLike = None) -> float:
    """Draws ``mu`` from its normal full conditional."""
    post_mean, post_var = mu_full_conditional(n, ybar, sig2, mu_0, sig2_0)
    return float(_as_rng(rng).normal(post_mean, math.sqrt(post_var)))


def sig2_full_conditional(n: int, y: ArrayLike, mu: float, nu_0: float, beta_0: float) -> Tuple[float, float]:
    """Shape and rate of the inverse-gamma full conditional ``sig2 | mu, y``.

    ``n`` must equal the number of observations in ``y``.
    """
    n = _check_count("n", n)
    nu_0 = _check_positive("nu_0", nu_0)
    beta_0 = _check_positive("beta_0", beta_0)
    y = _to_1d_vector(y)
    if y.size != n:
        raise ValueError(f"n ({n}) does not match the number of observations ({y.size})")

    post_shape = nu_0 + n / 2.0
    sum_sq = float(np.sum((y - mu) ** 2))
    post_rate = beta_0 + sum_sq / 2.0
    return post_shape, post_rate


def update_sig2(n: int, y: ArrayLike, mu: float, nu_0: float, beta_0: float, *, rng: SeedLike = None) -> float:
    """Draws ``sig2`` from its inverse-gamma full conditional.

    The draw is the reciprocal of a ``Gamma(shape, rate)`` variate, so it is
    strictly positive.
    """
    post_shape, post_rate = sig2_full_conditional(n, y, mu, nu_0, beta_0)
    # numpy parameterizes the gamma by scale = 1 / rate
    gamma_draw = _as_rng(rng).gamma(post_shape, 1.0 / post_rate)
    return float(1.0 / gamma_draw)


def gibbs_normal(y: ArrayLike, n_iter: int, init_mu: float, prior: NormalPrior, *, rng: SeedLike = None) -> Trace:
    """Gibbs sampler for ``(mu, sig2)`` of a normal sample.

    Each iteration first draws ``sig2`` given the current ``mu`` (``init_mu``
    on the first pass), then ``mu`` given the new ``sig2``, and records the
    pair. The order is fixed and determines the chain.

    Args:
        y: Observations, at least one.
        n_iter: Number of iterations, a positive integer.
        init_mu: Initial value of ``mu``.
        prior: Hyperparameters, see :class:`NormalPrior`.
        rng: Generator (or seed) for the normal and gamma draws.

    Returns:
        Trace: Shape ``(n_iter, 2)`` with columns ``mu`` and ``sig2``.

    Raises:
        ValueError: If ``y`` is empty or non-finite, ``n_iter`` is not a
            positive integer, or ``init_mu`` is not finite.
    """
    if not isinstance(prior, NormalPrior):
        raise TypeError(f"prior must be a NormalPrior; got {type(prior).__name__}")
    y = _to_1d_vector(y)
    stats = summarize(y)
    n_iter = _check_positive_int("n_iter", n_iter)
    mu_now = _check_finite("init_mu", init_mu)
    rng: PRNG = _as_rng(rng)

    n, ybar = stats.n, stats.ybar
    logger.debug("Gibbs: %d iterations, n=%d, ybar=%.4g, init_mu=%r", n_iter, n, ybar, mu_now)

    out = np.empty((n_iter, 2), dtype=float)
    for i in range(n_iter):
        sig2_now = update_sig2(n, y, mu_now, prior.nu_0, prior.beta_0, rng=rng)
        mu_now = update_mu(n, ybar, sig2_now, prior.mu_0, prior.sig2_0, rng=rng)
        out[i, 0] = mu_now
        out[i, 1] = sig2_now

    logger.info("Gibbs finished: %d iterations", n_iter)
    return Trace(out, names=("mu", "sig2"))


class GibbsSampler(Module):
    """Module wrapper around :func:`gibbs_normal`.

    Registers ``sample_posterior`` as a Prefect task so the sampler can be
    dropped into a workflow next to the Metropolis–Hastings modules.
    """

    DEPENDENCIES = MappingProxyType({})

    def __init__(self):
        super().__init__()
        self.set_input(
            data=InputSpec(required=True),
            num_samples=InputSpec(type=numbers.Integral, required=True),
            prior=InputSpec(type=NormalPrior, required=True),
            initial_mu=InputSpec(type=numbers.Real, required=False, default=0.0),
            seed=InputSpec(required=False, default=None),
        )
        self.run_func(self._sample_posterior, name="sample_posterior")

    def _sample_posterior(self, *, data, num_samples, prior, initial_mu=0.0, seed=None) -> Trace:
        return gibbs_normal(data, num_samples, initial_mu, prior, rng=seed)
