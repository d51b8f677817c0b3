from abc import ABC, abstractmethod
from typing import Optional, Tuple

import numpy as np
from numpy.typing import NDArray
from scipy.stats import beta as _sps_beta
from scipy.stats import gamma as _sps_gamma
from scipy.stats import norm as _sps_norm

from ..custom_types import ArrayLike, PRNG
from ._utils import _as_rng, _check_count, _check_finite, _check_positive, _to_1d_vector
from .gibbs import mu_full_conditional

__all__ = [
    "ConjugateModel",
    "BetaBinomial",
    "GammaPoisson",
    "NormalKnownVariance",
]


class ConjugateModel(ABC):
    """Abstract base class for one-parameter conjugate models.

    A conjugate model is a prior (or posterior) distribution for a single
    parameter whose :meth:`update` stays in the same family. Instances are
    immutable: :meth:`update` returns a new model so that prior and
    posterior can be compared side by side.

    SciPy-backed implementation: subclasses build a frozen ``scipy.stats``
    distribution in ``_frozen`` and the shared methods delegate to it.

    Attributes:
        _rng: Random number generator used by :meth:`sample`.
    """

    def __init__(self, *, rng: Optional[PRNG] = None):
        self._rng = _as_rng(rng)
        self._frozen = self._build()

    @abstractmethod
    def _build(self):
        """Returns the frozen ``scipy.stats`` distribution of the parameter."""
        raise NotImplementedError

    @abstractmethod
    def update(self, *args, **kwargs) -> "ConjugateModel":
        """Returns the posterior after observing data."""
        raise NotImplementedError

    def mean(self) -> float:
        return float(self._frozen.mean())

    def var(self) -> float:
        return float(self._frozen.var())

    def std(self) -> float:
        return float(self._frozen.std())

    def credible_interval(self, mass: float = 0.95) -> Tuple[float, float]:
        """Equal-tailed credible interval.

        Args:
            mass: Probability inside the interval, in (0, 1).

        Returns:
            Tuple[float, float]: Lower and upper bound.
        """
        mass = float(mass)
        if not 0.0 < mass < 1.0:
            raise ValueError("mass must lie strictly between 0 and 1.")
        lo, hi = self._frozen.interval(mass)
        return float(lo), float(hi)

    def sample(self, n_samples: int) -> NDArray[np.floating]:
        """Draws ``n_samples`` values of the parameter, shape (n_samples,)."""
        x = self._frozen.rvs(size=int(n_samples), random_state=self._rng)
        return np.asarray(x, dtype=float).reshape(-1)

    def log_density(self, values: ArrayLike) -> NDArray[np.floating]:
        """Log density of the parameter at ``values``, shape (n,)."""
        return np.asarray(self._frozen.logpdf(_to_1d_vector(values)), dtype=float)


class BetaBinomial(ConjugateModel):
    """Beta(alpha, beta) prior for a success probability with binomial data.

    Observing ``s`` successes in ``t`` trials gives
    ``Beta(alpha + s, beta + t - s)``.
    """

    def __init__(self, alpha: float = 1.0, beta: float = 1.0, *, rng: Optional[PRNG] = None):
        self.alpha = _check_positive("alpha", alpha)
        self.beta = _check_positive("beta", beta)
        super().__init__(rng=rng)

    def _build(self):
        return _sps_beta(a=self.alpha, b=self.beta)

    def update(self, successes: int, trials: int) -> "BetaBinomial":
        successes = _check_count("successes", successes)
        trials = _check_count("trials", trials)
        if successes > trials:
            raise ValueError(f"successes ({successes}) cannot exceed trials ({trials})")
        return BetaBinomial(self.alpha + successes, self.beta + trials - successes, rng=self._rng)

    def __repr__(self):
        return f"BetaBinomial(alpha={self.alpha:g}, beta={self.beta:g})"


class GammaPoisson(ConjugateModel):
    """Gamma(shape, rate) prior for a Poisson rate.

    Observing counts ``y_1..y_n`` gives ``Gamma(shape + sum(y), rate + n)``.
    """

    def __init__(self, shape: float = 1.0, rate: float = 1.0, *, rng: Optional[PRNG] = None):
        self.shape = _check_positive("shape", shape)
        self.rate = _check_positive("rate", rate)
        super().__init__(rng=rng)

    def _build(self):
        # scipy parameterizes the gamma by scale = 1 / rate
        return _sps_gamma(a=self.shape, scale=1.0 / self.rate)

    def update(self, counts: ArrayLike) -> "GammaPoisson":
        y = _to_1d_vector(counts)
        if np.any(y < 0) or np.any(y != np.floor(y)):
            raise ValueError("counts must be non-negative integers")
        return GammaPoisson(self.shape + float(y.sum()), self.rate + y.size, rng=self._rng)

    def __repr__(self):
        return f"GammaPoisson(shape={self.shape:g}, rate={self.rate:g})"


class NormalKnownVariance(ConjugateModel):
    """Normal(mu_0, sig2_0) prior for the mean of normal data with known variance ``sig2``.

    This is the conditional used for ``mu`` inside the Gibbs sampler, with
    ``sig2`` held fixed.
    """

    def __init__(self, mu_0: float = 0.0, sig2_0: float = 1.0, sig2: float = 1.0, *,
                 rng: Optional[PRNG] = None):
        self.mu_0 = _check_finite("mu_0", mu_0)
        self.sig2_0 = _check_positive("sig2_0", sig2_0)
        self.sig2 = _check_positive("sig2", sig2)
        super().__init__(rng=rng)

    def _build(self):
        return _sps_norm(loc=self.mu_0, scale=np.sqrt(self.sig2_0))

    def update(self, y: ArrayLike) -> "NormalKnownVariance":
        y = _to_1d_vector(y)
        n = int(y.size)
        ybar = float(y.mean()) if n else 0.0
        post_mean, post_var = mu_full_conditional(n, ybar, self.sig2, self.mu_0, self.sig2_0)
        return NormalKnownVariance(post_mean, post_var, self.sig2, rng=self._rng)

    def __repr__(self):
        return f"NormalKnownVariance(mu_0={self.mu_0:g}, sig2_0={self.sig2_0:g}, sig2={self.sig2:g})"
