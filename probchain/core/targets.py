"""
Unnormalized log posterior for the mean of a normal sample.

Model:
    y_i | mu ~ Normal(mu, 1)
    mu       ~ Cauchy(0, 1)      (Student-t with one degree of freedom)

Up to an additive constant the log posterior only depends on the data
through ``n`` and ``ybar``:

    log g(mu) = n (ybar mu - mu^2 / 2) - log(1 + mu^2)
"""
from typing import Callable

import numpy as np

from ..custom_types import ArrayLike
from .summary import summarize

__all__ = [
    "log_target",
    "make_log_target",
    "make_log_target_from_data",
]


def log_target(mu, n: int, ybar: float):
    """Evaluates ``log g(mu)`` for scalar or array ``mu``.

    Defined for every real ``mu``; scalars return a Python float, arrays an
    array of the same shape.
    """
    mu_arr = np.asarray(mu, dtype=float)
    out = n * (ybar * mu_arr - 0.5 * mu_arr ** 2) - np.log1p(mu_arr ** 2)
    if out.ndim == 0:
        return float(out)
    return out


def make_log_target(n: int, ybar: float) -> Callable[[float], float]:
    """Binds the data summaries, returning a one-argument log target."""
    n = int(n)
    ybar = float(ybar)

    def _log_g(mu):
        return log_target(mu, n, ybar)

    return _log_g


def make_log_target_from_data(y: ArrayLike) -> Callable[[float], float]:
    """Summarizes ``y`` and binds the result, see :func:`make_log_target`."""
    stats = summarize(y)
    return make_log_target(stats.n, stats.ybar)
