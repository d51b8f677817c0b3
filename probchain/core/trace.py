from typing import Dict, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from ..custom_types import ArrayLike
from ._utils import _check_count, _check_positive_int

__all__ = [
    "Trace",
]


class Trace:
    """
    Ordered container of Markov chain draws in ℝᵈ.

    Holds the output of a sampler run, one row per iteration and one
    column per parameter. Unlike a weighted sample, the row order is
    meaningful: :meth:`burn_in` drops the head of the chain and
    :meth:`thin` keeps every k-th row. Both return new traces; the stored
    array is never modified in place.

    Attributes:
        n (int): Number of stored draws.
        d (int): Number of parameters per draw.
        samples (NDArray): Read-only draws of shape (n, d).
        names (Tuple[str, ...]): Parameter name for each column.
        acceptance_rate (Optional[float]): Fraction of accepted proposals,
            for samplers that propose and reject.
    """

    def __init__(
        self,
        samples: ArrayLike,
        names: Optional[Sequence[str]] = None,
        *,
        acceptance_rate: Optional[float] = None,
    ):
        """Initializes a trace from an array of draws.

        Args:
            samples: Draws with shape (n, d) or (n,). A 1-D array is a
                single-parameter chain and becomes shape (n, 1).
            names: Optional parameter names, one per column. Defaults to
                ``theta0, theta1, ...``.
            acceptance_rate: Optional acceptance rate to carry along.

        Raises:
            ValueError: If there are no draws, the array has more than two
                dimensions, or ``names`` does not match the column count.
        """
        X = np.array(samples, dtype=float)
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        if X.ndim != 2:
            raise ValueError("samples must have shape (n,) or (n, d).")
        n, d = X.shape
        if n < 1:
            raise ValueError("Trace requires at least one draw.")

        if names is None:
            names = tuple(f"theta{i}" for i in range(d))
        else:
            names = tuple(str(nm) for nm in names)
            if len(names) != d:
                raise ValueError(f"expected {d} names, got {len(names)}.")
            if len(set(names)) != d:
                raise ValueError("parameter names must be unique.")

        X.setflags(write=False)
        self._X = X
        self._n = int(n)
        self._d = int(d)
        self._names = names
        self._acceptance_rate = None if acceptance_rate is None else float(acceptance_rate)

    @property
    def n(self) -> int:
        """int: Number of stored draws."""
        return self._n

    @property
    def d(self) -> int:
        """int: Number of parameters per draw."""
        return self._d

    @property
    def samples(self) -> NDArray:
        """NDArray: Read-only view of the draws with shape (n, d)."""
        return self._X

    @property
    def names(self) -> Tuple[str, ...]:
        return self._names

    @property
    def acceptance_rate(self) -> Optional[float]:
        return self._acceptance_rate

    def __len__(self) -> int:
        return self._n

    def __getitem__(self, name: str) -> NDArray:
        """Returns the chain of a single parameter, shape (n,)."""
        try:
            j = self._names.index(name)
        except ValueError:
            raise KeyError(f"unknown parameter {name!r}; have {list(self._names)}") from None
        return self._X[:, j]

    def __repr__(self) -> str:
        return f"<Trace n={self._n} names={list(self._names)}>"

    # ------------------------------ Chain surgery ------------------------------

    def _with_rows(self, X: NDArray) -> "Trace":
        return Trace(X, self._names, acceptance_rate=self._acceptance_rate)

    def burn_in(self, n_discard: int) -> "Trace":
        """Drops the first ``n_discard`` draws.

        Args:
            n_discard: Number of leading draws to discard, ``0 <= n_discard < n``.

        Returns:
            Trace: New trace holding the remaining ``n - n_discard`` draws.

        Raises:
            ValueError: If ``n_discard`` would leave an empty trace.
        """
        n_discard = _check_count("n_discard", n_discard)
        if n_discard >= self._n:
            raise ValueError(
                f"cannot discard {n_discard} draws from a trace of length {self._n}."
            )
        return self._with_rows(self._X[n_discard:])

    def thin(self, every: int) -> "Trace":
        """Keeps every ``every``-th draw, starting with the first."""
        every = _check_positive_int("every", every)
        return self._with_rows(self._X[::every])

    # ------------------------------ Summaries ------------------------------

    def mean(self) -> NDArray:
        """Computes the per-parameter mean.

        Returns:
            NDArray: Mean vector of shape (d,).
        """
        return self._X.mean(axis=0)

    def var(self) -> NDArray:
        """Computes the per-parameter population variance (no ddof correction).

        Returns:
            NDArray: Variance vector of shape (d,).
        """
        return self._X.var(axis=0)

    def std(self) -> NDArray:
        return np.sqrt(self.var())

    def quantile(self, q) -> NDArray:
        """Per-parameter empirical quantiles.

        Args:
            q: Probability or sequence of probabilities in [0, 1].

        Returns:
            NDArray: Shape (d,) for scalar ``q``, (len(q), d) otherwise.
        """
        q_arr = np.asarray(q, dtype=float)
        if np.any((q_arr < 0.0) | (q_arr > 1.0)):
            raise ValueError("quantile probabilities must lie in [0, 1].")
        return np.quantile(self._X, q_arr, axis=0)

    def credible_interval(self, mass: float = 0.95) -> NDArray:
        """Equal-tailed credible interval for each parameter.

        Args:
            mass: Posterior probability inside the interval, in (0, 1).

        Returns:
            NDArray: Shape (d, 2) with lower and upper bounds per parameter.
        """
        mass = float(mass)
        if not 0.0 < mass < 1.0:
            raise ValueError("mass must lie strictly between 0 and 1.")
        tail = 0.5 * (1.0 - mass)
        bounds = self.quantile([tail, 1.0 - tail])  # (2, d)
        return bounds.T

    def summary(self, mass: float = 0.95) -> Dict[str, Dict[str, float]]:
        """Posterior mean, standard deviation and credible bounds by name."""
        m = self.mean()
        s = self.std()
        ci = self.credible_interval(mass)
        return {
            name: {
                "mean": float(m[j]),
                "sd": float(s[j]),
                "lower": float(ci[j, 0]),
                "upper": float(ci[j, 1]),
            }
            for j, name in enumerate(self._names)
        }
