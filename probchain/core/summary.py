from dataclasses import dataclass

import numpy as np

from ..custom_types import ArrayLike
from ._utils import _to_1d_vector

__all__ = [
    "SummaryStatistics",
    "summarize",
]


@dataclass(frozen=True)
class SummaryStatistics:
    """Sufficient statistics of a normal observation set.

    Attributes:
        n: Number of observations.
        ybar: Sample mean.
        ss: Sum of squared deviations about the sample mean.
    """
    n: int
    ybar: float
    ss: float

    @property
    def sample_variance(self) -> float:
        """Unbiased sample variance ``ss / (n - 1)``; ``nan`` for one observation."""
        if self.n < 2:
            return float("nan")
        return self.ss / (self.n - 1)

    def sum_sq_about(self, mu: float) -> float:
        """Sum of squared deviations about an arbitrary centre ``mu``.

        Uses ``sum((y - mu)^2) = ss + n (ybar - mu)^2`` so the observations
        are not needed once summarized.
        """
        return self.ss + self.n * (self.ybar - mu) ** 2


def summarize(y: ArrayLike) -> SummaryStatistics:
    """Reduces an observation set to ``(n, ybar, ss)``.

    Args:
        y: Observations, scalar, (n,), or (n, 1).

    Returns:
        SummaryStatistics: Count, sample mean, and sum of squared deviations.

    Raises:
        ValueError: If ``y`` is empty, badly shaped, or holds non-finite values.
    """
    arr = _to_1d_vector(y)
    if arr.size == 0:
        raise ValueError("at least one observation is required")
    if not np.all(np.isfinite(arr)):
        raise ValueError("observations must be finite")

    ybar = float(arr.mean())
    ss = float(np.sum((arr - ybar) ** 2))
    return SummaryStatistics(n=int(arr.size), ybar=ybar, ss=ss)
