from collections.abc import Callable as CallableABC
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, ClassVar, Dict, Type
import logging
import math
import numbers

import numpy as np
from numpy.typing import NDArray

from ..custom_types import SeedLike
from ._utils import _as_rng, _check_finite, _check_positive, _check_positive_int, _check_count
from .module import Module, InputSpec
from .targets import make_log_target
from .summary import summarize
from .trace import Trace


__all__ = [
    "acceptance_probability",
    "MHResult",
    "metropolis_hastings",
    "sample_normal_mean",
    "MetropolisHastings",
    "NormalMeanPosterior",
]

logger = logging.getLogger(__name__)

# Heuristic acceptance-rate band for random-walk proposals; reported, never enforced.
TARGET_ACCEPTANCE = (0.23, 0.50)


def acceptance_probability(log_alpha: float) -> float:
    """Returns ``min(1, exp(log_alpha))``, always in [0, 1].

    ``log_alpha = -inf`` gives 0 and ``nan`` is treated as a rejection.
    """
    log_alpha = float(log_alpha)
    if math.isnan(log_alpha):
        return 0.0
    if log_alpha >= 0.0:
        return 1.0
    return math.exp(log_alpha)


@dataclass(frozen=True)
class MHResult:
    """Output of a Metropolis–Hastings run.

    Attributes:
        samples: Chain of length ``n_iter``; rejected iterations repeat the
            previous state.
        n_accepted: Number of accepted proposals.
    """
    samples: NDArray[np.floating] = field(repr=False)
    n_accepted: int

    def __post_init__(self):
        samples = np.array(self.samples, dtype=float).reshape(-1)
        samples.setflags(write=False)
        object.__setattr__(self, "samples", samples)

    @property
    def n_iter(self) -> int:
        return int(self.samples.shape[0])

    @property
    def acceptance_rate(self) -> float:
        return self.n_accepted / self.n_iter

    def to_trace(self, name: str = "mu") -> Trace:
        return Trace(self.samples, names=(name,), acceptance_rate=self.acceptance_rate)


def metropolis_hastings(
    log_target: Callable[[float], float],
    n_iter: int,
    init: float,
    proposal_std: float,
    *,
    rng: SeedLike = None,
) -> MHResult:
    """Random-walk Metropolis–Hastings for a scalar parameter.

    Each iteration proposes ``Normal(current, proposal_std)``. The proposal
    is symmetric, so the acceptance log-ratio is the difference of log
    targets, and the accept test ``log(u) < log_alpha`` stays on the log
    scale. The current state is appended every iteration, accepted or not.

    Args:
        log_target: Log of the (unnormalized) target density.
        n_iter: Number of iterations, a positive integer.
        init: Initial state of the chain, finite.
        proposal_std: Standard deviation of the normal proposal, > 0.
        rng: Generator (or seed) for the normal and uniform draws.

    Returns:
        MHResult: Chain of length ``n_iter`` and the acceptance count.

    Raises:
        ValueError: If a precondition on the arguments is violated, or the
            log target is ``nan`` at ``init``.
    """
    n_iter = _check_positive_int("n_iter", n_iter)
    current = _check_finite("init", init)
    proposal_std = _check_positive("proposal_std", proposal_std)
    rng = _as_rng(rng)

    current_lp = float(log_target(current))
    if math.isnan(current_lp):
        raise ValueError(f"log_target is nan at the initial state {current!r}")

    logger.debug("Metropolis-Hastings: %d iterations from %r, proposal_std=%g",
                 n_iter, current, proposal_std)

    samples = np.empty(n_iter, dtype=float)
    n_accepted = 0
    for i in range(n_iter):
        proposal = rng.normal(current, proposal_std)
        prop_lp = float(log_target(proposal))
        log_alpha = prop_lp - current_lp

        if np.log(rng.uniform()) < log_alpha:
            current = proposal
            current_lp = prop_lp
            n_accepted += 1

        samples[i] = current

    result = MHResult(samples=samples, n_accepted=n_accepted)
    rate = result.acceptance_rate
    logger.info("Metropolis-Hastings finished: %d iterations, acceptance rate %.3f", n_iter, rate)
    lo, hi = TARGET_ACCEPTANCE
    if not lo <= rate <= hi:
        logger.info("acceptance rate %.3f is outside %.2f-%.2f; consider retuning proposal_std=%g",
                    rate, lo, hi, proposal_std)
    return result


def sample_normal_mean(
    n: int,
    ybar: float,
    n_iter: int,
    mu_init: float,
    cand_sd: float,
    *,
    rng: SeedLike = None,
) -> MHResult:
    """Samples the mean of a unit-variance normal sample under a Cauchy prior.

    Args:
        n: Number of observations.
        ybar: Sample mean.
        n_iter: Number of iterations.
        mu_init: Initial value of the chain.
        cand_sd: Proposal standard deviation.
        rng: Generator (or seed).

    Returns:
        MHResult: See :func:`metropolis_hastings`.
    """
    n = _check_count("n", n)
    ybar = _check_finite("ybar", ybar)
    return metropolis_hastings(make_log_target(n, ybar), n_iter, mu_init, cand_sd, rng=rng)


class MetropolisHastings(Module):
    """Implements a basic Metropolis–Hastings (MH) sampler.

    Wraps :func:`metropolis_hastings` as a module so it can be injected as
    the sampler of higher-level posterior modules and run as a Prefect
    task.

    Attributes:
        DEPENDENCIES: Empty; the sampler only needs its inputs.

    Notes:
        - Stateless between calls: the chain lives inside one call.
        - Expects a callable ``log_target`` that returns the log-density of a state.
    """

    DEPENDENCIES = MappingProxyType({})

    def __init__(self):
        """Initializes the Metropolis–Hastings sampler.

        Declares ``log_target``, ``num_samples`` and ``initial_state`` as
        required inputs, ``proposal_std`` (default 1.0) and ``seed`` as
        optional ones.
        """
        super().__init__()
        self.set_input(
            log_target=InputSpec(type=CallableABC, required=True),
            num_samples=InputSpec(type=numbers.Integral, required=True),
            initial_state=InputSpec(type=numbers.Real, required=True),
            proposal_std=InputSpec(type=numbers.Real, required=False, default=1.0),
            seed=InputSpec(required=False, default=None),
        )
        self.run_func(self._sample_posterior, name="sample_posterior")

    def _sample_posterior(self, *, log_target, num_samples, initial_state, proposal_std=1.0, seed=None):
        """Draws samples from a target distribution using the MH algorithm.

        Args:
            log_target: Function that returns the log-density of a state.
            num_samples: Number of MCMC iterations to perform.
            initial_state: Initial value of the Markov chain.
            proposal_std: Standard deviation of the Normal proposal
                kernel. Defaults to 1.0.
            seed: Generator or integer seed; ``None`` draws fresh entropy.

        Returns:
            MHResult: The chain and its acceptance count.
        """
        return metropolis_hastings(log_target, num_samples, initial_state, proposal_std, rng=seed)


class NormalMeanPosterior(Module):
    """Posterior of a normal mean (unit variance) under a Cauchy prior.

    Summarizes the data, builds the log target and hands it to the injected
    sampler, then discards the burn-in.

    Attributes:
        DEPENDENCIES: ``'sampler'``, a :class:`MetropolisHastings` module.
    """

    DEPENDENCIES: ClassVar[Dict[str, Type[Module]]] = MappingProxyType({
        'sampler': MetropolisHastings,
    })

    def __init__(self, sampler: MetropolisHastings):
        super().__init__(sampler=sampler)
        self.set_input(
            data=InputSpec(required=True),
            num_samples=InputSpec(type=numbers.Integral, required=True),
            initial_param=InputSpec(type=numbers.Real, required=False, default=0.0),
            proposal_std=InputSpec(type=numbers.Real, required=False, default=1.0),
            burn_in=InputSpec(type=numbers.Integral, required=False, default=0),
            seed=InputSpec(required=False, default=None),
        )
        self.run_func(self._calculate_posterior, name="calculate_posterior")

    def _calculate_posterior(self, *, data, num_samples, initial_param=0.0,
                             proposal_std=1.0, burn_in=0, seed=None) -> Trace:
        """Runs the chain on ``data`` and returns the post-burn-in trace.

        Args:
            data: Observations.
            num_samples: Number of MCMC iterations, burn-in included.
            initial_param: Initial value of the chain.
            proposal_std: Proposal standard deviation.
            burn_in: Number of leading draws to discard.
            seed: Generator or integer seed.

        Returns:
            Trace: Draws of ``mu`` after burn-in, carrying the acceptance
            rate of the full run.
        """
        sampler = self.dependencies["sampler"]
        stats = summarize(data)
        log_g = make_log_target(stats.n, stats.ybar)

        # Call the plain method: the sampler's Prefect task is for workflows,
        # here an immediate result is needed.
        result = sampler._sample_posterior(
            log_target=log_g,
            num_samples=num_samples,
            initial_state=initial_param,
            proposal_std=proposal_std,
            seed=seed,
        )
        return result.to_trace("mu").burn_in(burn_in)
