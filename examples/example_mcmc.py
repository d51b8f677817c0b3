"""
Example: Metropolis–Hastings for a Normal Mean with a Cauchy Prior
------------------------------------------------------------------

Model:
    y_i ~ Normal(mu, 1)
    mu  ~ Cauchy(0, 1)

The posterior is not in closed form, so we draw from it with a
random-walk Metropolis–Hastings sampler and compare three proposal
standard deviations by their acceptance rates.
"""

import logging

import numpy as np
from prefect import flow

from probchain import MetropolisHastings, NormalMeanPosterior, sample_normal_mean, summarize

logging.basicConfig(level=logging.INFO)

# percentage change in total personnel, ten companies
y = np.array([1.2, 1.4, -0.5, 0.3, 0.9, 2.3, 1.0, 0.1, 1.3, 1.9])
stats = summarize(y)

for cand_sd in (0.05, 0.9, 3.0):
    res = sample_normal_mean(stats.n, stats.ybar, 1000, 0.0, cand_sd, rng=np.random.default_rng(43))
    print(f"cand_sd={cand_sd:<4} acceptance rate={res.acceptance_rate:.3f}")


@flow
def normal_mean_posterior():
    posterior = NormalMeanPosterior(sampler=MetropolisHastings())
    return posterior.calculate_posterior(
        data=y,
        num_samples=1000,
        initial_param=0.0,
        proposal_std=0.9,
        burn_in=100,
        seed=43,
    )


trace = normal_mean_posterior()
print("Posterior summary:", trace.summary()["mu"])
print("Acceptance rate:", trace.acceptance_rate)
