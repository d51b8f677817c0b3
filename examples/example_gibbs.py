"""
Example: Gibbs Sampling for a Normal Mean and Variance
------------------------------------------------------

Model:
    y_i  ~ Normal(mu, sig2)
    mu   ~ Normal(0, 1)
    sig2 ~ InverseGamma(n_0 / 2, n_0 * s2_0 / 2),  n_0 = 2, s2_0 = 1

Both full conditionals are conjugate, so the sampler alternates exact
draws of sig2 | mu and mu | sig2.
"""

import numpy as np

from probchain import GibbsSampler, NormalPrior, gibbs_normal

y = np.array([1.2, 1.4, -0.5, 0.3, 0.9, 2.3, 1.0, 0.1, 1.3, 1.9])
prior = NormalPrior.from_prior_sample_size(mu_0=0.0, sig2_0=1.0, n_0=2.0, s2_0=1.0)

trace = gibbs_normal(y, 5000, init_mu=0.0, prior=prior, rng=np.random.default_rng(53))
kept = trace.burn_in(500)
for name, row in kept.summary().items():
    print(f"{name:>4}: mean={row['mean']:.3f}  95% CI=({row['lower']:.3f}, {row['upper']:.3f})")

# the same run through the Module interface, without Prefect's runtime
gs = GibbsSampler()
again = gs.sample_posterior.fn(data=y, num_samples=5000, prior=prior, seed=np.random.default_rng(53))
print("identical chains:", np.array_equal(trace.samples, again.samples))
