"""
Example: Closed-form Conjugate Posteriors
-----------------------------------------

Beta-Binomial for a proportion and Gamma-Poisson for a rate.
"""

import numpy as np

from probchain import BetaBinomial, GammaPoisson

# 72 of 400 sampled patients had a complication
post = BetaBinomial(alpha=1.0, beta=1.0).update(successes=72, trials=400)
print(post, "mean:", round(post.mean(), 4), "95% CI:", post.credible_interval(0.95))

# chocolate chips per cookie
counts = np.array([12, 12, 6, 13, 12, 10, 11, 9, 14, 12])
rate_post = GammaPoisson(shape=8.0, rate=1.0).update(counts)
print(rate_post, "mean:", round(rate_post.mean(), 3), "95% CI:", rate_post.credible_interval(0.95))
