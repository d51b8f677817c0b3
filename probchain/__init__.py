"""probchain: Metropolis-Hastings and Gibbs samplers for conjugate-normal coursework models."""

from probchain.core.summary import SummaryStatistics, summarize
from probchain.core.targets import log_target, make_log_target, make_log_target_from_data
from probchain.core.trace import Trace
from probchain.core.module import Module, InputSpec
from probchain.core.mcmc import (
    acceptance_probability,
    MHResult,
    metropolis_hastings,
    sample_normal_mean,
    MetropolisHastings,
    NormalMeanPosterior,
)
from probchain.core.gibbs import (
    NormalPrior,
    mu_full_conditional,
    sig2_full_conditional,
    update_mu,
    update_sig2,
    gibbs_normal,
    GibbsSampler,
)
from probchain.core.conjugate import ConjugateModel, BetaBinomial, GammaPoisson, NormalKnownVariance

__version__ = "0.1.0"
