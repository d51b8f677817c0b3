from .summary import SummaryStatistics, summarize
from .targets import log_target, make_log_target, make_log_target_from_data
from .trace import Trace
from .module import Module, InputSpec
from .mcmc import (
    acceptance_probability,
    MHResult,
    metropolis_hastings,
    sample_normal_mean,
    MetropolisHastings,
    NormalMeanPosterior,
)
from .gibbs import (
    NormalPrior,
    mu_full_conditional,
    sig2_full_conditional,
    update_mu,
    update_sig2,
    gibbs_normal,
    GibbsSampler,
)
from .conjugate import ConjugateModel, BetaBinomial, GammaPoisson, NormalKnownVariance
