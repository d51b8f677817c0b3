import pytest
import numpy as np
from prefect.testing.utilities import prefect_test_harness

from probchain.core.gibbs import NormalPrior


@pytest.fixture
def rng():
    return np.random.default_rng(42)

@pytest.fixture
def course_data():
    # percentage change in total personnel, ten companies; mean 0.99.
    # The Metropolis-Hastings tests use the literal ybar = 1.19, not this mean.
    return np.array([1.2, 1.4, -0.5, 0.3, 0.9, 2.3, 1.0, 0.1, 1.3, 1.9])

@pytest.fixture
def normal_prior():
    return NormalPrior.from_prior_sample_size(mu_0=0.0, sig2_0=1.0, n_0=2.0, s2_0=1.0)

@pytest.fixture(scope="session")
def prefect_backend():
    # temporary database for tests that run real flows
    with prefect_test_harness():
        yield
