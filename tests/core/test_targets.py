import numpy as np
import pytest

from probchain.core.targets import log_target, make_log_target, make_log_target_from_data


def test_log_target_formula():
    n, ybar = 10, 1.19
    for mu in (-3.0, 0.0, 0.7, 2.0):
        expected = n * (ybar * mu - mu ** 2 / 2) - np.log(1 + mu ** 2)
        assert log_target(mu, n, ybar) == pytest.approx(expected)


def test_log_target_is_vectorized():
    mus = np.linspace(-5, 5, 11)
    out = log_target(mus, 10, 1.19)
    assert out.shape == (11,)
    np.testing.assert_allclose(out, [log_target(m, 10, 1.19) for m in mus])


def test_log_target_without_data_is_cauchy_kernel():
    # n = 0 leaves only the log prior, maximized at zero
    assert log_target(0.0, 0, 1.19) == 0.0
    assert log_target(3.0, 0, 1.19) == pytest.approx(-np.log(10.0))


def test_log_target_is_finite_far_from_the_mode():
    assert np.isfinite(log_target(1e6, 10, 1.19))
    assert np.isfinite(log_target(-1e6, 10, 1.19))


def test_bound_targets_agree(course_data):
    a = make_log_target(10, course_data.mean())
    b = make_log_target_from_data(course_data)
    for mu in (-1.0, 0.5, 1.5):
        assert a(mu) == pytest.approx(b(mu))
