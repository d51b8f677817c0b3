import math
import numbers

import numpy as np
from numpy.typing import NDArray

from ..custom_types import ArrayLike, PRNG, SeedLike


def _as_rng(rng: SeedLike = None) -> PRNG:
    """Coerces a seed or generator into a :class:`numpy.random.Generator`.

    A generator is returned unchanged so that callers keep control over the
    stream of draws; an integer seed or ``None`` goes through
    ``np.random.default_rng``.

    Args:
        rng: Existing generator, integer seed, or ``None``.

    Returns:
        PRNG: Generator to draw variates from.
    """
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def _to_1d_vector(values: ArrayLike) -> NDArray[np.floating]:
    """Normalizes input to a 1-D float vector of shape (n,).

    Accepts scalars, 1-D arrays, or 2-D column vectors. The result is always
    a fresh array, so callers' buffers are never aliased.

    Args:
        values: Input values as scalar, (n,), or (n, 1).

    Returns:
        NDArray[np.floating]: Flattened 1-D array.

    Raises:
        ValueError: If the input is not scalar, (n,), or (n, 1).
    """
    arr = np.array(values, dtype=float)
    if arr.ndim == 0:
        return arr.reshape(1)
    if arr.ndim == 1:
        return arr
    if arr.ndim == 2 and arr.shape[1] == 1:
        return arr[:, 0]
    raise ValueError("values must be scalar, (n,), or (n,1).")


def _check_positive(name: str, value) -> float:
    """Returns ``value`` as a float, raising unless it is finite and > 0."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ValueError(f"{name} must be a real number; got {type(value).__name__}")
    value = float(value)
    if not math.isfinite(value) or value <= 0.0:
        raise ValueError(f"{name} must be a positive finite number; got {value!r}")
    return value


def _check_finite(name: str, value) -> float:
    """Returns ``value`` as a float, raising unless it is finite."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ValueError(f"{name} must be a real number; got {type(value).__name__}")
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite; got {value!r}")
    return value


def _check_positive_int(name: str, value) -> int:
    """Returns ``value`` as an int, raising unless it is an integer >= 1."""
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ValueError(f"{name} must be an integer; got {type(value).__name__}")
    if value < 1:
        raise ValueError(f"{name} must be a positive integer; got {value!r}")
    return int(value)


def _check_count(name: str, value) -> int:
    """Returns ``value`` as an int, raising unless it is an integer >= 0."""
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ValueError(f"{name} must be an integer; got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative; got {value!r}")
    return int(value)
