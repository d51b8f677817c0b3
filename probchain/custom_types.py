# custom_types.py
"""
Type aliases shared across probchain.

We generally follow the conventions:
- Annotate function input with `ArrayLike`
- Accept a `PRNG` (or a seed) wherever a random draw is made
"""
from __future__ import annotations
from typing import TypeAlias, Union
from numpy.random import Generator as NumpyRNG

from numpy.typing import ArrayLike as NumpyArrayLike

ArrayLike: TypeAlias = NumpyArrayLike
PRNG: TypeAlias = NumpyRNG
SeedLike: TypeAlias = Union[int, NumpyRNG, None]
