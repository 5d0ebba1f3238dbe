"""Poisson goal sampling primitives."""

from __future__ import annotations

import math
import random
from typing import Protocol, runtime_checkable

from .errors import InvalidRateError


@runtime_checkable
class RandomSource(Protocol):
    """Anything that yields uniform floats in ``[0, 1)``."""

    def random(self) -> float:
        """Return the next uniform value."""


def make_rng(seed: int | None = None) -> random.Random:
    """Return a generator seeded with ``seed`` (OS entropy when ``None``)."""

    return random.Random(seed)


def validate_rate(rate: float, name: str = "rate") -> float:
    """Return ``rate`` as a float, rejecting negative or non-finite values."""

    try:
        value = float(rate)
    except (TypeError, ValueError) as exc:
        raise InvalidRateError(f"{name} must be a number, got {rate!r}") from exc
    if not math.isfinite(value) or value < 0.0:
        raise InvalidRateError(f"{name} must be a finite non-negative number, got {rate!r}")
    return value


def poisson_sample(rate: float, rng: RandomSource) -> int:
    """Draw one Poisson variate with Knuth's multiplication method.

    The loop multiplies uniforms until the running product falls to
    ``exp(-rate)`` or below; the number of multiplications minus one is the
    sample.  A zero rate consumes exactly one uniform and returns 0.  The
    expected number of iterations is ``rate + 1``, which is fine for football
    scoring rates.
    """

    limit = math.exp(-validate_rate(rate))
    k = 0
    product = 1.0
    while True:
        k += 1
        product *= rng.random()
        if product <= limit:
            return k - 1


def poisson_pmf(k: int, rate: float) -> float:
    """Return ``P(X = k)`` for ``X ~ Poisson(rate)``."""

    rate = validate_rate(rate)
    if k < 0:
        return 0.0
    if rate == 0.0:
        return 1.0 if k == 0 else 0.0
    return math.exp(k * math.log(rate) - rate - math.lgamma(k + 1))


__all__ = [
    "RandomSource",
    "make_rng",
    "poisson_pmf",
    "poisson_sample",
    "validate_rate",
]
