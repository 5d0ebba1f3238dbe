"""Reusable odds and probability helpers."""

from __future__ import annotations

import math

PROBABILITY_DIGITS = 6
ODDS_DIGITS = 2

__all__ = [
    "ODDS_DIGITS",
    "PROBABILITY_DIGITS",
    "decimal_to_american",
    "implied_probability_from_decimal",
    "probability_to_decimal",
    "round_odds",
    "round_probability",
]


def round_probability(value: float) -> float:
    """Round a probability to the precision used in published tables."""

    return round(float(value), PROBABILITY_DIGITS)


def round_odds(value: float) -> float:
    """Round decimal odds to two places."""

    return round(float(value), ODDS_DIGITS)


def probability_to_decimal(probability: float) -> float | None:
    """Return fair decimal odds for ``probability``.

    ``None`` signals that no fair price exists (probability of zero), so the
    caller never sees an infinite or divide-by-zero price.
    """

    if not math.isfinite(probability) or probability <= 0.0:
        return None
    if probability > 1.0:
        raise ValueError("Probability cannot exceed 1.0")
    return 1.0 / probability


def decimal_to_american(decimal_odds: float) -> int:
    """Convert decimal odds to their American representation."""

    if decimal_odds <= 1.0:
        raise ValueError("Decimal odds must exceed 1.0")
    if decimal_odds >= 2.0:
        return int(round((decimal_odds - 1.0) * 100.0))
    return int(round(-100.0 / (decimal_odds - 1.0)))


def implied_probability_from_decimal(decimal_odds: float) -> float:
    """Return the implied win probability from decimal odds."""

    if decimal_odds < 1.0:
        raise ValueError("Decimal odds must be at least 1.0")
    return 1.0 / decimal_odds
