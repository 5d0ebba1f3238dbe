"""Scoreline probability grids.

A scoreline grid maps home goals to a mapping of away goals to probability.
Rows or cells that are missing, or hold ``None``, are probability zero by
contract.  Grids may come from an analytic independent Poisson model or from
normalised Monte Carlo scoreline counts.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, Mapping, Sequence, TypeAlias

from .sampling import poisson_pmf, validate_rate

logger = logging.getLogger(__name__)

ScorelineGrid: TypeAlias = Mapping[int, Mapping[int, float | None]]

DEFAULT_GOAL_CAP = 10


def validate_goal_cap(goal_cap: int) -> int:
    if isinstance(goal_cap, bool) or not isinstance(goal_cap, int):
        raise ValueError(f"goal_cap must be an integer, got {goal_cap!r}")
    if goal_cap < 1:
        raise ValueError(f"goal_cap must be at least 1, got {goal_cap}")
    return goal_cap


def _mapping_get(mapping: Mapping, goals: int) -> object:
    value = mapping.get(goals)
    if value is None:
        value = mapping.get(str(goals))
    return value


def grid_cell(grid: ScorelineGrid | Sequence[Sequence[float]], home: int, away: int) -> float:
    """Return the probability stored for ``home``-``away``.

    Absent rows and cells read as zero.  Mapping grids parsed from JSON may
    use string keys (``"1"``); those are read as the matching goal count.
    Negative or non-finite entries are rejected rather than silently coerced.
    """

    if isinstance(grid, Mapping):
        row = _mapping_get(grid, home)
    else:
        row = grid[home] if 0 <= home < len(grid) else None
    if row is None:
        return 0.0
    if isinstance(row, Mapping):
        value = _mapping_get(row, away)
    else:
        value = row[away] if 0 <= away < len(row) else None
    if value is None:
        return 0.0
    probability = float(value)
    if not math.isfinite(probability) or probability < 0.0:
        raise ValueError(
            f"Scoreline {home}-{away} has invalid probability {value!r}"
        )
    return probability


def grid_total(grid: ScorelineGrid, goal_cap: int = DEFAULT_GOAL_CAP) -> float:
    """Return the probability mass inside ``[0, goal_cap]`` on both axes."""

    validate_goal_cap(goal_cap)
    return sum(
        grid_cell(grid, home, away)
        for home in range(goal_cap + 1)
        for away in range(goal_cap + 1)
    )


def poisson_score_grid(
    home_rate: float,
    away_rate: float,
    goal_cap: int = DEFAULT_GOAL_CAP,
    *,
    normalize: bool = False,
) -> Dict[int, Dict[int, float]]:
    """Return the independent Poisson scoreline grid for two scoring rates.

    With ``normalize`` the capped grid is rescaled to sum to exactly one,
    folding the truncated tail back into the represented scorelines.
    """

    home_rate = validate_rate(home_rate, "home_rate")
    away_rate = validate_rate(away_rate, "away_rate")
    validate_goal_cap(goal_cap)
    home_pmf = [poisson_pmf(k, home_rate) for k in range(goal_cap + 1)]
    away_pmf = [poisson_pmf(k, away_rate) for k in range(goal_cap + 1)]
    grid = {
        home: {away: home_p * away_p for away, away_p in enumerate(away_pmf)}
        for home, home_p in enumerate(home_pmf)
    }
    if normalize:
        total = sum(sum(row.values()) for row in grid.values())
        if total > 0.0:
            grid = {
                home: {away: value / total for away, value in row.items()}
                for home, row in grid.items()
            }
    logger.debug(
        "Analytic grid for rates %.3f/%.3f with cap %d", home_rate, away_rate, goal_cap
    )
    return grid


def grid_from_counts(
    counts: Mapping[tuple[int, int], int],
    trials: int,
    goal_cap: int = DEFAULT_GOAL_CAP,
) -> Dict[int, Dict[int, float]]:
    """Normalise scoreline counts into frequencies.

    Scorelines beyond ``goal_cap`` on either side are dropped, so the grid
    sums to less than one when the simulation produced them.
    """

    validate_goal_cap(goal_cap)
    if trials <= 0:
        raise ValueError("trials must be positive")
    grid: Dict[int, Dict[int, float]] = {
        home: {away: 0.0 for away in range(goal_cap + 1)}
        for home in range(goal_cap + 1)
    }
    for (home, away), count in counts.items():
        if home > goal_cap or away > goal_cap:
            continue
        grid[home][away] += count / trials
    return grid


__all__ = [
    "DEFAULT_GOAL_CAP",
    "ScorelineGrid",
    "grid_cell",
    "grid_from_counts",
    "grid_total",
    "poisson_score_grid",
    "validate_goal_cap",
]
