"""Asian Handicap fair odds from scoreline probabilities.

The calculator collapses a scoreline grid into a goal-difference
distribution once, builds a prefix-sum table over it, and answers every
threshold query for the handicap ladder in constant time.  Lines are
classified as integer (push possible), half (no push) or quarter (stake
split across the two neighbouring half-step lines).
"""

from __future__ import annotations

import dataclasses
import enum
import logging
import math
from typing import Any, Dict, Iterable, List, Sequence

from .errors import InvalidLineError
from .grid import DEFAULT_GOAL_CAP, ScorelineGrid, grid_cell, validate_goal_cap
from .utils import probability_to_decimal, round_odds, round_probability

logger = logging.getLogger(__name__)

# Line values come from decimal literals; classification compares against
# the nearest quarter/half/whole step with this absolute tolerance.
LINE_TOLERANCE = 1e-9

HANDICAP_LADDER: tuple[float, ...] = (
    -2.0, -1.75, -1.5, -1.25, -1.0, -0.75, -0.5, -0.25,
    0.0, 0.25, 0.5, 0.75, 1.0, 1.25, 1.5, 1.75, 2.0,
)  # fmt: skip


class LineKind(str, enum.Enum):
    INTEGER = "integer"
    HALF = "half"
    QUARTER = "quarter"


def classify_line(line: float) -> LineKind:
    """Return the settlement kind of ``line``.

    Raises :class:`InvalidLineError` for values that are not a multiple of
    0.25 (within :data:`LINE_TOLERANCE`) or are not finite.
    """

    try:
        value = float(line)
    except (TypeError, ValueError) as exc:
        raise InvalidLineError(line) from exc
    if not math.isfinite(value):
        raise InvalidLineError(line)
    if abs(value - round(value)) < LINE_TOLERANCE:
        return LineKind.INTEGER
    if abs(value * 2 - round(value * 2)) < LINE_TOLERANCE:
        return LineKind.HALF
    if abs(value * 4 - round(value * 4)) < LINE_TOLERANCE:
        return LineKind.QUARTER
    raise InvalidLineError(line)


@dataclasses.dataclass(frozen=True, slots=True)
class WinPushLose:
    """Home side outcome probabilities at a handicap line."""

    win: float
    push: float
    lose: float

    @property
    def total(self) -> float:
        return self.win + self.push + self.lose

    def average(self, other: "WinPushLose") -> "WinPushLose":
        return WinPushLose(
            win=0.5 * (self.win + other.win),
            push=0.5 * (self.push + other.push),
            lose=0.5 * (self.lose + other.lose),
        )


class GoalDiffDistribution:
    """Goal difference distribution with O(1) range queries.

    Index ``d + goal_cap`` of the bucket array holds ``P(home - away = d)``
    for ``d`` in ``[-goal_cap, goal_cap]``.  Queries that reach outside that
    domain are clamped to it, so the probability beyond the range is zero
    rather than an error.
    """

    __slots__ = ("_goal_cap", "_buckets", "_prefix")

    def __init__(self, grid: ScorelineGrid, goal_cap: int = DEFAULT_GOAL_CAP) -> None:
        self._goal_cap = validate_goal_cap(goal_cap)
        buckets = [0.0] * (2 * goal_cap + 1)
        for home in range(goal_cap + 1):
            for away in range(goal_cap + 1):
                probability = grid_cell(grid, home, away)
                if probability:
                    buckets[home - away + goal_cap] += probability
        prefix = [0.0] * (len(buckets) + 1)
        for index, value in enumerate(buckets):
            prefix[index + 1] = prefix[index] + value
        self._buckets = tuple(buckets)
        self._prefix = tuple(prefix)

    @classmethod
    def from_differences(
        cls, probabilities: Dict[int, float], goal_cap: int = DEFAULT_GOAL_CAP
    ) -> "GoalDiffDistribution":
        """Build directly from ``{difference: probability}``."""

        validate_goal_cap(goal_cap)
        grid: Dict[int, Dict[int, float]] = {}
        for diff, probability in probabilities.items():
            if abs(diff) > goal_cap:
                continue
            home, away = (diff, 0) if diff >= 0 else (0, -diff)
            row = grid.setdefault(home, {})
            row[away] = row.get(away, 0.0) + probability
        return cls(grid, goal_cap)

    @property
    def goal_cap(self) -> int:
        return self._goal_cap

    @property
    def total(self) -> float:
        return self._prefix[-1]

    def buckets(self) -> Dict[int, float]:
        return {
            index - self._goal_cap: value for index, value in enumerate(self._buckets)
        }

    def prob_between(self, low: int, high: int) -> float:
        """Return ``P(low <= diff <= high)``."""

        low = max(low, -self._goal_cap)
        high = min(high, self._goal_cap)
        if high < low:
            return 0.0
        return self._prefix[high + self._goal_cap + 1] - self._prefix[low + self._goal_cap]

    def prob_ge(self, x: int) -> float:
        return self.prob_between(x, self._goal_cap)

    def prob_gt(self, x: int) -> float:
        return self.prob_ge(x + 1)

    def prob_le(self, x: int) -> float:
        return self.prob_between(-self._goal_cap, x)

    def prob_lt(self, x: int) -> float:
        return self.prob_le(x - 1)

    def prob_eq(self, x: int) -> float:
        if abs(x) > self._goal_cap:
            return 0.0
        return self._buckets[x + self._goal_cap]


def _single_line(distribution: GoalDiffDistribution, line: float, kind: LineKind) -> WinPushLose:
    if kind is LineKind.INTEGER:
        threshold = -int(round(line))
        return WinPushLose(
            win=distribution.prob_gt(threshold),
            push=distribution.prob_eq(threshold),
            lose=distribution.prob_lt(threshold),
        )
    # Half line: -line is x.5, home wins from floor(-line) + 1 upwards.
    largest_lose = math.floor(-round(line * 2) / 2)
    return WinPushLose(
        win=distribution.prob_ge(largest_lose + 1),
        push=0.0,
        lose=distribution.prob_le(largest_lose),
    )


def home_wpl(distribution: GoalDiffDistribution, line: float) -> WinPushLose:
    """Return home win/push/lose probabilities for ``line``.

    Quarter lines average the two adjacent half-step lines with equal
    weight.  One of those sub-lines is always a whole number, so a quarter
    line carries half of that sub-line's push probability.
    """

    kind = classify_line(line)
    if kind is not LineKind.QUARTER:
        return _single_line(distribution, line, kind)
    lower = math.floor(round(line * 4) / 2) / 2
    upper = lower + 0.5
    first = _single_line(distribution, lower, classify_line(lower))
    second = _single_line(distribution, upper, classify_line(upper))
    return first.average(second)


@dataclasses.dataclass(frozen=True, slots=True)
class FairOddsRow:
    """Fair pricing of the home side at one handicap line."""

    line: float
    home_win: float
    home_push: float
    home_lose: float
    home_dnb_win_prob: float
    home_fair: float | None

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


def to_fair_row(line: float, wpl: WinPushLose) -> FairOddsRow:
    """Remove the push mass and price the remaining home win probability.

    When neither a win nor a loss is possible the push-free probability is
    zero and the fair price is ``None``.
    """

    decided = wpl.win + wpl.lose
    dnb_win = wpl.win / decided if decided > 0.0 else 0.0
    fair = probability_to_decimal(min(dnb_win, 1.0))
    return FairOddsRow(
        line=float(line),
        home_win=round_probability(wpl.win),
        home_push=round_probability(wpl.push),
        home_lose=round_probability(wpl.lose),
        home_dnb_win_prob=round_probability(dnb_win),
        home_fair=None if fair is None else round_odds(fair),
    )


def compute_asian_handicap_fair(
    grid: ScorelineGrid,
    goal_cap: int = DEFAULT_GOAL_CAP,
    lines: Sequence[float] | Iterable[float] = HANDICAP_LADDER,
) -> List[FairOddsRow]:
    """Return one :class:`FairOddsRow` per line, in the order given."""

    distribution = GoalDiffDistribution(grid, goal_cap)
    rows = [to_fair_row(line, home_wpl(distribution, line)) for line in lines]
    logger.debug(
        "Priced %d handicap lines over %.6f probability mass (cap %d)",
        len(rows),
        distribution.total,
        goal_cap,
    )
    return rows


__all__ = [
    "FairOddsRow",
    "GoalDiffDistribution",
    "HANDICAP_LADDER",
    "LINE_TOLERANCE",
    "LineKind",
    "WinPushLose",
    "classify_line",
    "compute_asian_handicap_fair",
    "home_wpl",
    "to_fair_row",
]
