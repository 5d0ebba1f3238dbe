"""Monte Carlo match simulation over independent Poisson scoring."""

from __future__ import annotations

import dataclasses
import logging
import math
from typing import Any, Dict, List, Mapping, MutableMapping, Tuple

from .grid import DEFAULT_GOAL_CAP, grid_from_counts
from .sampling import RandomSource, make_rng, poisson_sample, validate_rate

logger = logging.getLogger(__name__)

DEFAULT_TRIALS = 10_000
MIN_TRIALS = 1_000
MAX_TRIALS = 200_000
# Three or more total goals settles "over 2.5".
DEFAULT_OVER_THRESHOLD = 3
PERCENT_DIGITS = 1
AVERAGE_DIGITS = 2

Scoreline = Tuple[int, int]


def clamp_trial_count(
    value: object,
    *,
    default: int = DEFAULT_TRIALS,
    minimum: int = MIN_TRIALS,
    maximum: int = MAX_TRIALS,
) -> int:
    """Return a usable trial count for ``value``.

    Missing, non-numeric, non-finite, zero or negative requests fall back to
    ``default``; anything else is floored and clamped into
    ``[minimum, maximum]``.  The adjustment is silent for the caller.
    """

    requested: int | float
    if isinstance(value, bool):
        requested = math.nan
    elif isinstance(value, int):
        # Integers beyond float range still clamp to ``maximum``.
        requested = value
    else:
        try:
            requested = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError, OverflowError):
            requested = math.nan
    if (isinstance(requested, float) and not math.isfinite(requested)) or requested <= 0:
        logger.debug("Trial count %r unusable; falling back to %d", value, default)
        return default
    trials = max(minimum, min(maximum, math.floor(requested)))
    if trials != requested:
        logger.debug("Trial count %r clamped to %d", value, trials)
    return trials


def scoreline_sort_key(scoreline: Scoreline, count: int) -> Tuple[int, int, int]:
    """Ordering used to rank scorelines.

    Most frequent first; ties go to the lowest total goals, then the lowest
    home goals.  The key depends only on the scoreline, so merged shard
    tallies rank identically whatever order they were combined in.
    """

    home, away = scoreline
    return (-count, home + away, home)


@dataclasses.dataclass(slots=True)
class SimulationOptions:
    """Optional knobs for :func:`simulate_match`."""

    home_advantage: float = 1.0
    max_goals_per_side: int | None = None
    rng: RandomSource | None = None
    seed: int | None = None
    over_threshold: int = DEFAULT_OVER_THRESHOLD
    top_n: int = 5
    default_trials: int = DEFAULT_TRIALS
    min_trials: int = MIN_TRIALS
    max_trials: int = MAX_TRIALS


@dataclasses.dataclass(slots=True)
class ScorelineFrequency:
    home: int
    away: int
    count: int
    probability: float

    @property
    def label(self) -> str:
        return f"{self.home}-{self.away}"


@dataclasses.dataclass(slots=True)
class SimulationTally:
    """Counters accumulated over independent trials."""

    over_threshold: int = DEFAULT_OVER_THRESHOLD
    trials: int = 0
    home_wins: int = 0
    draws: int = 0
    away_wins: int = 0
    over: int = 0
    both_scored: int = 0
    home_goals: int = 0
    away_goals: int = 0
    scorelines: MutableMapping[Scoreline, int] = dataclasses.field(default_factory=dict)

    def record(self, home: int, away: int) -> None:
        self.trials += 1
        if home > away:
            self.home_wins += 1
        elif home == away:
            self.draws += 1
        else:
            self.away_wins += 1
        if home + away >= self.over_threshold:
            self.over += 1
        if home >= 1 and away >= 1:
            self.both_scored += 1
        self.home_goals += home
        self.away_goals += away
        key = (home, away)
        self.scorelines[key] = self.scorelines.get(key, 0) + 1

    def merge(self, other: "SimulationTally") -> "SimulationTally":
        """Return a new tally holding the sum of both tallies."""

        if other.over_threshold != self.over_threshold:
            raise ValueError("Cannot merge tallies with different over thresholds")
        scorelines: Dict[Scoreline, int] = dict(self.scorelines)
        for key, count in other.scorelines.items():
            scorelines[key] = scorelines.get(key, 0) + count
        return SimulationTally(
            over_threshold=self.over_threshold,
            trials=self.trials + other.trials,
            home_wins=self.home_wins + other.home_wins,
            draws=self.draws + other.draws,
            away_wins=self.away_wins + other.away_wins,
            over=self.over + other.over,
            both_scored=self.both_scored + other.both_scored,
            home_goals=self.home_goals + other.home_goals,
            away_goals=self.away_goals + other.away_goals,
            scorelines=scorelines,
        )

    def top_scorelines(self, n: int) -> List[ScorelineFrequency]:
        ranked = sorted(
            self.scorelines.items(), key=lambda item: scoreline_sort_key(*item)
        )
        return [
            ScorelineFrequency(
                home=home,
                away=away,
                count=count,
                probability=count / self.trials if self.trials else 0.0,
            )
            for (home, away), count in ranked[: max(0, n)]
        ]

    def most_frequent(self) -> ScorelineFrequency | None:
        top = self.top_scorelines(1)
        return top[0] if top else None


def _percent(count: int, trials: int) -> float:
    return round(100.0 * count / trials, PERCENT_DIGITS)


@dataclasses.dataclass(slots=True)
class SimulationSummary:
    """Headline percentages and scoreline frequencies from one run."""

    trials: int
    home_rate: float
    away_rate: float
    home_win_pct: float
    draw_pct: float
    away_win_pct: float
    over_pct: float
    under_pct: float
    both_scored_pct: float
    both_scored_no_pct: float
    home_avg_goals: float
    away_avg_goals: float
    most_likely_score: Scoreline
    most_likely_count: int
    top_scorelines: List[ScorelineFrequency]
    scoreline_counts: Mapping[Scoreline, int]
    over_threshold: int = DEFAULT_OVER_THRESHOLD

    @classmethod
    def from_tally(
        cls,
        tally: SimulationTally,
        *,
        home_rate: float,
        away_rate: float,
        top_n: int = 5,
    ) -> "SimulationSummary":
        best = tally.most_frequent()
        if tally.trials <= 0 or best is None:
            raise ValueError("Cannot summarise an empty tally")
        trials = tally.trials
        return cls(
            trials=trials,
            home_rate=home_rate,
            away_rate=away_rate,
            home_win_pct=_percent(tally.home_wins, trials),
            draw_pct=_percent(tally.draws, trials),
            away_win_pct=_percent(tally.away_wins, trials),
            over_pct=_percent(tally.over, trials),
            under_pct=_percent(trials - tally.over, trials),
            both_scored_pct=_percent(tally.both_scored, trials),
            both_scored_no_pct=_percent(trials - tally.both_scored, trials),
            home_avg_goals=round(tally.home_goals / trials, AVERAGE_DIGITS),
            away_avg_goals=round(tally.away_goals / trials, AVERAGE_DIGITS),
            most_likely_score=(best.home, best.away),
            most_likely_count=best.count,
            top_scorelines=tally.top_scorelines(top_n),
            scoreline_counts=dict(tally.scorelines),
            over_threshold=tally.over_threshold,
        )

    @property
    def most_likely_label(self) -> str:
        home, away = self.most_likely_score
        return f"{home}-{away}"

    def scoreline_grid(self, goal_cap: int = DEFAULT_GOAL_CAP) -> Dict[int, Dict[int, float]]:
        """Return simulated scoreline frequencies as a scoreline grid."""

        return grid_from_counts(self.scoreline_counts, self.trials, goal_cap)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trials": self.trials,
            "home_rate": self.home_rate,
            "away_rate": self.away_rate,
            "home_win_pct": self.home_win_pct,
            "draw_pct": self.draw_pct,
            "away_win_pct": self.away_win_pct,
            "over_threshold": self.over_threshold,
            "over_pct": self.over_pct,
            "under_pct": self.under_pct,
            "both_scored_pct": self.both_scored_pct,
            "both_scored_no_pct": self.both_scored_no_pct,
            "home_avg_goals": self.home_avg_goals,
            "away_avg_goals": self.away_avg_goals,
            "most_likely_score": self.most_likely_label,
            "most_likely_count": self.most_likely_count,
            "top_scorelines": [
                {"score": item.label, "count": item.count, "probability": item.probability}
                for item in self.top_scorelines
            ],
        }


def run_trials(
    home_rate: float,
    away_rate: float,
    trials: int,
    rng: RandomSource,
    *,
    max_goals_per_side: int | None = None,
    over_threshold: int = DEFAULT_OVER_THRESHOLD,
) -> SimulationTally:
    """Run exactly ``trials`` draws and return the raw tally.

    Rates are used as given; callers validate them and apply any home
    advantage first.  Home goals are drawn before away goals in each trial.
    """

    tally = SimulationTally(over_threshold=over_threshold)
    for _ in range(trials):
        home = poisson_sample(home_rate, rng)
        away = poisson_sample(away_rate, rng)
        if max_goals_per_side is not None:
            home = min(home, max_goals_per_side)
            away = min(away, max_goals_per_side)
        tally.record(home, away)
    return tally


def simulate_match(
    home_rate: float,
    away_rate: float,
    trials: object = DEFAULT_TRIALS,
    options: SimulationOptions | None = None,
) -> SimulationSummary:
    """Simulate ``trials`` matches and summarise the outcome frequencies.

    Parameters
    ----------
    home_rate, away_rate:
        Expected goals for each side.  Negative or non-finite values raise
        :class:`~matchquant.errors.InvalidRateError`.
    trials:
        Requested trial count, passed through :func:`clamp_trial_count`.
    options:
        Home advantage multiplier, per-side goal cap, random source and
        reporting settings.  A seeded generator makes runs reproducible.
    """

    options = options or SimulationOptions()
    home_rate = validate_rate(home_rate, "home_rate")
    away_rate = validate_rate(away_rate, "away_rate")
    advantage = validate_rate(options.home_advantage, "home_advantage")
    cap = options.max_goals_per_side
    if cap is not None and cap < 0:
        raise ValueError(f"max_goals_per_side must be non-negative, got {cap}")
    trial_count = clamp_trial_count(
        trials,
        default=options.default_trials,
        minimum=options.min_trials,
        maximum=options.max_trials,
    )
    rng = options.rng if options.rng is not None else make_rng(options.seed)
    effective_home = home_rate * advantage

    tally = run_trials(
        effective_home,
        away_rate,
        trial_count,
        rng,
        max_goals_per_side=cap,
        over_threshold=options.over_threshold,
    )
    summary = SimulationSummary.from_tally(
        tally,
        home_rate=effective_home,
        away_rate=away_rate,
        top_n=options.top_n,
    )
    logger.debug(
        "Simulated %d trials at %.3f/%.3f -> %.1f%% / %.1f%% / %.1f%%",
        trial_count,
        effective_home,
        away_rate,
        summary.home_win_pct,
        summary.draw_pct,
        summary.away_win_pct,
    )
    return summary


__all__ = [
    "DEFAULT_OVER_THRESHOLD",
    "DEFAULT_TRIALS",
    "MAX_TRIALS",
    "MIN_TRIALS",
    "ScorelineFrequency",
    "SimulationOptions",
    "SimulationSummary",
    "SimulationTally",
    "clamp_trial_count",
    "run_trials",
    "scoreline_sort_key",
    "simulate_match",
]
