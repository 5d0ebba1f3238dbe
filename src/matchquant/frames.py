"""Polars views over handicap and simulation results."""

from __future__ import annotations

from typing import Sequence

import polars as pl

from .handicap import FairOddsRow
from .simulator import SimulationSummary, scoreline_sort_key
from .utils import decimal_to_american

FAIR_ODDS_SCHEMA = {
    "line": pl.Float64,
    "home_win": pl.Float64,
    "home_push": pl.Float64,
    "home_lose": pl.Float64,
    "home_dnb_win_prob": pl.Float64,
    "home_fair": pl.Float64,
    "home_fair_american": pl.Int64,
}

SCORELINE_SCHEMA = {
    "home_goals": pl.Int64,
    "away_goals": pl.Int64,
    "count": pl.Int64,
    "probability": pl.Float64,
}


def _american(decimal_odds: float | None) -> int | None:
    # A fair price of 1.0 (certain win) has no American equivalent.
    if decimal_odds is None or decimal_odds <= 1.0:
        return None
    return decimal_to_american(decimal_odds)


def fair_odds_frame(rows: Sequence[FairOddsRow]) -> pl.DataFrame:
    """Return handicap rows as a DataFrame, one row per line."""

    records = [
        {**row.to_dict(), "home_fair_american": _american(row.home_fair)}
        for row in rows
    ]
    return pl.DataFrame(records, schema=FAIR_ODDS_SCHEMA)


def scoreline_frame(summary: SimulationSummary) -> pl.DataFrame:
    """Return every simulated scoreline, most frequent first."""

    ranked = sorted(
        summary.scoreline_counts.items(), key=lambda item: scoreline_sort_key(*item)
    )
    records = [
        {
            "home_goals": home,
            "away_goals": away,
            "count": count,
            "probability": count / summary.trials,
        }
        for (home, away), count in ranked
    ]
    return pl.DataFrame(records, schema=SCORELINE_SCHEMA)


__all__ = ["fair_odds_frame", "scoreline_frame"]
