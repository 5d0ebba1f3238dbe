"""Regression tests for the Asian handicap fair odds calculator."""

from __future__ import annotations

import json
import math
from typing import Dict

import pytest

from matchquant.errors import InvalidLineError
from matchquant.handicap import (
    HANDICAP_LADDER,
    GoalDiffDistribution,
    LineKind,
    WinPushLose,
    classify_line,
    compute_asian_handicap_fair,
    home_wpl,
    to_fair_row,
)


@pytest.fixture()
def small_distribution() -> GoalDiffDistribution:
    return GoalDiffDistribution.from_differences({1: 0.5, 0: 0.3, -1: 0.2}, goal_cap=10)


def test_ladder_shape() -> None:
    assert len(HANDICAP_LADDER) == 17
    assert HANDICAP_LADDER[0] == -2.0
    assert HANDICAP_LADDER[-1] == 2.0
    assert list(HANDICAP_LADDER) == sorted(HANDICAP_LADDER)


@pytest.mark.parametrize(
    "line, kind",
    [
        (-2, LineKind.INTEGER),
        (0.0, LineKind.INTEGER),
        (1.5, LineKind.HALF),
        (-0.5, LineKind.HALF),
        (-0.25, LineKind.QUARTER),
        (1.75, LineKind.QUARTER),
        (0.1 + 0.15, LineKind.QUARTER),
        (0.30000000000000004 - 0.05, LineKind.QUARTER),
    ],
)
def test_classify_line(line: float, kind: LineKind) -> None:
    assert classify_line(line) is kind


@pytest.mark.parametrize("line", [0.3, 0.1, -1.2, math.nan, math.inf, "half"])
def test_invalid_lines_raise(line: object, small_distribution: GoalDiffDistribution) -> None:
    with pytest.raises(InvalidLineError):
        classify_line(line)  # type: ignore[arg-type]
    with pytest.raises(InvalidLineError):
        home_wpl(small_distribution, line)  # type: ignore[arg-type]


def test_invalid_line_is_a_value_error(small_distribution: GoalDiffDistribution) -> None:
    with pytest.raises(ValueError, match="0.25"):
        home_wpl(small_distribution, 0.3)


def test_range_queries(small_distribution: GoalDiffDistribution) -> None:
    dist = small_distribution
    assert dist.total == pytest.approx(1.0)
    assert dist.prob_ge(1) == pytest.approx(0.5)
    assert dist.prob_gt(0) == pytest.approx(0.5)
    assert dist.prob_le(0) == pytest.approx(0.5)
    assert dist.prob_lt(0) == pytest.approx(0.2)
    assert dist.prob_eq(0) == pytest.approx(0.3)
    assert dist.prob_between(-1, 1) == pytest.approx(1.0)


def test_queries_beyond_cap_degrade_to_zero(small_distribution: GoalDiffDistribution) -> None:
    dist = small_distribution
    assert dist.prob_ge(11) == 0.0
    assert dist.prob_gt(10) == 0.0
    assert dist.prob_le(-11) == 0.0
    assert dist.prob_eq(50) == 0.0
    assert dist.prob_eq(-50) == 0.0
    assert dist.prob_le(100) == pytest.approx(1.0)
    assert dist.prob_ge(-100) == pytest.approx(1.0)
    assert dist.prob_between(3, 2) == 0.0


def test_integer_line_pushes(small_distribution: GoalDiffDistribution) -> None:
    wpl = home_wpl(small_distribution, 0)
    assert wpl.win == pytest.approx(0.5)
    assert wpl.push == pytest.approx(0.3)
    assert wpl.lose == pytest.approx(0.2)

    wpl = home_wpl(small_distribution, -1)
    assert wpl.win == pytest.approx(0.0)
    assert wpl.push == pytest.approx(0.5)
    assert wpl.lose == pytest.approx(0.5)


def test_half_line_never_pushes(small_distribution: GoalDiffDistribution) -> None:
    wpl = home_wpl(small_distribution, -0.5)
    assert (wpl.win, wpl.push) == (pytest.approx(0.5), 0.0)
    assert wpl.lose == pytest.approx(0.5)

    wpl = home_wpl(small_distribution, 0.5)
    assert wpl.win == pytest.approx(0.8)
    assert wpl.push == 0.0
    assert wpl.lose == pytest.approx(0.2)


def test_quarter_line_splits_stake(small_distribution: GoalDiffDistribution) -> None:
    quarter = home_wpl(small_distribution, -0.25)
    whole = home_wpl(small_distribution, 0)
    half = home_wpl(small_distribution, -0.5)
    assert quarter == whole.average(half)
    assert quarter.win == pytest.approx(0.5)
    assert quarter.push == pytest.approx(0.15)
    assert quarter.lose == pytest.approx(0.35)


def test_fair_row_rounding_and_pricing(small_distribution: GoalDiffDistribution) -> None:
    row = to_fair_row(-0.25, home_wpl(small_distribution, -0.25))
    assert row.line == -0.25
    assert row.home_dnb_win_prob == 0.588235
    assert row.home_fair == 1.7

    row = to_fair_row(0, home_wpl(small_distribution, 0))
    assert row.home_dnb_win_prob == 0.714286
    assert row.home_fair == 1.4


def test_no_fair_price_when_home_cannot_win(small_distribution: GoalDiffDistribution) -> None:
    row = to_fair_row(-1.5, home_wpl(small_distribution, -1.5))
    assert row.home_win == 0.0
    assert row.home_dnb_win_prob == 0.0
    assert row.home_fair is None


def test_all_push_line_has_no_price() -> None:
    row = to_fair_row(0, WinPushLose(win=0.0, push=1.0, lose=0.0))
    assert row.home_dnb_win_prob == 0.0
    assert row.home_fair is None


def test_certain_win_prices_at_one(small_distribution: GoalDiffDistribution) -> None:
    row = to_fair_row(1, home_wpl(small_distribution, 1))
    assert row.home_lose == 0.0
    assert row.home_dnb_win_prob == 1.0
    assert row.home_fair == 1.0


def test_integer_lines_conserve_mass(home_favourite_grid: Dict[int, Dict[int, float]]) -> None:
    dist = GoalDiffDistribution(home_favourite_grid)
    for line in (-2, -1, 0, 1, 2):
        assert home_wpl(dist, line).total == pytest.approx(1.0, abs=1e-9)


def test_half_and_quarter_push(home_favourite_grid: Dict[int, Dict[int, float]]) -> None:
    dist = GoalDiffDistribution(home_favourite_grid)
    for line in HANDICAP_LADDER:
        kind = classify_line(line)
        wpl = home_wpl(dist, line)
        if kind is LineKind.HALF:
            assert wpl.push == 0.0
        elif kind is LineKind.QUARTER:
            lower = math.floor(line * 2) / 2
            upper = lower + 0.5
            integer_line = lower if classify_line(lower) is LineKind.INTEGER else upper
            assert wpl.push == 0.5 * home_wpl(dist, integer_line).push


def test_even_match_is_symmetric_at_level(even_grid: Dict[int, Dict[int, float]]) -> None:
    wpl = home_wpl(GoalDiffDistribution(even_grid), 0)
    assert wpl.win == pytest.approx(wpl.lose, abs=1e-12)
    rows = compute_asian_handicap_fair(even_grid)
    level = next(row for row in rows if row.line == 0.0)
    assert level.home_dnb_win_prob == pytest.approx(0.5, abs=1e-6)
    assert level.home_fair == 2.0


def test_full_ladder_in_order(home_favourite_grid: Dict[int, Dict[int, float]]) -> None:
    rows = compute_asian_handicap_fair(home_favourite_grid, 10)
    assert [row.line for row in rows] == list(HANDICAP_LADDER)
    for row in rows:
        assert row.home_win + row.home_push + row.home_lose == pytest.approx(1.0, abs=5e-6)
        assert row.home_fair is None or row.home_fair >= 1.0


@pytest.mark.parametrize(
    "grid",
    [
        {},
        {h: {a: 0.0 for a in range(11)} for h in range(11)},
        {0: {0: None}, 3: {}},
    ],
)
def test_all_zero_grid_has_no_prices(grid: dict) -> None:
    rows = compute_asian_handicap_fair(grid, 10)
    assert len(rows) == 17
    for row in rows:
        assert (row.home_win, row.home_push, row.home_lose) == (0.0, 0.0, 0.0)
        assert row.home_dnb_win_prob == 0.0
        assert row.home_fair is None


def test_cells_outside_cap_are_ignored() -> None:
    grid = {0: {0: 0.5}, 12: {0: 0.5}, 1: {14: 0.25}}
    dist = GoalDiffDistribution(grid, goal_cap=10)
    assert dist.total == pytest.approx(0.5)
    assert dist.buckets()[0] == pytest.approx(0.5)


def test_sequence_grid_is_accepted() -> None:
    grid = [[0.25, 0.25], [0.5]]
    dist = GoalDiffDistribution(grid, goal_cap=1)  # type: ignore[arg-type]
    assert dist.prob_eq(1) == pytest.approx(0.5)
    assert dist.prob_eq(-1) == pytest.approx(0.25)
    assert dist.prob_eq(0) == pytest.approx(0.25)


@pytest.mark.parametrize("goal_cap", [0, -3, 2.5, True])
def test_invalid_goal_cap(goal_cap: object) -> None:
    with pytest.raises(ValueError):
        GoalDiffDistribution({0: {0: 1.0}}, goal_cap)  # type: ignore[arg-type]


def test_invalid_cell_probability() -> None:
    with pytest.raises(ValueError, match="1-0"):
        GoalDiffDistribution({1: {0: -0.2}})


def test_row_to_dict(home_favourite_grid: Dict[int, Dict[int, float]]) -> None:
    row = compute_asian_handicap_fair(home_favourite_grid, lines=[-0.75])[0]
    assert set(row.to_dict()) == {
        "line",
        "home_win",
        "home_push",
        "home_lose",
        "home_dnb_win_prob",
        "home_fair",
    }


def test_json_decoded_grid_prices_like_integer_keys() -> None:
    decoded = json.loads('{"0": {"0": 0.3, "1": 0.2}, "1": {"0": 0.5}}')
    integer = {0: {0: 0.3, 1: 0.2}, 1: {0: 0.5}}
    assert compute_asian_handicap_fair(decoded, 3) == compute_asian_handicap_fair(integer, 3)
    level = compute_asian_handicap_fair(decoded, 3, lines=[0.0])[0]
    assert level.home_push == pytest.approx(0.3)
