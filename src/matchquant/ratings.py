"""Team attack/defense rating tables and scoring-rate blending."""

from __future__ import annotations

import dataclasses
import logging
import math
import os
import re
from pathlib import Path
from typing import Dict, List, Mapping

import yaml

from .errors import MissingRatingError, RatingDataError

logger = logging.getLogger(__name__)

ATTACK_KEYS = ("att", "xg", "xg_for", "xgf")
DEFENSE_KEYS = ("def", "xga", "xg_against", "xga_for")

MIN_RATE = 0.05
MAX_RATE = 4.5

_WHITESPACE = re.compile(r"\s+")
_PUNCTUATION = re.compile(r"[’'\".,()/\-]")


def clean_name(value: object) -> str:
    """Collapse whitespace (including non-breaking spaces) and strip."""

    if value is None:
        return ""
    text = str(value).replace("\u00a0", " ")
    return _WHITESPACE.sub(" ", text).strip()


def key_name(value: object) -> str:
    """Case-insensitive, punctuation-free matching key for a name."""

    lowered = _PUNCTUATION.sub("", clean_name(value).lower())
    return _WHITESPACE.sub(" ", lowered).strip()


def _finite_number(value: object) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _first_number(values: Mapping[str, object], keys: tuple[str, ...]) -> float | None:
    for key in keys:
        number = _finite_number(values.get(key))
        if number is not None:
            return number
    return None


@dataclasses.dataclass(frozen=True, slots=True)
class TeamRating:
    """Expected goals for and against, per match."""

    team: str
    attack: float
    defense: float


@dataclasses.dataclass(frozen=True, slots=True)
class MatchRates:
    home_team: str
    away_team: str
    home_rate: float
    away_rate: float


class RatingTable:
    """League and team ratings loaded for one request.

    Instances are built from a mapping or a file and passed explicitly to
    whatever needs them; there is no shared module level table.
    """

    def __init__(self, leagues: Mapping[str, Mapping[str, TeamRating]]) -> None:
        self._leagues: Dict[str, Dict[str, TeamRating]] = {
            league: dict(teams) for league, teams in leagues.items()
        }

    @classmethod
    def from_mapping(cls, raw: Mapping[str, object]) -> "RatingTable":
        """Normalise ``{league: {team: {att, def}}}`` style data.

        Attack and defense are read from the first present alias in
        :data:`ATTACK_KEYS` / :data:`DEFENSE_KEYS`.  Teams without finite
        values are skipped and empty leagues dropped.
        """

        if not isinstance(raw, Mapping):
            raise RatingDataError("Rating data must be a mapping of leagues")
        leagues: Dict[str, Dict[str, TeamRating]] = {}
        skipped = 0
        for league_raw, teams_raw in raw.items():
            league = clean_name(league_raw)
            if not league or not isinstance(teams_raw, Mapping):
                continue
            teams: Dict[str, TeamRating] = {}
            for team_raw, values in teams_raw.items():
                team = clean_name(team_raw)
                if not team or not isinstance(values, Mapping):
                    skipped += 1
                    continue
                attack = _first_number(values, ATTACK_KEYS)
                defense = _first_number(values, DEFENSE_KEYS)
                if attack is None or defense is None:
                    skipped += 1
                    continue
                teams[team] = TeamRating(team=team, attack=attack, defense=defense)
            if teams:
                leagues[league] = teams
        if not leagues:
            raise RatingDataError("No valid team ratings found; check the table format")
        if skipped:
            logger.warning("Skipped %d team entries without usable ratings", skipped)
        return cls(leagues)

    @classmethod
    def load(cls, path: str | os.PathLike[str]) -> "RatingTable":
        """Load a JSON or YAML rating file."""

        source = Path(path)
        if not source.exists():
            raise FileNotFoundError(source)
        with source.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
        table = cls.from_mapping(data)
        logger.info("Loaded ratings for %d leagues from %s", len(table.leagues()), source)
        return table

    def leagues(self) -> List[str]:
        return sorted(self._leagues)

    def teams(self, league: str) -> List[str]:
        return sorted(self._league(league))

    def _league(self, league: str) -> Dict[str, TeamRating]:
        name = clean_name(league)
        if name in self._leagues:
            return self._leagues[name]
        wanted = key_name(name)
        for candidate, teams in self._leagues.items():
            if key_name(candidate) == wanted:
                return teams
        raise MissingRatingError(name)

    def lookup(self, league: str, team: str) -> TeamRating:
        teams = self._league(league)
        name = clean_name(team)
        if name in teams:
            return teams[name]
        wanted = key_name(name)
        for candidate, rating in teams.items():
            if key_name(candidate) == wanted:
                return rating
        raise MissingRatingError(clean_name(league), name)

    def match_rates(self, league: str, home: str, away: str) -> MatchRates:
        """Blend ratings into expected goals for each side.

        Home expected goals average the home attack with the away defense,
        and vice versa, then clamp into ``[MIN_RATE, MAX_RATE]``.
        """

        home_rating = self.lookup(league, home)
        away_rating = self.lookup(league, away)
        if home_rating.team == away_rating.team:
            raise ValueError("Home and away cannot be the same team")
        home_rate = (home_rating.attack + away_rating.defense) / 2
        away_rate = (away_rating.attack + home_rating.defense) / 2
        return MatchRates(
            home_team=home_rating.team,
            away_team=away_rating.team,
            home_rate=_clamp_rate(home_rate),
            away_rate=_clamp_rate(away_rate),
        )


def _clamp_rate(value: float) -> float:
    return max(MIN_RATE, min(MAX_RATE, value))


__all__ = [
    "ATTACK_KEYS",
    "DEFENSE_KEYS",
    "MAX_RATE",
    "MIN_RATE",
    "MatchRates",
    "RatingTable",
    "TeamRating",
    "clean_name",
    "key_name",
]
