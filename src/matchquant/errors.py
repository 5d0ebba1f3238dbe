"""Exception types raised by the matchquant core."""

from __future__ import annotations


class MatchquantError(Exception):
    """Base class for matchquant specific failures."""


class InvalidLineError(MatchquantError, ValueError):
    """Raised when a handicap line is not a multiple of a quarter goal."""

    def __init__(self, line: object) -> None:
        super().__init__(f"Handicap line must be a multiple of 0.25, got {line!r}")
        self.line = line


class InvalidRateError(MatchquantError, ValueError):
    """Raised when a scoring rate or multiplier is negative or not finite."""


class RatingDataError(MatchquantError, ValueError):
    """Raised when a rating table contains no usable team ratings."""


class H2HDataError(MatchquantError, ValueError):
    """Raised when a head-to-head file is not a list of meetings."""


class MissingRatingError(MatchquantError, KeyError):
    """Raised when a league or team is absent from a rating table."""

    def __init__(self, league: str, team: str | None = None) -> None:
        if team is None:
            message = f"League {league!r} not found in rating table"
        else:
            message = f"Team {team!r} not found in league {league!r}"
        super().__init__(message)
        self.league = league
        self.team = team

    def __str__(self) -> str:
        return str(self.args[0])


__all__ = [
    "H2HDataError",
    "InvalidLineError",
    "InvalidRateError",
    "MatchquantError",
    "MissingRatingError",
    "RatingDataError",
]
