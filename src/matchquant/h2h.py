"""Head-to-head fixture history for a matchup."""

from __future__ import annotations

import dataclasses
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping

import yaml

from .errors import H2HDataError
from .ratings import clean_name, key_name

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class H2HRecord:
    """One past meeting between two teams.

    ``league`` and ``date`` are empty strings when the source omits them.
    Dates are compared as text, so ISO ``YYYY-MM-DD`` values order
    chronologically.
    """

    home: str
    away: str
    league: str = ""
    score: str = ""
    corners: Any = None
    cards: Any = None
    date: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)

    def describe(self) -> str:
        parts = [f"{self.home} vs {self.away} {self.score or '?'}"]
        if self.date:
            parts.insert(0, self.date)
        if self.corners is not None:
            parts.append(f"Corners: {self.corners}")
        if self.cards is not None:
            parts.append(f"Cards: {self.cards}")
        return " | ".join(parts)


def _text(value: object) -> str:
    return clean_name(value) if value else ""


class H2HTable:
    """Past meetings loaded for one request."""

    def __init__(self, records: Iterable[H2HRecord]) -> None:
        self._records: List[H2HRecord] = list(records)

    def __len__(self) -> int:
        return len(self._records)

    @classmethod
    def from_data(cls, raw: object) -> "H2HTable":
        """Build from a list of meetings or ``{"h2h": [...]}``.

        Entries without both team names are dropped.
        """

        if raw is None:
            return cls([])
        if isinstance(raw, Mapping):
            raw = raw.get("h2h") or []
        if not isinstance(raw, list):
            raise H2HDataError("Head-to-head data must be a list of meetings")
        records: List[H2HRecord] = []
        for entry in raw:
            if not isinstance(entry, Mapping):
                continue
            home = _text(entry.get("home"))
            away = _text(entry.get("away"))
            if not home or not away:
                continue
            records.append(
                H2HRecord(
                    home=home,
                    away=away,
                    league=_text(entry.get("league")),
                    score=_text(entry.get("score")),
                    corners=entry.get("corners"),
                    cards=entry.get("cards"),
                    date=_text(entry.get("date")),
                )
            )
        if len(records) < len(raw):
            logger.debug("Dropped %d head-to-head entries", len(raw) - len(records))
        return cls(records)

    @classmethod
    def load(cls, path: str | os.PathLike[str]) -> "H2HTable":
        """Load a JSON or YAML head-to-head file."""

        source = Path(path)
        with source.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
        table = cls.from_data(data)
        logger.info("Loaded %d head-to-head meetings from %s", len(table), source)
        return table

    def find(self, league: str | None, home: str, away: str) -> H2HRecord | None:
        """Return the newest meeting between ``home`` and ``away``.

        Either venue order matches.  Meetings without a league match any
        league; ``None`` for ``league`` disables the league filter.
        """

        wanted_league = key_name(league) if league else ""
        teams = {key_name(home), key_name(away)}
        hits = [
            record
            for record in self._records
            if {key_name(record.home), key_name(record.away)} == teams
            and (
                not wanted_league
                or not record.league
                or key_name(record.league) == wanted_league
            )
        ]
        if not hits:
            return None
        # Stable sort: equal dates keep file order.
        hits.sort(key=lambda record: record.date, reverse=True)
        return hits[0]


__all__ = ["H2HRecord", "H2HTable"]
