from __future__ import annotations

from typing import Dict

import pytest

from matchquant.grid import poisson_score_grid


@pytest.fixture()
def even_grid() -> Dict[int, Dict[int, float]]:
    return poisson_score_grid(1.3, 1.3, 10, normalize=True)


@pytest.fixture()
def home_favourite_grid() -> Dict[int, Dict[int, float]]:
    return poisson_score_grid(1.8, 0.9, 10, normalize=True)


@pytest.fixture()
def ratings_payload() -> dict:
    return {
        "Premier League": {
            "Arsenal": {"att": 2.1, "def": 0.8},
            "Chelsea": {"xg": 1.6, "xga": 1.2},
            "Manchester United": {"xg_for": 1.4, "xg_against": 1.5},
            "Broken FC": {"att": "n/a", "def": 1.0},
        },
        "Empty League": {},
    }


@pytest.fixture()
def h2h_payload() -> list:
    return [
        {"league": "Premier League", "home": "Arsenal", "away": "Chelsea",
         "score": "2-2", "date": "2023-10-21"},
        {"league": "Premier League", "home": "Chelsea", "away": "Arsenal",
         "score": "0-1", "corners": 9, "cards": 4, "date": "2024-04-23"},
        {"league": "FA Cup", "home": "Arsenal", "away": "Chelsea",
         "score": "3-0", "date": "2025-01-05"},
        {"home": "Manchester United", "away": "Arsenal", "score": "1-1"},
        {"home": "", "away": "Chelsea", "score": "9-9"},
    ]
