"""Test configuration functionality."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from matchquant.config import MatchquantConfig, load_config

_ENV_KEYS = (
    "MATCHQUANT_TRIALS",
    "MATCHQUANT_SEED",
    "MATCHQUANT_GOAL_CAP",
    "MATCHQUANT_HOME_ADVANTAGE",
    "MATCHQUANT_RATINGS",
    "MATCHQUANT_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_config_defaults():
    """Test default configuration values."""
    config = MatchquantConfig()

    assert config.trials == 10_000
    assert config.min_trials == 1_000
    assert config.max_trials == 200_000
    assert config.goal_cap == 10
    assert config.home_advantage == 1.0
    assert config.seed is None
    assert config.ratings_path == Path("xg_tables.json")


def test_config_from_env(monkeypatch):
    """Test configuration from environment variables."""
    monkeypatch.setenv("MATCHQUANT_TRIALS", "50000")
    monkeypatch.setenv("MATCHQUANT_SEED", "42")
    monkeypatch.setenv("MATCHQUANT_HOME_ADVANTAGE", "1.1")

    config = load_config()

    assert config.trials == 50_000
    assert config.seed == 42
    assert config.home_advantage == pytest.approx(1.1)


def test_overrides_win_and_none_is_ignored(monkeypatch):
    monkeypatch.setenv("MATCHQUANT_GOAL_CAP", "8")
    config = load_config(goal_cap=6, seed=None, log_level="DEBUG")
    assert config.goal_cap == 6
    assert config.seed is None
    assert config.log_level == "DEBUG"


def test_each_call_builds_a_fresh_instance():
    assert load_config() is not load_config()


def test_unknown_option_rejected():
    with pytest.raises(ValueError, match="Unknown configuration option"):
        load_config(bogus=1)


@pytest.mark.parametrize("field", ["trials", "goal_cap", "min_trials"])
def test_non_positive_values_rejected(field):
    with pytest.raises(ValidationError):
        load_config(**{field: 0})


def test_negative_goal_limit_rejected():
    with pytest.raises(ValidationError):
        load_config(max_goals_per_side=-1)


def test_inverted_trial_bounds_rejected():
    with pytest.raises(ValidationError, match="exceeds max_trials"):
        load_config(min_trials=5_000, max_trials=1_000)


def test_equal_trial_bounds_allowed():
    config = load_config(min_trials=2_000, max_trials=2_000)
    assert (config.min_trials, config.max_trials) == (2_000, 2_000)
