"""Configuration management for matchquant."""

from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MatchquantConfig(BaseSettings):
    """Configuration settings for matchquant runs."""

    # Simulation settings
    trials: int = Field(
        default=10_000,
        description="Default Monte Carlo trial count",
        alias="MATCHQUANT_TRIALS",
    )

    min_trials: int = Field(
        default=1_000,
        description="Lower bound applied to requested trial counts",
        alias="MATCHQUANT_MIN_TRIALS",
    )

    max_trials: int = Field(
        default=200_000,
        description="Upper bound applied to requested trial counts",
        alias="MATCHQUANT_MAX_TRIALS",
    )

    home_advantage: float = Field(
        default=1.0,
        description="Multiplier applied to the home scoring rate",
        alias="MATCHQUANT_HOME_ADVANTAGE",
    )

    max_goals_per_side: int | None = Field(
        default=None,
        description="Cap applied to each simulated goal count",
        alias="MATCHQUANT_MAX_GOALS",
    )

    seed: int | None = Field(
        default=None,
        description="Seed for the pseudo-random generator",
        alias="MATCHQUANT_SEED",
    )

    # Handicap settings
    goal_cap: int = Field(
        default=10,
        description="Maximum goals per side considered in scoreline grids",
        alias="MATCHQUANT_GOAL_CAP",
    )

    # Data
    ratings_path: Path = Field(
        default=Path("xg_tables.json"),
        description="Team rating table (JSON or YAML)",
        alias="MATCHQUANT_RATINGS",
    )

    h2h_path: Path | None = Field(
        default=None,
        description="Optional head-to-head meetings file (JSON or YAML)",
        alias="MATCHQUANT_H2H",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Root log level for command line sessions",
        alias="MATCHQUANT_LOG_LEVEL",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("trials", "min_trials", "max_trials", "goal_cap")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be at least 1")
        return value

    @field_validator("max_goals_per_side")
    @classmethod
    def _non_negative_cap(cls, value: int | None) -> int | None:
        if value is not None and value < 0:
            raise ValueError("must be non-negative")
        return value

    @model_validator(mode="after")
    def _ordered_trial_bounds(self) -> "MatchquantConfig":
        if self.min_trials > self.max_trials:
            raise ValueError(
                f"min_trials ({self.min_trials}) exceeds max_trials ({self.max_trials})"
            )
        return self


def load_config(**overrides: object) -> MatchquantConfig:
    """Build a fresh configuration from the environment plus ``overrides``.

    Each call returns a new instance; callers pass it explicitly to the code
    that needs it instead of sharing a module level object.
    """

    unknown = [key for key in overrides if key not in MatchquantConfig.model_fields]
    if unknown:
        raise ValueError(f"Unknown configuration option: {', '.join(sorted(unknown))}")
    fields = MatchquantConfig.model_fields
    values = {
        fields[key].alias or key: value
        for key, value in overrides.items()
        if value is not None
    }
    return MatchquantConfig(**values)


__all__ = ["MatchquantConfig", "load_config"]
