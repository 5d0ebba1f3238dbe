"""
matchquant: football match simulation and Asian Handicap fair odds.

The package turns two expected-goals rates into Monte Carlo outcome
frequencies and converts scoreline probability grids into fair prices for
the standard Asian Handicap ladder.
"""

from importlib.metadata import PackageNotFoundError, version

try:  # pragma: no cover - exercised in packaging workflows
    __version__ = version("matchquant")
except PackageNotFoundError:  # pragma: no cover - local editable installs
    __version__ = "0.0.0"

_EXPORTS = {
    # Simulation
    "simulate_match": ".simulator",
    "SimulationOptions": ".simulator",
    "SimulationSummary": ".simulator",
    "SimulationTally": ".simulator",
    "clamp_trial_count": ".simulator",
    "poisson_sample": ".sampling",
    "make_rng": ".sampling",
    # Handicap pricing
    "compute_asian_handicap_fair": ".handicap",
    "GoalDiffDistribution": ".handicap",
    "FairOddsRow": ".handicap",
    "HANDICAP_LADDER": ".handicap",
    "WinPushLose": ".handicap",
    "classify_line": ".handicap",
    "home_wpl": ".handicap",
    # Grids
    "poisson_score_grid": ".grid",
    "grid_from_counts": ".grid",
    # Ratings
    "RatingTable": ".ratings",
    "H2HTable": ".h2h",
    "H2HRecord": ".h2h",
    # Errors
    "H2HDataError": ".errors",
    "InvalidLineError": ".errors",
    "InvalidRateError": ".errors",
    "MissingRatingError": ".errors",
    "RatingDataError": ".errors",
    # Configuration
    "load_config": ".config",
}

__all__ = sorted(_EXPORTS)


def __getattr__(name: str) -> object:  # pragma: no cover - thin lazy importer
    from importlib import import_module

    target_module = _EXPORTS.get(name)
    if not target_module:
        raise AttributeError(f"module {__name__} has no attribute {name}")
    module = import_module(target_module, __name__)
    attr = getattr(module, name)
    globals()[name] = attr
    return attr


def __dir__() -> list[str]:  # pragma: no cover - trivial
    return sorted(list(globals().keys()) + __all__)
