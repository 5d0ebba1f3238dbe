"""Command line interface for match simulation and handicap pricing."""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Protocol, Sequence

import yaml

from .config import MatchquantConfig, load_config
from .errors import MatchquantError
from .frames import fair_odds_frame, scoreline_frame
from .grid import poisson_score_grid
from .h2h import H2HRecord, H2HTable
from .handicap import FairOddsRow, compute_asian_handicap_fair
from .logging import configure_logging
from .ratings import RatingTable
from .simulator import SimulationOptions, SimulationSummary, simulate_match

logger = logging.getLogger(__name__)


class CommandHandler(Protocol):
    def __call__(self, config: MatchquantConfig, args: argparse.Namespace) -> None:
        """Execute a command with the resolved configuration."""


@dataclasses.dataclass(slots=True)
class Subcommand:
    """Container describing a CLI sub-command."""

    name: str
    help: str
    configure: Callable[[argparse.ArgumentParser], None]
    handler: CommandHandler

    def add_to_parser(
        self,
        subparsers,
        parent: argparse.ArgumentParser,
    ) -> argparse.ArgumentParser:
        parser = subparsers.add_parser(self.name, parents=[parent], help=self.help)
        self.configure(parser)
        parser.set_defaults(handler=self.handler, command=self.name)
        return parser


class SubcommandApp:
    """Registry that wires handlers into an :class:`argparse` parser."""

    def __init__(self, description: str | None = None) -> None:
        self._commands: list[Subcommand] = []
        self._description = description

    def command(
        self,
        name: str,
        *,
        help: str,
        configure: Callable[[argparse.ArgumentParser], None],
    ) -> Callable[[CommandHandler], CommandHandler]:
        """Register ``handler`` as a sub-command with configuration callback."""

        def _decorator(handler: CommandHandler) -> CommandHandler:
            self._commands.append(
                Subcommand(name=name, help=help, configure=configure, handler=handler)
            )
            return handler

        return _decorator

    @property
    def commands(self) -> Sequence[Subcommand]:
        return tuple(self._commands)

    def build_parser(self) -> argparse.ArgumentParser:
        parent = argparse.ArgumentParser(add_help=False)
        parent.add_argument("--log-level", dest="log_level")
        parent.add_argument(
            "--format", dest="output_format", choices=("json", "table"), default="json"
        )

        parser = argparse.ArgumentParser(description=self._description)
        subparsers = parser.add_subparsers(dest="command", required=True)
        for command in self._commands:
            command.add_to_parser(subparsers, parent)
        return parser


APP = SubcommandApp(description=__doc__)


# ---------------------------------------------------------------------------
# Argument groups
# ---------------------------------------------------------------------------


def _add_simulation_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--trials", type=float, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--home-advantage", type=float, default=None)
    parser.add_argument("--max-goals", type=int, default=None)
    parser.add_argument("--goal-cap", type=int, default=None)


def _configure_simulate_parser(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--home-rate", type=float, required=True)
    parser.add_argument("--away-rate", type=float, required=True)
    parser.add_argument(
        "--handicap",
        action="store_true",
        help="Also price the handicap ladder from the simulated scorelines",
    )
    _add_simulation_arguments(parser)


def _configure_handicap_parser(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--grid", type=Path, help="JSON/YAML scoreline grid")
    source.add_argument("--home-rate", type=float)
    parser.add_argument("--away-rate", type=float)
    parser.add_argument("--goal-cap", type=int, default=None)


def _configure_predict_parser(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--ratings", type=Path, default=None)
    parser.add_argument("--league", required=True)
    parser.add_argument("--home", required=True)
    parser.add_argument("--away", required=True)
    parser.add_argument("--h2h", type=Path, default=None, help="Head-to-head meetings file")
    _add_simulation_arguments(parser)


def _configure_teams_parser(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--ratings", type=Path, default=None)
    parser.add_argument("--league", default=None)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _simulation_options(config: MatchquantConfig, args: argparse.Namespace) -> SimulationOptions:
    advantage = args.home_advantage
    max_goals = args.max_goals
    seed = args.seed
    return SimulationOptions(
        home_advantage=config.home_advantage if advantage is None else advantage,
        max_goals_per_side=config.max_goals_per_side if max_goals is None else max_goals,
        seed=config.seed if seed is None else seed,
        default_trials=config.trials,
        min_trials=config.min_trials,
        max_trials=config.max_trials,
    )


def _goal_cap(config: MatchquantConfig, args: argparse.Namespace) -> int:
    return config.goal_cap if args.goal_cap is None else args.goal_cap


def _load_grid(path: Path) -> Dict[int, Dict[int, float]]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if isinstance(data, list):
        return {
            home: {away: value for away, value in enumerate(row)}
            for home, row in enumerate(data)
        }
    if not isinstance(data, Mapping):
        raise ValueError(f"Scoreline grid at {path} must be a mapping or a list of rows")
    return {
        int(home): {int(away): value for away, value in (row or {}).items()}
        for home, row in data.items()
    }


def _find_h2h(path: Path, league: str, home: str, away: str) -> H2HRecord | None:
    if not path.exists():
        logger.warning("Head-to-head file %s not found; skipping", path)
        return None
    return H2HTable.load(path).find(league, home, away)


def _emit(payload: Mapping[str, Any]) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _render_summary(summary: SimulationSummary, title: str) -> None:
    print(title)
    print(f"  Trials: {summary.trials:,}")
    print(f"  Rates: home {summary.home_rate:.2f} | away {summary.away_rate:.2f}")
    print(
        f"  1X2: home {summary.home_win_pct:.1f}% | draw {summary.draw_pct:.1f}%"
        f" | away {summary.away_win_pct:.1f}%"
    )
    threshold = summary.over_threshold - 0.5
    print(
        f"  O/U {threshold}: over {summary.over_pct:.1f}% | under {summary.under_pct:.1f}%"
    )
    print(
        f"  BTTS: yes {summary.both_scored_pct:.1f}% | no {summary.both_scored_no_pct:.1f}%"
    )
    print(
        f"  Average goals: {summary.home_avg_goals:.2f} - {summary.away_avg_goals:.2f}"
    )
    print(f"  Most likely: {summary.most_likely_label} ({summary.most_likely_count:,})")
    print("\nTop scorelines:")
    print(scoreline_frame(summary).head(len(summary.top_scorelines)))


def _render_rows(rows: Sequence[FairOddsRow]) -> None:
    print("\nAsian handicap (home, fair):")
    print(fair_odds_frame(rows))


def _output(
    args: argparse.Namespace,
    *,
    title: str,
    summary: SimulationSummary | None = None,
    rows: Sequence[FairOddsRow] | None = None,
    extra: Mapping[str, Any] | None = None,
) -> None:
    if args.output_format == "table":
        if summary is not None:
            _render_summary(summary, title)
        else:
            print(title)
        if rows is not None:
            _render_rows(rows)
        return
    payload: Dict[str, Any] = dict(extra or {})
    if summary is not None:
        payload["simulation"] = summary.to_dict()
    if rows is not None:
        payload["asian_handicap"] = [row.to_dict() for row in rows]
    _emit(payload)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@APP.command(
    "simulate",
    help="Simulate a match from two scoring rates",
    configure=_configure_simulate_parser,
)
def _cmd_simulate(config: MatchquantConfig, args: argparse.Namespace) -> None:
    summary = simulate_match(
        args.home_rate,
        args.away_rate,
        args.trials,
        _simulation_options(config, args),
    )
    rows = None
    if args.handicap:
        goal_cap = _goal_cap(config, args)
        rows = compute_asian_handicap_fair(summary.scoreline_grid(goal_cap), goal_cap)
    _output(args, title="Simulation", summary=summary, rows=rows)


@APP.command(
    "handicap",
    help="Price the Asian handicap ladder from a grid or from scoring rates",
    configure=_configure_handicap_parser,
)
def _cmd_handicap(config: MatchquantConfig, args: argparse.Namespace) -> None:
    goal_cap = _goal_cap(config, args)
    if args.grid is not None:
        grid = _load_grid(args.grid)
        title = f"Scoreline grid {args.grid}"
    else:
        if args.away_rate is None:
            raise SystemExit("--away-rate is required together with --home-rate")
        grid = poisson_score_grid(args.home_rate, args.away_rate, goal_cap, normalize=True)
        title = f"Poisson grid {args.home_rate:.2f} v {args.away_rate:.2f}"
    rows = compute_asian_handicap_fair(grid, goal_cap)
    _output(args, title=title, rows=rows, extra={"goal_cap": goal_cap})


@APP.command(
    "predict",
    help="Simulate a fixture using team ratings and price the handicap ladder",
    configure=_configure_predict_parser,
)
def _cmd_predict(config: MatchquantConfig, args: argparse.Namespace) -> None:
    table = RatingTable.load(args.ratings or config.ratings_path)
    rates = table.match_rates(args.league, args.home, args.away)
    summary = simulate_match(
        rates.home_rate,
        rates.away_rate,
        args.trials,
        _simulation_options(config, args),
    )
    goal_cap = _goal_cap(config, args)
    rows = compute_asian_handicap_fair(summary.scoreline_grid(goal_cap), goal_cap)
    extra: Dict[str, Any] = {
        "league": args.league,
        "home": rates.home_team,
        "away": rates.away_team,
    }
    h2h_path = args.h2h or config.h2h_path
    meeting = None
    if h2h_path is not None:
        meeting = _find_h2h(h2h_path, args.league, rates.home_team, rates.away_team)
        extra["h2h"] = meeting.to_dict() if meeting is not None else None
    _output(
        args,
        title=f"{rates.home_team} vs {rates.away_team} ({args.league})",
        summary=summary,
        rows=rows,
        extra=extra,
    )
    if args.output_format == "table" and h2h_path is not None:
        print("\nHead to head:")
        print(f"  {meeting.describe()}" if meeting else "  No meeting found for this matchup")


@APP.command(
    "teams",
    help="List leagues, or the teams of one league, in a ratings file",
    configure=_configure_teams_parser,
)
def _cmd_teams(config: MatchquantConfig, args: argparse.Namespace) -> None:
    table = RatingTable.load(args.ratings or config.ratings_path)
    names: List[str] = table.teams(args.league) if args.league else table.leagues()
    if args.output_format == "table":
        for name in names:
            print(name)
        return
    _emit({"league": args.league, "names": names})


def _build_parser() -> argparse.ArgumentParser:
    return APP.build_parser()


def main(argv: Sequence[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    config = load_config(log_level=args.log_level)
    configure_logging(config.log_level, handlers=[logging.StreamHandler(sys.stderr)])
    handler: CommandHandler = args.handler
    try:
        handler(config, args)
    except (MatchquantError, ValueError, FileNotFoundError) as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        raise SystemExit(str(exc)) from exc


__all__ = ["APP", "main"]


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    main()
