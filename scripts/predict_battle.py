#!/usr/bin/env python3
"""Forecast rank and skill changes for a battle between two squads."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from db import DEFAULT_DB_URL, create_db_engine, create_session_factory
from domain.ratings.common import Outcome, SquadSnapshot
from domain.ratings.config import load_squad_rating_config
from domain.ratings.errors import UnresolvedOpponent
from domain.ratings.forecast import Forecast, ForecastEngine, Framing, Scenario
from repositories.squad_repository import get_active_squad, ranked_skills, search_squads

DEFAULT_CONFIG_FILE = ROOT_DIR / "configs" / "ratings" / "squad" / "default.toml"

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Predict the outcome of a squad battle.",
)


def _headline(forecast: Forecast, index: int, scenario: Scenario) -> str:
    squad = forecast.squad.display_name()
    opponent = forecast.opponent.display_name()
    if index == 0:
        if forecast.framing is Framing.EVEN:
            return f"I predict a tie between {squad} and {opponent}:"
        winner, loser = (squad, opponent) if scenario.outcome is Outcome.WIN else (opponent, squad)
        return f"I predict that {winner} will beat {loser} with this result:"
    if scenario.outcome is Outcome.DRAW:
        return "And in case of a tie the results will be:"
    winner, loser = (squad, opponent) if scenario.outcome is Outcome.WIN else (opponent, squad)
    return f"But if {winner} beats {loser} the result will be:"


def _echo_forecast(forecast: Forecast) -> None:
    typer.echo(
        f"{forecast.squad.display_name()} vs {forecast.opponent.display_name()} "
        f"win_probability={forecast.win_probability:.3f} draw_probability={forecast.draw_probability:.3f}"
    )
    for index, scenario in enumerate(forecast.ordered()):
        typer.echo("")
        typer.echo(_headline(forecast, index, scenario))
        typer.echo(
            f"  {forecast.squad.display_name():<24} {scenario.squad_rank_before.label():>24} -> "
            f"{scenario.squad_rank_after.label():<24} change={scenario.squad_skill_delta:+.3f}"
        )
        typer.echo(
            f"  {forecast.opponent.display_name():<24} {scenario.opponent_rank_before.label():>24} -> "
            f"{scenario.opponent_rank_after.label():<24} change={scenario.opponent_skill_delta:+.3f}"
        )


@app.command()
def predict_battle(
    squad_id: Annotated[str, typer.Argument(help="Squad to forecast for.")],
    opponent_id: Annotated[
        str | None,
        typer.Option("--opponent-id", help="Opponent squad id."),
    ] = None,
    match: Annotated[
        str | None,
        typer.Option("--match", help="Search the opponent by name; must match exactly one squad."),
    ] = None,
    leaderboard_ranks: Annotated[
        bool,
        typer.Option(
            "--leaderboard-ranks/--tier-ranks",
            help="Rank by leaderboard position instead of the configured tier cutoffs.",
        ),
    ] = True,
    db_url: Annotated[
        str,
        typer.Option("--db-url", help="Database URL. Defaults to the local squadranker postgres instance."),
    ] = DEFAULT_DB_URL,
    config_file: Annotated[
        Path,
        typer.Option("--config-file", help="Squad rating TOML config file."),
    ] = DEFAULT_CONFIG_FILE,
) -> None:
    """Print the win, lose and draw scenarios in the order suggested by current skills."""
    if opponent_id is None and match is None:
        raise typer.BadParameter("pass --opponent-id or --match")

    config = load_squad_rating_config(config_file)
    calculator = config.create_calculator()
    session_factory = create_session_factory(create_db_engine(db_url))

    with session_factory() as session:
        try:
            squad = get_active_squad(session, squad_id)
            opponent: SquadSnapshot | None = None
            if opponent_id is not None:
                opponent = get_active_squad(session, opponent_id)
            else:
                results = [
                    result
                    for result in search_squads(session, match or "", sigma_multiplier=config.sigma_multiplier)
                    if result.id != squad.id
                ]
                if len(results) != 1:
                    typer.echo(f"{len(results)} squads match '{match}':")
                    for result in results:
                        typer.echo(f"  {result.id:<24} {result.display_name()}")
                    raise typer.Exit(code=1)
                opponent = results[0]
        except UnresolvedOpponent as exc:
            typer.echo(f"No opponent: {exc}", err=True)
            raise typer.Exit(code=1) from exc
        if opponent.id == squad.id:
            raise typer.BadParameter("a squad cannot battle itself")

        leaderboard = None
        if leaderboard_ranks:
            # The engine adds each side's rival back at that scenario's skill.
            leaderboard = ranked_skills(
                session,
                sigma_multiplier=config.sigma_multiplier,
                win_threshold=config.win_threshold,
                exclude_ids=(squad.id, opponent.id),
            )

    engine = ForecastEngine(calculator, config.create_classifier(), leaderboard=leaderboard)
    _echo_forecast(engine.forecast(squad, opponent))


if __name__ == "__main__":
    app()
