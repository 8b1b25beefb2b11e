#!/usr/bin/env python3
"""Show squads ordered by rank: ranked squads by tier, then unranked squads by skill."""

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
from domain.ratings.config import load_squad_rating_config
from domain.ratings.ranking import RankScale, Ranked, rank_sort_key
from repositories.squad_repository import list_squads, ranked_skills

DEFAULT_CONFIG_FILE = ROOT_DIR / "configs" / "ratings" / "squad" / "default.toml"

app = typer.Typer(
    add_completion=False,
    help="Query the squad leaderboard.",
)


@app.command()
def show_squad_top(
    top_n: Annotated[
        int,
        typer.Option("--top-n", help="Number of squads to return."),
    ] = 20,
    leaderboard_ranks: Annotated[
        bool,
        typer.Option(
            "--leaderboard-ranks/--tier-ranks",
            help="Rank by leaderboard position instead of the configured tier cutoffs.",
        ),
    ] = True,
    include_unranked: Annotated[
        bool,
        typer.Option("--include-unranked/--ranked-only", help="List squads still short of the win threshold."),
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
    """Print the top squads with rank, skill score, mu and sigma."""
    if top_n <= 0:
        raise typer.BadParameter("--top-n must be greater than 0")

    config = load_squad_rating_config(config_file)
    calculator = config.create_calculator()
    classifier = config.create_classifier()

    session_factory = create_session_factory(create_db_engine(db_url))
    with session_factory() as session:
        squads = list_squads(session)
        if leaderboard_ranks:
            classifier = classifier.with_scale(
                RankScale.from_leaderboard(
                    ranked_skills(
                        session,
                        sigma_multiplier=config.sigma_multiplier,
                        win_threshold=config.win_threshold,
                    )
                )
            )

    rows = []
    for squad in squads:
        skill = calculator.score(squad.rating)
        rank = classifier.classify(skill, squad.wins)
        if include_unranked or isinstance(rank, Ranked):
            rows.append((rank, skill, squad))
    rows.sort(key=lambda row: (rank_sort_key(row[0]), -row[1], row[2].id))

    if not rows:
        typer.echo(f"No squads found for system '{config.name}'.")
        return

    typer.echo(f"system={config.name} top_n={top_n} win_threshold={config.win_threshold}")
    for rank, skill, squad in rows[:top_n]:
        typer.echo(
            f"{rank.label():<24} {squad.display_name():<24} "
            f"skill={skill:8.3f} mu={squad.rating.mean:8.3f} sigma={squad.rating.deviation:7.3f} "
            f"wins={squad.wins:4d}"
        )


if __name__ == "__main__":
    app()
