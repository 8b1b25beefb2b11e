#!/usr/bin/env python3
"""Show one squad's merged battle history, newest first."""

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
from domain.ratings.errors import AmbiguousLedgerKey, UnresolvedOpponent
from domain.ratings.ledger import BattleLedger
from repositories.battle_repository import SessionBattleSource

DEFAULT_CONFIG_FILE = ROOT_DIR / "configs" / "ratings" / "squad" / "default.toml"

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Query squad battle history.",
)


@app.command()
def show_squad_history(
    squad_id: Annotated[str, typer.Argument(help="Squad id.")],
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Fail when two battles share an end date."),
    ] = False,
    db_url: Annotated[
        str,
        typer.Option("--db-url", help="Database URL. Defaults to the local squadranker postgres instance."),
    ] = DEFAULT_DB_URL,
    config_file: Annotated[
        Path,
        typer.Option("--config-file", help="Squad rating TOML config file."),
    ] = DEFAULT_CONFIG_FILE,
) -> None:
    """Print offensive and defensive battles from the squad's own point of view."""
    config = load_squad_rating_config(config_file)
    session_factory = create_session_factory(create_db_engine(db_url))

    with session_factory() as session:
        ledger = BattleLedger(SessionBattleSource(session), sigma_multiplier=config.sigma_multiplier)
        try:
            history = ledger.history(squad_id, strict=strict)
        except UnresolvedOpponent as exc:
            typer.echo(f"Squad not found: {exc}", err=True)
            raise typer.Exit(code=1) from exc
        except AmbiguousLedgerKey as exc:
            typer.echo(f"Ambiguous history: {exc}", err=True)
            raise typer.Exit(code=2) from exc

    if not history.entries:
        typer.echo(f"No battles found for squad '{squad_id}'.")
        return

    for entry in history.entries:
        typer.echo(
            f"{entry.date:%Y-%m-%d %H:%M} {entry.own_score:3d}-{entry.opponent_score:<3d} "
            f"vs {entry.opponent_id:<24} "
            f"skill_ratio={entry.skill_difference_before:6.3f} skill_change={entry.skill_change:+8.3f}"
        )
    for collision in history.ambiguous_keys:
        typer.echo(f"warning: {collision}", err=True)


if __name__ == "__main__":
    app()
