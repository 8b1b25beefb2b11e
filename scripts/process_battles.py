#!/usr/bin/env python3
"""Apply pending battles to squad ratings and seal their battle records."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from db import DEFAULT_DB_URL, create_db_engine, create_session_factory
from domain.pipeline import process_pending_battles
from domain.ratings.config import load_squad_rating_config
from repositories.squad_repository import ensure_squad_schema

DEFAULT_CONFIG_FILE = ROOT_DIR / "configs" / "ratings" / "squad" / "default.toml"

app = typer.Typer(
    add_completion=False,
    help="Squad battle processing jobs.",
)


@app.command()
def process_battles(
    db_url: Annotated[
        str,
        typer.Option("--db-url", help="Database URL. Defaults to the local squadranker postgres instance."),
    ] = DEFAULT_DB_URL,
    config_file: Annotated[
        Path,
        typer.Option("--config-file", help="Squad rating TOML config file."),
    ] = DEFAULT_CONFIG_FILE,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Compute rating updates without committing them."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log progress and skipped battles."),
    ] = False,
) -> None:
    """Process every unprocessed battle in end-date order."""
    logging.basicConfig(level=logging.INFO if verbose else logging.WARNING)

    config = load_squad_rating_config(config_file)
    engine = create_db_engine(db_url)
    ensure_squad_schema(engine)
    session_factory = create_session_factory(engine)

    typer.echo(f"config={config.file_path.name} system={config.name}")
    process_pending_battles(
        session_factory=session_factory,
        calculator=config.create_calculator(),
        dry_run=dry_run,
        echo=typer.echo,
    )


if __name__ == "__main__":
    app()
