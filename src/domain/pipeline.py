"""Battle-processing loop that applies pending battles to squad ratings."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from domain.ratings.errors import UnresolvedOpponent
from domain.ratings.openskill.calculator import SquadOpenSkillCalculator
from domain.ratings.resolution import resolve_battle
from repositories.battle_repository import apply_battle_resolution, fetch_unprocessed_battles
from repositories.squad_repository import get_active_squad

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessSummary:
    """Outcome of one processing run."""

    pending_battles: int
    processed_battles: int
    skipped_battles: int
    dry_run: bool


def process_pending_battles(
    *,
    session_factory,
    calculator: SquadOpenSkillCalculator,
    dry_run: bool = False,
    echo: Callable[[str], None] | None = None,
    now: Callable[[], datetime] | None = None,
) -> ProcessSummary:
    """Apply every unprocessed battle in end-date order, one commit per battle.

    Each battle re-reads both squads inside its own transaction, so a squad
    fighting twice never has its second battle computed from a stale rating.
    """
    clock = now if now is not None else (lambda: datetime.now(UTC).replace(tzinfo=None))

    with session_factory() as session:
        pending = fetch_unprocessed_battles(session)
    total = len(pending)
    logger.info("pending battles: %d", total)

    processed = 0
    skipped = 0
    for index, result in enumerate(pending, start=1):
        with session_factory() as session:
            try:
                squad = get_active_squad(session, result.squad_id)
                opponent = get_active_squad(session, result.opponent_id)
            except UnresolvedOpponent as exc:
                logger.warning("skipping battle_id=%s: %s", result.id, exc)
                skipped += 1
            else:
                resolution = resolve_battle(
                    calculator,
                    squad,
                    opponent,
                    result,
                    processed_at=clock(),
                )
                if dry_run:
                    session.rollback()
                else:
                    try:
                        apply_battle_resolution(session, resolution)
                        session.commit()
                    except Exception:
                        session.rollback()
                        raise
                processed += 1

        if echo is not None and index % 1_000 == 0:
            echo(f"processed_battles={index}/{total}")

    summary = ProcessSummary(
        pending_battles=total,
        processed_battles=processed,
        skipped_battles=skipped,
        dry_run=dry_run,
    )
    if echo is not None:
        prefix = "[dry-run] " if dry_run else ""
        echo(
            f"{prefix}completed pending_battles={total} "
            f"processed_battles={processed} skipped_battles={skipped}"
        )
    return summary


__all__ = ["ProcessSummary", "process_pending_battles"]
