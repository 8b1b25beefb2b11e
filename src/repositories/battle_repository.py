"""Persistence helpers for battles using SQLAlchemy."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import insert, select
from sqlalchemy.orm import Session

from domain.ratings.common import BattleRecord, BattleResult, RatingValue, SquadSnapshot
from domain.ratings.resolution import BattleResolution
from models import Battle
from repositories.squad_repository import get_squad, save_squad_snapshot


def _to_record(battle: Battle) -> BattleRecord:
    if (
        battle.mu_before is None
        or battle.sigma_before is None
        or battle.opponent_mu_before is None
        or battle.opponent_sigma_before is None
        or battle.skill_change is None
        or battle.opponent_skill_change is None
    ):
        raise ValueError(f"battle_id={battle.id} is marked processed but has no rating snapshot")
    return BattleRecord(
        id=battle.id,
        squad_id=battle.squad_id,
        opponent_id=battle.opponent_id,
        score=battle.score,
        opponent_score=battle.opponent_score,
        rating_before=RatingValue(mean=battle.mu_before, deviation=battle.sigma_before),
        opponent_rating_before=RatingValue(
            mean=battle.opponent_mu_before,
            deviation=battle.opponent_sigma_before,
        ),
        skill_change=battle.skill_change,
        opponent_skill_change=battle.opponent_skill_change,
        end_date=battle.end_date,
        processed_at=battle.processed_at,
    )


def _to_result(battle: Battle) -> BattleResult:
    return BattleResult(
        id=battle.id,
        squad_id=battle.squad_id,
        opponent_id=battle.opponent_id,
        score=battle.score,
        opponent_score=battle.opponent_score,
        end_date=battle.end_date,
    )


def insert_battle_results(session: Session, results: Sequence[BattleResult]) -> None:
    """Bulk insert unprocessed battles."""
    if not results:
        return
    payload = [
        {
            "id": result.id,
            "squad_id": result.squad_id,
            "opponent_id": result.opponent_id,
            "score": result.score,
            "opponent_score": result.opponent_score,
            "end_date": result.end_date,
        }
        for result in results
    ]
    session.execute(insert(Battle), payload)


def fetch_unprocessed_battles(session: Session) -> list[BattleResult]:
    """Unprocessed battles in the order they must be applied."""
    statement = (
        select(Battle)
        .where(Battle.processed_at.is_(None))
        .order_by(Battle.end_date, Battle.id)
    )
    return [_to_result(battle) for battle in session.execute(statement).scalars()]


def fetch_offensive_battles(session: Session, squad_id: str) -> list[BattleRecord]:
    """Processed battles the squad initiated."""
    statement = (
        select(Battle)
        .where(Battle.squad_id == squad_id)
        .where(Battle.processed_at.is_not(None))
    )
    return [_to_record(battle) for battle in session.execute(statement).scalars()]


def fetch_defensive_battles(session: Session, squad_id: str) -> list[BattleRecord]:
    """Processed battles in which the squad was the target."""
    statement = (
        select(Battle)
        .where(Battle.opponent_id == squad_id)
        .where(Battle.processed_at.is_not(None))
    )
    return [_to_record(battle) for battle in session.execute(statement).scalars()]


def apply_battle_resolution(session: Session, resolution: BattleResolution) -> None:
    """Write both squads' next state and seal the battle record; caller commits."""
    record = resolution.record
    battle = session.get(Battle, record.id)
    if battle is None:
        raise LookupError(f"battle_id={record.id} was not found")
    if battle.processed_at is not None:
        raise ValueError(f"battle_id={record.id} was already processed at {battle.processed_at}")

    save_squad_snapshot(session, resolution.squad)
    save_squad_snapshot(session, resolution.opponent)

    battle.mu_before = record.rating_before.mean
    battle.sigma_before = record.rating_before.deviation
    battle.opponent_mu_before = record.opponent_rating_before.mean
    battle.opponent_sigma_before = record.opponent_rating_before.deviation
    battle.skill_change = record.skill_change
    battle.opponent_skill_change = record.opponent_skill_change
    battle.processed_at = record.processed_at
    session.flush()


class SessionBattleSource:
    """BattleSource backed by an open SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_squad(self, squad_id: str) -> SquadSnapshot:
        return get_squad(self.session, squad_id)

    def offensive_battles(self, squad_id: str) -> list[BattleRecord]:
        return fetch_offensive_battles(self.session, squad_id)

    def defensive_battles(self, squad_id: str) -> list[BattleRecord]:
        return fetch_defensive_battles(self.session, squad_id)


__all__ = [
    "SessionBattleSource",
    "apply_battle_resolution",
    "fetch_defensive_battles",
    "fetch_offensive_battles",
    "fetch_unprocessed_battles",
    "insert_battle_results",
]
