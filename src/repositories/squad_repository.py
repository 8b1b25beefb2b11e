"""Persistence helpers for squads using SQLAlchemy."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from domain.ratings.common import RatingValue, SquadSnapshot
from domain.ratings.errors import UnresolvedOpponent
from models import Battle, Squad


def ensure_squad_schema(engine: Engine) -> None:
    """Create squads/battles tables and indexes if needed."""
    with engine.begin() as connection:
        Squad.__table__.create(bind=connection, checkfirst=True)
        Battle.__table__.create(bind=connection, checkfirst=True)


def to_snapshot(squad: Squad) -> SquadSnapshot:
    return SquadSnapshot(
        id=squad.id,
        rating=RatingValue(mean=float(squad.mu), deviation=float(squad.sigma)),
        wins=int(squad.wins),
        deleted=bool(squad.deleted),
        name=squad.name,
    )


def create_squad(
    session: Session,
    *,
    squad_id: str,
    name: str,
    rating: RatingValue,
) -> Squad:
    """Register a squad with its prior rating."""
    squad = Squad(id=squad_id, name=name, mu=rating.mean, sigma=rating.deviation, wins=0, deleted=False)
    session.add(squad)
    session.flush()
    return squad


def get_squad(session: Session, squad_id: str) -> SquadSnapshot:
    """Return the squad snapshot, raising UnresolvedOpponent for unknown ids."""
    squad = session.get(Squad, squad_id)
    if squad is None:
        raise UnresolvedOpponent(squad_id)
    return to_snapshot(squad)


def get_active_squad(session: Session, squad_id: str) -> SquadSnapshot:
    """Like get_squad, but deleted squads are unresolved too."""
    snapshot = get_squad(session, squad_id)
    if snapshot.deleted:
        raise UnresolvedOpponent(squad_id, deleted=True)
    return snapshot


def list_squads(session: Session, *, include_deleted: bool = False) -> list[SquadSnapshot]:
    statement = select(Squad).order_by(Squad.id)
    if not include_deleted:
        statement = statement.where(Squad.deleted.is_(False))
    return [to_snapshot(squad) for squad in session.execute(statement).scalars()]


def search_squads(
    session: Session,
    term: str,
    *,
    sigma_multiplier: float,
    limit: int = 20,
) -> list[SquadSnapshot]:
    """Active squads whose name contains ``term``, best skill score first."""
    skill = Squad.mu - (sigma_multiplier * Squad.sigma)
    statement = (
        select(Squad)
        .where(Squad.deleted.is_(False))
        .where(Squad.name.ilike(f"%{term}%"))
        .order_by(skill.desc(), Squad.id)
        .limit(limit)
    )
    return [to_snapshot(squad) for squad in session.execute(statement).scalars()]


def ranked_skills(
    session: Session,
    *,
    sigma_multiplier: float,
    win_threshold: int,
    exclude_ids: Sequence[str] = (),
) -> list[float]:
    """Skill scores of active squads that have reached the win threshold."""
    skill = Squad.mu - (sigma_multiplier * Squad.sigma)
    statement = (
        select(skill)
        .where(Squad.deleted.is_(False))
        .where(Squad.wins >= win_threshold)
    )
    if exclude_ids:
        statement = statement.where(Squad.id.not_in(list(exclude_ids)))
    return [float(value) for value in session.execute(statement).scalars()]


def save_squad_snapshot(session: Session, snapshot: SquadSnapshot) -> Squad:
    """Write a squad's next rating and wins count."""
    squad = session.get(Squad, snapshot.id)
    if squad is None:
        raise UnresolvedOpponent(snapshot.id)
    squad.mu = snapshot.rating.mean
    squad.sigma = snapshot.rating.deviation
    squad.wins = snapshot.wins
    squad.updated_at = datetime.now(UTC).replace(tzinfo=None)
    return squad


__all__ = [
    "create_squad",
    "ensure_squad_schema",
    "get_active_squad",
    "get_squad",
    "list_squads",
    "ranked_skills",
    "save_squad_snapshot",
    "search_squads",
    "to_snapshot",
]
