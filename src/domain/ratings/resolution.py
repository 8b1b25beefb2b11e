"""Apply one finished battle to both squads' ratings."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

from domain.ratings.common import BattleRecord, BattleResult, Outcome, SquadSnapshot
from domain.ratings.openskill.calculator import SquadOpenSkillCalculator


@dataclass(frozen=True)
class BattleResolution:
    """Next squad states plus the finished battle record, ready to commit together."""

    outcome: Outcome
    squad: SquadSnapshot
    opponent: SquadSnapshot
    record: BattleRecord


def resolve_battle(
    calculator: SquadOpenSkillCalculator,
    squad: SquadSnapshot,
    opponent: SquadSnapshot,
    result: BattleResult,
    *,
    processed_at: datetime,
) -> BattleResolution:
    if result.squad_id == result.opponent_id:
        raise ValueError(f"battle_id={result.id} has identical squads ({result.squad_id})")
    if (squad.id, opponent.id) != (result.squad_id, result.opponent_id):
        raise ValueError(
            f"battle_id={result.id} is between {result.squad_id}/{result.opponent_id}, "
            f"got squads {squad.id}/{opponent.id}"
        )

    outcome = Outcome.from_scores(result.score, result.opponent_score)
    squad_post, opponent_post = calculator.update(squad.rating, opponent.rating, outcome)

    skill_change = calculator.score(squad_post) - calculator.score(squad.rating)
    opponent_skill_change = calculator.score(opponent_post) - calculator.score(opponent.rating)

    record = BattleRecord(
        id=result.id,
        squad_id=result.squad_id,
        opponent_id=result.opponent_id,
        score=result.score,
        opponent_score=result.opponent_score,
        rating_before=squad.rating,
        opponent_rating_before=opponent.rating,
        skill_change=skill_change,
        opponent_skill_change=opponent_skill_change,
        end_date=result.end_date,
        processed_at=processed_at,
    )
    return BattleResolution(
        outcome=outcome,
        squad=replace(squad, rating=squad_post, wins=squad.wins + outcome.wins_awarded),
        opponent=replace(
            opponent,
            rating=opponent_post,
            wins=opponent.wins + outcome.mirror().wins_awarded,
        ),
        record=record,
    )


__all__ = ["BattleResolution", "resolve_battle"]
