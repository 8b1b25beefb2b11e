"""Merge a squad's offensive and defensive battles into one history."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from domain.ratings.common import BattleRecord, SquadSnapshot
from domain.ratings.errors import AmbiguousLedgerKey, UnresolvedOpponent
from domain.ratings.openskill.calculator import calculate_skill_score

logger = logging.getLogger(__name__)


class BattleSource(Protocol):
    """Read-only persistence contract the ledger consumes."""

    def get_squad(self, squad_id: str) -> SquadSnapshot: ...

    def offensive_battles(self, squad_id: str) -> Sequence[BattleRecord]: ...

    def defensive_battles(self, squad_id: str) -> Sequence[BattleRecord]: ...


@dataclass(frozen=True)
class HistoryEntry:
    """One battle seen from the queried squad's side."""

    battle_id: str
    date: datetime
    own_score: int
    opponent_score: int
    opponent_id: str
    skill_difference_before: float
    skill_change: float
    processed_at: datetime | None = None


@dataclass(frozen=True)
class LedgerHistory:
    squad_id: str
    entries: list[HistoryEntry]
    ambiguous_keys: list[AmbiguousLedgerKey] = field(default_factory=list)


def skill_ratio(opponent_skill: float, own_skill: float) -> float:
    """Opponent-to-own skill ratio with both sides clamped to at least 1."""
    return max(1.0, opponent_skill) / max(1.0, own_skill)


def _sort_key(entry: HistoryEntry) -> tuple[datetime, bool, datetime, str]:
    processed_at = entry.processed_at or datetime.min
    return (entry.date, entry.processed_at is not None, processed_at, entry.battle_id)


class BattleLedger:
    """Perspective-normalized, newest-first battle history.

    Battles sharing an end date are all kept; the most recently processed one
    comes first and the collision is reported as an AmbiguousLedgerKey.
    """

    def __init__(self, source: BattleSource | None, *, sigma_multiplier: float) -> None:
        self.source = source
        self.sigma_multiplier = sigma_multiplier

    def _entry(self, record: BattleRecord, *, defensive: bool) -> HistoryEntry:
        # Defensive records store the queried squad in the opponent_* fields.
        if defensive:
            own_rating, opponent_rating = record.opponent_rating_before, record.rating_before
            own_score, opponent_score = record.opponent_score, record.score
            opponent_id = record.squad_id
            skill_change = record.opponent_skill_change
        else:
            own_rating, opponent_rating = record.rating_before, record.opponent_rating_before
            own_score, opponent_score = record.score, record.opponent_score
            opponent_id = record.opponent_id
            skill_change = record.skill_change

        return HistoryEntry(
            battle_id=record.id,
            date=record.end_date,
            own_score=own_score,
            opponent_score=opponent_score,
            opponent_id=opponent_id,
            skill_difference_before=skill_ratio(
                calculate_skill_score(opponent_rating, self.sigma_multiplier),
                calculate_skill_score(own_rating, self.sigma_multiplier),
            ),
            skill_change=skill_change,
            processed_at=record.processed_at,
        )

    def entries(
        self,
        squad_id: str,
        offensive: Sequence[BattleRecord],
        defensive: Sequence[BattleRecord],
    ) -> LedgerHistory:
        """Reshape already-fetched records into a history for ``squad_id``."""
        merged: list[HistoryEntry] = []
        for record in offensive:
            if record.squad_id != squad_id:
                raise ValueError(f"battle_id={record.id} is not an offensive battle of squad_id={squad_id}")
            merged.append(self._entry(record, defensive=False))
        for record in defensive:
            if record.opponent_id != squad_id:
                raise ValueError(f"battle_id={record.id} is not a defensive battle of squad_id={squad_id}")
            merged.append(self._entry(record, defensive=True))

        merged.sort(key=_sort_key, reverse=True)

        by_date: dict[datetime, list[str]] = defaultdict(list)
        for entry in merged:
            by_date[entry.date].append(entry.battle_id)
        ambiguous_keys = [
            AmbiguousLedgerKey(squad_id, end_date, battle_ids)
            for end_date, battle_ids in by_date.items()
            if len(battle_ids) > 1
        ]
        for collision in ambiguous_keys:
            logger.warning("ledger key collision: %s", collision)

        return LedgerHistory(squad_id=squad_id, entries=merged, ambiguous_keys=ambiguous_keys)

    def history(self, squad_id: str, *, strict: bool = False) -> LedgerHistory:
        """Fetch and merge the battles of ``squad_id`` from the configured source."""
        if self.source is None:
            raise RuntimeError("BattleLedger.history requires a battle source")

        squad = self.source.get_squad(squad_id)
        if squad.deleted:
            raise UnresolvedOpponent(squad_id, deleted=True)

        result = self.entries(
            squad_id,
            self.source.offensive_battles(squad_id),
            self.source.defensive_battles(squad_id),
        )
        if strict and result.ambiguous_keys:
            raise result.ambiguous_keys[0]
        return result


__all__ = ["BattleLedger", "BattleSource", "HistoryEntry", "LedgerHistory", "skill_ratio"]
