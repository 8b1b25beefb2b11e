"""Error conditions raised by the rating core."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime


class InvalidRating(ValueError):
    """A rating carries a non-positive or non-finite deviation."""

    def __init__(self, mean: float, deviation: float) -> None:
        super().__init__(f"invalid rating mean={mean!r} deviation={deviation!r}: deviation must be > 0")
        self.mean = mean
        self.deviation = deviation


class UnresolvedOpponent(LookupError):
    """A squad reference is unknown or points at a deleted squad."""

    def __init__(self, squad_id: str, *, deleted: bool = False) -> None:
        reason = "is deleted" if deleted else "was not found"
        super().__init__(f"squad_id={squad_id} {reason}")
        self.squad_id = squad_id
        self.deleted = deleted


class AmbiguousLedgerKey(ValueError):
    """Two or more battles of one squad share the same end date."""

    def __init__(self, squad_id: str, end_date: datetime, battle_ids: Sequence[str]) -> None:
        super().__init__(
            f"squad_id={squad_id} has {len(battle_ids)} battles ending at {end_date.isoformat()}: "
            f"{', '.join(battle_ids)}"
        )
        self.squad_id = squad_id
        self.end_date = end_date
        self.battle_ids = tuple(battle_ids)


__all__ = ["AmbiguousLedgerKey", "InvalidRating", "UnresolvedOpponent"]
