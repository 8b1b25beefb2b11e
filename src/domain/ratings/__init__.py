"""Rating-system domain modules."""

from domain.ratings.common import (
    BattleRecord,
    BattleResult,
    Outcome,
    RatingValue,
    SquadSnapshot,
)
from domain.ratings.errors import AmbiguousLedgerKey, InvalidRating, UnresolvedOpponent

__all__ = [
    "AmbiguousLedgerKey",
    "BattleRecord",
    "BattleResult",
    "InvalidRating",
    "Outcome",
    "RatingValue",
    "SquadSnapshot",
    "UnresolvedOpponent",
]
