"""Shared types for squad rating calculators."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Outcome(str, Enum):
    """Battle result expressed from one reference squad's point of view."""

    WIN = "win"
    LOSE = "lose"
    DRAW = "draw"

    def mirror(self) -> Outcome:
        """Return the same result seen from the opponent's side."""
        if self is Outcome.WIN:
            return Outcome.LOSE
        if self is Outcome.LOSE:
            return Outcome.WIN
        return Outcome.DRAW

    @property
    def wins_awarded(self) -> int:
        return 1 if self is Outcome.WIN else 0

    @classmethod
    def from_scores(cls, score: int, opponent_score: int) -> Outcome:
        if score > opponent_score:
            return cls.WIN
        if score < opponent_score:
            return cls.LOSE
        return cls.DRAW


@dataclass(frozen=True)
class RatingValue:
    """Belief over a squad's true skill: mean and uncertainty radius."""

    mean: float
    deviation: float


@dataclass(frozen=True)
class SquadSnapshot:
    """Rating-relevant projection of a persisted squad."""

    id: str
    rating: RatingValue
    wins: int = 0
    deleted: bool = False
    name: str | None = None

    def display_name(self) -> str:
        return self.name if self.name else self.id


@dataclass(frozen=True)
class BattleResult:
    """Raw battle outcome as reported by the game, before rating processing."""

    id: str
    squad_id: str
    opponent_id: str
    score: int
    opponent_score: int
    end_date: datetime


@dataclass(frozen=True)
class BattleRecord:
    """Processed battle: the durable evidence of one rating transition."""

    id: str
    squad_id: str
    opponent_id: str
    score: int
    opponent_score: int
    rating_before: RatingValue
    opponent_rating_before: RatingValue
    skill_change: float
    opponent_skill_change: float
    end_date: datetime
    processed_at: datetime | None = None
