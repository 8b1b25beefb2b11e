"""Rank derivation from skill scores, including the provisional state.

Tier numbers run in one direction everywhere: a lower tier number is a
better rank, and tier 1 is the best.
"""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Iterable, Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class RankingParameters:
    win_threshold: int = 15
    tier_cutoffs: tuple[float, ...] = (35.0, 30.0, 25.0, 20.0, 15.0, 10.0, 5.0, 0.0)


@dataclass(frozen=True)
class Ranked:
    """Concrete rank; lower tier is better."""

    tier: int

    def label(self) -> str:
        return f"#{self.tier}"


@dataclass(frozen=True)
class Provisional:
    """Squad still short of the win threshold.

    ``skill`` only orders provisional squads among themselves and is never
    shown as a tier.
    """

    wins_remaining: int
    skill: float

    def label(self) -> str:
        noun = "win" if self.wins_remaining == 1 else "wins"
        return f"Unranked ({self.wins_remaining} {noun} to go)"


Rank = Ranked | Provisional


class RankScale:
    """Descending skill cutoffs; the tier is one plus the cutoffs above a score."""

    def __init__(self, cutoffs: Sequence[float]) -> None:
        values = [float(cutoff) for cutoff in cutoffs]
        for higher, lower in zip(values, values[1:]):
            if lower > higher:
                raise ValueError(f"rank cutoffs must be in descending order, got {values}")
        # Negated and ascending: cutoffs strictly above a score sort before its negation.
        self._negated = sorted(-value for value in values)

    @classmethod
    def from_leaderboard(cls, skills: Iterable[float]) -> RankScale:
        """Scale whose tiers are leaderboard positions among the given ranked skills."""
        return cls(sorted(skills, reverse=True))

    def tier_for(self, skill: float) -> int:
        return 1 + bisect_left(self._negated, -skill)


class RankClassifier:
    """Map a (skill, wins) pair to a Ranked or Provisional rank.

    Wins are always supplied by the caller, so the classifier serves
    counterfactual forecasts as well as persisted standings.
    """

    def __init__(self, params: RankingParameters, scale: RankScale | None = None) -> None:
        if params.win_threshold < 1:
            raise ValueError("win_threshold must be >= 1")
        self.params = params
        self.scale = scale if scale is not None else RankScale(params.tier_cutoffs)

    def with_scale(self, scale: RankScale) -> RankClassifier:
        return RankClassifier(self.params, scale=scale)

    def wins_remaining(self, wins: int, wins_from_resolution: int = 0) -> int:
        return self.params.win_threshold - wins - wins_from_resolution

    def classify(self, skill: float, wins: int, wins_from_resolution: int = 0) -> Rank:
        remaining = self.wins_remaining(wins, wins_from_resolution)
        if remaining > 0:
            return Provisional(wins_remaining=remaining, skill=skill)
        return Ranked(tier=self.scale.tier_for(skill))


def rank_sort_key(rank: Rank) -> tuple[int, float]:
    """Sort key placing ranked squads first (best tier first), then provisional by skill desc."""
    if isinstance(rank, Ranked):
        return (0, float(rank.tier))
    return (1, -rank.skill)


__all__ = [
    "Provisional",
    "Rank",
    "RankClassifier",
    "RankScale",
    "Ranked",
    "RankingParameters",
    "rank_sort_key",
]
