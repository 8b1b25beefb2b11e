"""Counterfactual three-way battle forecasts."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from domain.ratings.common import Outcome, SquadSnapshot
from domain.ratings.errors import UnresolvedOpponent
from domain.ratings.openskill.calculator import SquadOpenSkillCalculator
from domain.ratings.ranking import Rank, RankClassifier, RankScale


class Framing(str, Enum):
    """Which outcome the presentation layer leads with."""

    FAVORITE = "favorite"
    UNDERDOG = "underdog"
    EVEN = "even"


_FRAMING_ORDER: dict[Framing, tuple[Outcome, Outcome, Outcome]] = {
    Framing.FAVORITE: (Outcome.WIN, Outcome.LOSE, Outcome.DRAW),
    Framing.UNDERDOG: (Outcome.LOSE, Outcome.WIN, Outcome.DRAW),
    Framing.EVEN: (Outcome.DRAW, Outcome.WIN, Outcome.LOSE),
}


@dataclass(frozen=True)
class Scenario:
    """Rank and skill movement for both squads under one hypothetical outcome."""

    outcome: Outcome
    squad_rank_before: Rank
    squad_rank_after: Rank
    squad_skill_delta: float
    opponent_rank_before: Rank
    opponent_rank_after: Rank
    opponent_skill_delta: float


@dataclass(frozen=True)
class Forecast:
    squad: SquadSnapshot
    opponent: SquadSnapshot
    framing: Framing
    scenarios: dict[Outcome, Scenario]
    win_probability: float
    draw_probability: float

    def ordered(self) -> list[Scenario]:
        """Scenarios in presentation order for this forecast's framing."""
        return [self.scenarios[outcome] for outcome in _FRAMING_ORDER[self.framing]]


def framing_for(squad_skill: float, opponent_skill: float) -> Framing:
    if squad_skill > opponent_skill:
        return Framing.FAVORITE
    if squad_skill < opponent_skill:
        return Framing.UNDERDOG
    return Framing.EVEN


class ForecastEngine:
    """Run the rating update for every outcome without persisting anything.

    With ``leaderboard`` (skills of ranked squads other than the two
    participants) each side is ranked by leaderboard position against those
    squads plus its rival, the rival taken at its skill and wins for the same
    moment. Without it the classifier's own scale is used for both sides.
    """

    def __init__(
        self,
        calculator: SquadOpenSkillCalculator,
        classifier: RankClassifier,
        *,
        leaderboard: Sequence[float] | None = None,
    ) -> None:
        self.calculator = calculator
        self.classifier = classifier
        self.leaderboard = None if leaderboard is None else tuple(leaderboard)

    def _classify(
        self,
        skill: float,
        wins: int,
        wins_from_resolution: int,
        *,
        rival_skill: float,
        rival_wins: int,
    ) -> Rank:
        if self.leaderboard is None:
            return self.classifier.classify(skill, wins, wins_from_resolution)
        skills = list(self.leaderboard)
        if self.classifier.wins_remaining(rival_wins) <= 0:
            skills.append(rival_skill)
        classifier = self.classifier.with_scale(RankScale.from_leaderboard(skills))
        return classifier.classify(skill, wins, wins_from_resolution)

    def forecast(self, squad: SquadSnapshot, opponent: SquadSnapshot) -> Forecast:
        if squad.id == opponent.id:
            raise ValueError(f"cannot forecast squad_id={squad.id} against itself")
        for snapshot in (squad, opponent):
            if snapshot.deleted:
                raise UnresolvedOpponent(snapshot.id, deleted=True)

        squad_skill = self.calculator.score(squad.rating)
        opponent_skill = self.calculator.score(opponent.rating)
        squad_rank_before = self._classify(
            squad_skill,
            squad.wins,
            0,
            rival_skill=opponent_skill,
            rival_wins=opponent.wins,
        )
        opponent_rank_before = self._classify(
            opponent_skill,
            opponent.wins,
            0,
            rival_skill=squad_skill,
            rival_wins=squad.wins,
        )

        scenarios: dict[Outcome, Scenario] = {}
        for outcome in Outcome:
            squad_rating, opponent_rating = self.calculator.update(squad.rating, opponent.rating, outcome)
            squad_new_skill = self.calculator.score(squad_rating)
            opponent_new_skill = self.calculator.score(opponent_rating)
            squad_wins = squad.wins + outcome.wins_awarded
            opponent_wins = opponent.wins + outcome.mirror().wins_awarded

            scenarios[outcome] = Scenario(
                outcome=outcome,
                squad_rank_before=squad_rank_before,
                squad_rank_after=self._classify(
                    squad_new_skill,
                    squad.wins,
                    outcome.wins_awarded,
                    rival_skill=opponent_new_skill,
                    rival_wins=opponent_wins,
                ),
                squad_skill_delta=squad_new_skill - squad_skill,
                opponent_rank_before=opponent_rank_before,
                opponent_rank_after=self._classify(
                    opponent_new_skill,
                    opponent.wins,
                    outcome.mirror().wins_awarded,
                    rival_skill=squad_new_skill,
                    rival_wins=squad_wins,
                ),
                opponent_skill_delta=opponent_new_skill - opponent_skill,
            )

        win_probability, draw_probability = self.calculator.expected_outcome(squad.rating, opponent.rating)
        return Forecast(
            squad=squad,
            opponent=opponent,
            framing=framing_for(squad_skill, opponent_skill),
            scenarios=scenarios,
            win_probability=win_probability,
            draw_probability=draw_probability,
        )


__all__ = ["Forecast", "ForecastEngine", "Framing", "Scenario", "framing_for"]
