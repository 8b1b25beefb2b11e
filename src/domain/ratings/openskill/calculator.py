"""Squad OpenSkill logic (Plackett-Luce model)."""

from __future__ import annotations

from dataclasses import dataclass
from math import isfinite

from openskill.models import PlackettLuce

from domain.ratings.common import Outcome, RatingValue
from domain.ratings.errors import InvalidRating

_RANKS_BY_OUTCOME: dict[Outcome, list[int]] = {
    Outcome.WIN: [1, 2],
    Outcome.LOSE: [2, 1],
    Outcome.DRAW: [1, 1],
}


@dataclass(frozen=True)
class OpenSkillParameters:
    initial_mu: float = 25.0
    initial_sigma: float = 25.0 / 3.0
    beta: float = 25.0 / 6.0
    kappa: float = 0.0001
    tau: float = 25.0 / 300.0
    limit_sigma: bool = True
    balance: bool = False
    sigma_multiplier: float = 3.0
    deviation_floor: float = 0.5


def validate_rating(rating: RatingValue) -> None:
    """Raise InvalidRating unless the rating has finite values and a positive deviation."""
    if not isfinite(rating.mean) or not isfinite(rating.deviation) or rating.deviation <= 0.0:
        raise InvalidRating(rating.mean, rating.deviation)


def calculate_skill_score(rating: RatingValue, sigma_multiplier: float) -> float:
    """Conservative skill estimate: mean minus k deviations."""
    validate_rating(rating)
    return rating.mean - (sigma_multiplier * rating.deviation)


class SquadOpenSkillCalculator:
    """Stateless squad-vs-squad OpenSkill updater.

    Every call builds fresh library ratings from the given values, so the same
    calculator serves persisted updates and counterfactual forecasts alike.
    """

    def __init__(self, params: OpenSkillParameters) -> None:
        self.params = params
        self._model = PlackettLuce(
            mu=self.params.initial_mu,
            sigma=self.params.initial_sigma,
            beta=self.params.beta,
            kappa=self.params.kappa,
            tau=self.params.tau,
            limit_sigma=self.params.limit_sigma,
            balance=self.params.balance,
        )

    def initial_rating(self) -> RatingValue:
        return RatingValue(mean=self.params.initial_mu, deviation=self.params.initial_sigma)

    def score(self, rating: RatingValue) -> float:
        return calculate_skill_score(rating, self.params.sigma_multiplier)

    def _to_model_rating(self, rating: RatingValue):
        validate_rating(rating)
        return self._model.rating(mu=rating.mean, sigma=rating.deviation)

    def _floor_deviation(self, pre_deviation: float, post_deviation: float) -> float:
        return min(pre_deviation, max(post_deviation, self.params.deviation_floor))

    def expected_outcome(self, rating_a: RatingValue, rating_b: RatingValue) -> tuple[float, float]:
        """Return (probability that A wins, probability of a draw)."""
        squad_a = [self._to_model_rating(rating_a)]
        squad_b = [self._to_model_rating(rating_b)]
        win_probability = float(self._model.predict_win([squad_a, squad_b])[0])
        draw_probability = float(self._model.predict_draw([squad_a, squad_b]))
        return win_probability, draw_probability

    def update(
        self,
        rating_a: RatingValue,
        rating_b: RatingValue,
        outcome_for_a: Outcome,
    ) -> tuple[RatingValue, RatingValue]:
        """Apply one battle between A and B and return both post-battle ratings."""
        squad_a_pre = self._to_model_rating(rating_a)
        squad_b_pre = self._to_model_rating(rating_b)

        updated = self._model.rate(
            [[squad_a_pre], [squad_b_pre]],
            ranks=list(_RANKS_BY_OUTCOME[outcome_for_a]),
        )
        squad_a_post = updated[0][0]
        squad_b_post = updated[1][0]

        rating_a_post = RatingValue(
            mean=float(squad_a_post.mu),
            deviation=self._floor_deviation(rating_a.deviation, float(squad_a_post.sigma)),
        )
        rating_b_post = RatingValue(
            mean=float(squad_b_post.mu),
            deviation=self._floor_deviation(rating_b.deviation, float(squad_b_post.sigma)),
        )
        return rating_a_post, rating_b_post


__all__ = [
    "OpenSkillParameters",
    "SquadOpenSkillCalculator",
    "calculate_skill_score",
    "validate_rating",
]
