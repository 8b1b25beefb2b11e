"""Unit tests for counterfactual battle forecasts."""

from __future__ import annotations

import pytest

from domain.ratings.common import Outcome, RatingValue, SquadSnapshot
from domain.ratings.errors import InvalidRating, UnresolvedOpponent
from domain.ratings.forecast import ForecastEngine, Framing
from domain.ratings.openskill.calculator import OpenSkillParameters, SquadOpenSkillCalculator
from domain.ratings.ranking import Provisional, RankClassifier, Ranked, RankingParameters, RankScale


def _engine(win_threshold: int = 15, sigma_multiplier: float = 1.0) -> ForecastEngine:
    calculator = SquadOpenSkillCalculator(
        OpenSkillParameters(
            initial_mu=1500.0,
            initial_sigma=350.0,
            beta=175.0,
            sigma_multiplier=sigma_multiplier,
            deviation_floor=10.0,
        )
    )
    classifier = RankClassifier(
        RankingParameters(
            win_threshold=win_threshold,
            tier_cutoffs=(1500.0, 1400.0, 1300.0, 1200.0, 1100.0, 1000.0),
        )
    )
    return ForecastEngine(calculator, classifier)


SQUAD_A = SquadSnapshot(id="a", name="Alpha", rating=RatingValue(1500.0, 200.0), wins=14)
SQUAD_B = SquadSnapshot(id="b", name="Bravo", rating=RatingValue(1400.0, 150.0), wins=20)


def test_favourite_forecast_crosses_threshold_only_on_win() -> None:
    engine = _engine()
    forecast = engine.forecast(SQUAD_A, SQUAD_B)

    assert forecast.framing is Framing.FAVORITE
    assert set(forecast.scenarios) == {Outcome.WIN, Outcome.LOSE, Outcome.DRAW}
    assert [scenario.outcome for scenario in forecast.ordered()] == [
        Outcome.WIN,
        Outcome.LOSE,
        Outcome.DRAW,
    ]

    win = forecast.scenarios[Outcome.WIN]
    assert win.squad_rank_before == Provisional(wins_remaining=1, skill=pytest.approx(1300.0))
    assert isinstance(win.squad_rank_after, Ranked)
    assert win.squad_rank_after.tier == engine.classifier.scale.tier_for(1300.0 + win.squad_skill_delta)
    assert win.squad_skill_delta > 0.0
    assert win.opponent_skill_delta < 0.0
    assert isinstance(win.opponent_rank_before, Ranked)
    assert isinstance(win.opponent_rank_after, Ranked)

    lose = forecast.scenarios[Outcome.LOSE]
    assert isinstance(lose.squad_rank_after, Provisional)
    assert lose.squad_rank_after.wins_remaining == 1
    assert lose.squad_skill_delta < 0.0
    assert lose.opponent_skill_delta > 0.0
    assert isinstance(lose.opponent_rank_after, Ranked)

    draw = forecast.scenarios[Outcome.DRAW]
    assert isinstance(draw.squad_rank_after, Provisional)
    assert draw.squad_rank_after.wins_remaining == 1
    assert isinstance(draw.opponent_rank_after, Ranked)


def test_draw_scenario_pulls_means_together_without_wins() -> None:
    engine = _engine()
    squad_post, opponent_post = engine.calculator.update(SQUAD_A.rating, SQUAD_B.rating, Outcome.DRAW)

    assert squad_post.mean < SQUAD_A.rating.mean
    assert opponent_post.mean > SQUAD_B.rating.mean

    forecast = engine.forecast(SQUAD_A, SQUAD_B)
    draw = forecast.scenarios[Outcome.DRAW]
    assert draw.squad_skill_delta == pytest.approx(
        engine.calculator.score(squad_post) - engine.calculator.score(SQUAD_A.rating)
    )


def test_forecast_does_not_touch_input_snapshots() -> None:
    engine = _engine()
    engine.forecast(SQUAD_A, SQUAD_B)

    assert SQUAD_A.rating == RatingValue(1500.0, 200.0)
    assert SQUAD_A.wins == 14
    assert SQUAD_B.rating == RatingValue(1400.0, 150.0)
    assert SQUAD_B.wins == 20


def test_underdog_framing_leads_with_loss() -> None:
    forecast = _engine().forecast(SQUAD_B, SQUAD_A)

    assert forecast.framing is Framing.UNDERDOG
    assert [scenario.outcome for scenario in forecast.ordered()] == [
        Outcome.LOSE,
        Outcome.WIN,
        Outcome.DRAW,
    ]
    assert len(forecast.scenarios) == 3


def test_even_framing_leads_with_draw_and_shows_each_outcome_once() -> None:
    twin_a = SquadSnapshot(id="x", rating=RatingValue(1500.0, 200.0), wins=3)
    twin_b = SquadSnapshot(id="y", rating=RatingValue(1500.0, 200.0), wins=3)

    forecast = _engine().forecast(twin_a, twin_b)

    assert forecast.framing is Framing.EVEN
    assert [scenario.outcome for scenario in forecast.ordered()] == [
        Outcome.DRAW,
        Outcome.WIN,
        Outcome.LOSE,
    ]
    assert forecast.win_probability == pytest.approx(0.5, abs=1e-6)


def test_opponent_win_counts_on_squad_loss() -> None:
    squad = SquadSnapshot(id="s", rating=RatingValue(1600.0, 120.0), wins=30)
    opponent = SquadSnapshot(id="o", rating=RatingValue(1300.0, 120.0), wins=14)

    forecast = _engine().forecast(squad, opponent)

    assert isinstance(forecast.scenarios[Outcome.LOSE].opponent_rank_after, Ranked)
    assert forecast.scenarios[Outcome.WIN].opponent_rank_after == Provisional(
        wins_remaining=1,
        skill=pytest.approx(1180.0 + forecast.scenarios[Outcome.WIN].opponent_skill_delta),
    )
    assert isinstance(forecast.scenarios[Outcome.DRAW].opponent_rank_after, Provisional)


def test_favourite_has_higher_win_probability() -> None:
    forecast = _engine().forecast(SQUAD_A, SQUAD_B)
    assert forecast.win_probability > 0.5
    assert 0.0 < forecast.draw_probability < 1.0


def test_invalid_rating_is_surfaced() -> None:
    broken = SquadSnapshot(id="broken", rating=RatingValue(1500.0, 0.0), wins=0)
    with pytest.raises(InvalidRating):
        _engine().forecast(SQUAD_A, broken)


def test_deleted_opponent_is_unresolved() -> None:
    deleted = SquadSnapshot(id="gone", rating=RatingValue(1500.0, 200.0), wins=0, deleted=True)
    with pytest.raises(UnresolvedOpponent, match="gone is deleted"):
        _engine().forecast(SQUAD_A, deleted)


def test_forecast_against_self_is_rejected() -> None:
    with pytest.raises(ValueError, match="against itself"):
        _engine().forecast(SQUAD_A, SQUAD_A)


def _leaderboard_engine(others: list[float]) -> ForecastEngine:
    calculator = SquadOpenSkillCalculator(OpenSkillParameters())
    classifier = RankClassifier(RankingParameters(win_threshold=15))
    return ForecastEngine(calculator, classifier, leaderboard=others)


LEADER = SquadSnapshot(id="a", name="Alpha", rating=RatingValue(40.0, 2.0), wins=20)
RUNNER_UP = SquadSnapshot(id="b", name="Bravo", rating=RatingValue(30.0, 2.0), wins=20)
THIRD = SquadSnapshot(id="c", name="Charlie", rating=RatingValue(20.0, 2.0), wins=20)


def test_leaderboard_ranks_before_match_leaderboard_positions() -> None:
    calculator = SquadOpenSkillCalculator(OpenSkillParameters())
    board = RankScale.from_leaderboard(calculator.score(squad.rating) for squad in (LEADER, RUNNER_UP, THIRD))
    positions = {squad.id: board.tier_for(calculator.score(squad.rating)) for squad in (LEADER, RUNNER_UP, THIRD)}
    assert positions == {"a": 1, "b": 2, "c": 3}

    pairs = [(RUNNER_UP, LEADER, THIRD), (THIRD, RUNNER_UP, LEADER), (LEADER, THIRD, RUNNER_UP)]
    for squad, opponent, bystander in pairs:
        forecast = _leaderboard_engine([calculator.score(bystander.rating)]).forecast(squad, opponent)
        for scenario in forecast.ordered():
            assert scenario.squad_rank_before == Ranked(tier=positions[squad.id])
            assert scenario.opponent_rank_before == Ranked(tier=positions[opponent.id])


def test_leaderboard_ranks_after_compare_against_rival_in_same_scenario() -> None:
    forecast = _leaderboard_engine([14.0]).forecast(RUNNER_UP, LEADER)

    for outcome in Outcome:
        scenario = forecast.scenarios[outcome]
        assert scenario.squad_rank_after == Ranked(tier=2)
        assert scenario.opponent_rank_after == Ranked(tier=1)


def test_provisional_rival_does_not_take_a_leaderboard_position() -> None:
    newcomer = SquadSnapshot(id="n", rating=RatingValue(60.0, 2.0), wins=3)

    forecast = _leaderboard_engine([34.0, 14.0]).forecast(RUNNER_UP, newcomer)

    assert forecast.scenarios[Outcome.WIN].squad_rank_before == Ranked(tier=2)
    assert isinstance(forecast.scenarios[Outcome.WIN].opponent_rank_before, Provisional)
