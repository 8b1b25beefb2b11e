"""Unit tests for rank derivation and ordering."""

from __future__ import annotations

import pytest

from domain.ratings.ranking import (
    Provisional,
    RankClassifier,
    Ranked,
    RankingParameters,
    RankScale,
    rank_sort_key,
)


def _classifier(win_threshold: int = 15) -> RankClassifier:
    return RankClassifier(
        RankingParameters(win_threshold=win_threshold, tier_cutoffs=(30.0, 20.0, 10.0, 0.0))
    )


def test_squad_below_threshold_is_provisional_with_wins_remaining() -> None:
    rank = _classifier().classify(12.5, wins=11)
    assert rank == Provisional(wins_remaining=4, skill=12.5)


def test_squad_at_threshold_gets_concrete_tier() -> None:
    rank = _classifier().classify(25.0, wins=15)
    assert rank == Ranked(tier=2)


def test_win_at_threshold_minus_one_moves_to_ranked() -> None:
    classifier = _classifier()
    before = classifier.classify(18.0, wins=14)
    after_win = classifier.classify(19.0, wins=14, wins_from_resolution=1)

    assert before == Provisional(wins_remaining=1, skill=18.0)
    assert isinstance(after_win, Ranked)


def test_lose_or_draw_keeps_wins_remaining() -> None:
    classifier = _classifier()
    after_other = classifier.classify(17.0, wins=14, wins_from_resolution=0)
    assert after_other == Provisional(wins_remaining=1, skill=17.0)


@pytest.mark.parametrize(
    ("skill", "tier"),
    [
        (45.0, 1),
        (30.0, 1),
        (29.99, 2),
        (20.0, 2),
        (15.0, 3),
        (0.0, 4),
        (-3.0, 5),
    ],
)
def test_fixed_scale_tiers(skill: float, tier: int) -> None:
    assert _classifier(win_threshold=1).classify(skill, wins=1) == Ranked(tier=tier)


def test_higher_skill_never_gets_worse_tier() -> None:
    classifier = _classifier(win_threshold=1)
    skills = [-10.0 + step * 0.5 for step in range(100)]
    tiers = [classifier.classify(skill, wins=3).tier for skill in skills]  # type: ignore[union-attr]
    assert tiers == sorted(tiers, reverse=True)


def test_leaderboard_scale_gives_positions() -> None:
    scale = RankScale.from_leaderboard([12.0, 40.0, 25.0, 25.0])
    assert scale.tier_for(50.0) == 1
    assert scale.tier_for(40.0) == 1
    assert scale.tier_for(30.0) == 2
    assert scale.tier_for(25.0) == 2
    assert scale.tier_for(20.0) == 4
    assert scale.tier_for(1.0) == 5


def test_empty_leaderboard_ranks_everyone_first() -> None:
    assert RankScale.from_leaderboard([]).tier_for(-100.0) == 1


def test_classifier_with_scale_keeps_threshold() -> None:
    classifier = _classifier(win_threshold=3).with_scale(RankScale.from_leaderboard([10.0]))
    assert classifier.classify(5.0, wins=3) == Ranked(tier=2)
    assert classifier.classify(5.0, wins=2) == Provisional(wins_remaining=1, skill=5.0)


def test_ascending_cutoffs_are_rejected() -> None:
    with pytest.raises(ValueError, match="descending"):
        RankScale([0.0, 10.0])


def test_threshold_below_one_is_rejected() -> None:
    with pytest.raises(ValueError, match="win_threshold"):
        RankClassifier(RankingParameters(win_threshold=0))


def test_sort_key_puts_ranked_first_and_orders_unranked_by_skill() -> None:
    ranks = [
        Provisional(wins_remaining=2, skill=5.0),
        Ranked(tier=3),
        Provisional(wins_remaining=9, skill=11.0),
        Ranked(tier=1),
    ]
    assert sorted(ranks, key=rank_sort_key) == [
        Ranked(tier=1),
        Ranked(tier=3),
        Provisional(wins_remaining=9, skill=11.0),
        Provisional(wins_remaining=2, skill=5.0),
    ]


def test_labels() -> None:
    assert Ranked(tier=4).label() == "#4"
    assert Provisional(wins_remaining=1, skill=0.0).label() == "Unranked (1 win to go)"
    assert Provisional(wins_remaining=3, skill=0.0).label() == "Unranked (3 wins to go)"
