"""
Unit tests for the Stats Aggregator.

Covers the empty-input guard, agreement tiers, rankings, the monthly
evolution series and the filter behaviour.
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from src.models.rating import RatedItem, Rating
from src.services.stats_aggregator import StatsAggregator, compute_stats, filter_by_content_type


def make_item(item_id, user_1=None, user_2=None, item_type="movie", date_added=None):
    """Build a RatedItem with optional scores for each user."""
    ratings = {}
    if user_1 is not None:
        ratings["user_1"] = Rating(score=user_1)
    if user_2 is not None:
        ratings["user_2"] = Rating(score=user_2)
    return RatedItem(
        id=item_id,
        item_type=item_type,
        title=f"Title {item_id}",
        date_added=date_added,
        ratings=ratings
    )


@pytest.fixture
def aggregator():
    return StatsAggregator()


@pytest.fixture
def scenario_items():
    """Item A agrees perfectly, B disagrees by 3, C is only rated by user_1."""
    return [
        make_item("A", user_1=8, user_2=8),
        make_item("B", user_1=6, user_2=9),
        make_item("C", user_1=7),
    ]


@pytest.fixture
def mixed_items():
    march = datetime(2024, 3, 5, tzinfo=timezone.utc)
    april = datetime(2024, 4, 20, tzinfo=timezone.utc)
    return [
        make_item("m1", 9, 7, "movie", march),
        make_item("s1", 5, 5, "series", march),
        make_item("g1", 10, 4, "game", april),
        make_item("m2", 6, None, "movie", april),
        make_item("s2", None, None, "series", april),
        make_item("m3", 3, 8, "movie", None),
    ]


def test_empty_input(aggregator):
    """Empty input returns a fully zeroed result with agreement None."""
    stats = aggregator.compute([], "all")

    assert stats.total_items == 0
    assert stats.average_score == 0
    for user in (stats.user_1, stats.user_2):
        assert user.total_ratings == 0
        assert user.average_score == 0
        assert user.distribution == {score: 0 for score in range(1, 11)}
    assert stats.agreement_stats is None
    assert stats.top_rated == []
    assert stats.most_controversial == []
    assert stats.average_evolution == []


def test_filter_with_no_matches_is_empty(aggregator, mixed_items):
    stats = aggregator.compute(mixed_items, "book")

    assert stats.total_items == 0
    assert stats.agreement_stats is None


def test_concrete_scenario(aggregator, scenario_items):
    """Agreement and per-user numbers for the three-item scenario."""
    stats = aggregator.compute(scenario_items, "all")
    agreement = stats.agreement_stats

    assert agreement.total_both_rated == 2
    assert agreement.perfect_agreement == 1
    assert agreement.close_agreement == 0
    assert agreement.moderate_agreement == 0
    assert agreement.disagreement == 1
    assert agreement.average_difference == 1.5

    assert stats.user_1.total_ratings == 3
    assert stats.user_1.average_score == 7.0
    assert stats.user_2.total_ratings == 2
    assert stats.user_2.average_score == 8.5

    # Per-item averages 8, 7.5 and 7
    assert stats.average_score == 7.5
    assert stats.total_items == 3


def test_single_rating_item_counts_in_global_average(aggregator):
    stats = aggregator.compute([make_item("C", user_1=7)], "all")

    assert stats.average_score == 7
    assert stats.agreement_stats is None
    assert stats.top_rated[0].average_score == 7
    assert stats.most_controversial == []


def test_unrated_items_are_excluded_from_averages(aggregator):
    items = [make_item("x"), make_item("y", user_2=4)]

    stats = aggregator.compute(items, "all")

    assert stats.total_items == 2
    assert stats.average_score == 4
    assert len(stats.top_rated) == 1
    assert stats.user_1.total_ratings == 0
    assert stats.user_1.average_score == 0


def test_agreement_tier_boundaries(aggregator):
    items = [
        make_item("d0", 5, 5),
        make_item("d1", 5, 6),
        make_item("d2", 7, 5),
        make_item("d3", 1, 4),
        make_item("d9", 10, 1),
    ]

    agreement = aggregator.compute(items).agreement_stats

    assert agreement.perfect_agreement == 1
    assert agreement.close_agreement == 1
    assert agreement.moderate_agreement == 1
    assert agreement.disagreement == 2
    assert agreement.average_difference == 3.0


def test_agreement_tiers_partition(aggregator, mixed_items):
    agreement = aggregator.compute(mixed_items).agreement_stats

    tiers = (
        agreement.perfect_agreement
        + agreement.close_agreement
        + agreement.moderate_agreement
        + agreement.disagreement
    )
    assert tiers == agreement.total_both_rated == 4


def test_histogram_sums_to_total_ratings(aggregator, mixed_items):
    stats = aggregator.compute(mixed_items)

    for user in (stats.user_1, stats.user_2):
        assert sum(user.distribution.values()) == user.total_ratings

    assert stats.user_1.distribution[9] == 1
    assert stats.user_1.distribution[10] == 1
    assert stats.user_2.distribution[5] == 1


def test_out_of_range_score_does_not_crash(aggregator):
    """Out-of-range scores are opaque numbers: counted and averaged, not bucketed."""
    items = [make_item("odd", user_1=12, user_2=0), make_item("ok", user_1=8)]

    stats = aggregator.compute(items)

    assert stats.user_1.total_ratings == 2
    assert stats.user_1.average_score == 10
    assert stats.user_1.distribution[8] == 1
    assert sum(stats.user_1.distribution.values()) == 1
    assert stats.agreement_stats.disagreement == 1


def test_huge_finite_score_is_averaged_without_error(aggregator):
    items = [make_item("huge", user_1=1e30, date_added=datetime(2024, 3, 1))]

    stats = aggregator.compute(items)

    assert stats.user_1.total_ratings == 1
    assert stats.user_1.average_score == 1e30
    assert sum(stats.user_1.distribution.values()) == 0
    assert stats.top_rated[0].average_score == 1e30
    assert stats.average_evolution[0].average == 1e30


def test_averages_stay_within_bounds(aggregator, mixed_items):
    stats = aggregator.compute(mixed_items)

    assert 1 <= stats.average_score <= 10
    assert 1 <= stats.user_1.average_score <= 10
    assert 1 <= stats.user_2.average_score <= 10
    for item in stats.top_rated:
        assert 1 <= item.average_score <= 10
    for point in stats.average_evolution:
        assert 1 <= point.average <= 10


def test_rounding_is_half_away_from_zero(aggregator):
    # user_1 mean is 20/3 = 6.666..., user_2 mean is 2.675 exactly in decimal
    items = [
        make_item("a", 6, 2.5),
        make_item("b", 7, 2.85),
        make_item("c", 7),
    ]

    stats = aggregator.compute(items)

    assert stats.user_1.average_score == 6.67
    assert stats.user_2.average_score == 2.68


def test_top_rated_orders_by_average_and_limits_to_ten(aggregator):
    items = [make_item(f"i{n}", user_1=(n % 10) + 1) for n in range(15)]

    top = aggregator.compute(items).top_rated

    assert len(top) == 10
    scores = [item.average_score for item in top]
    assert scores == sorted(scores, reverse=True)
    assert top[0].average_score == 10


def test_top_rated_ties_keep_input_order(aggregator):
    items = [
        make_item("first", 8, 8),
        make_item("best", 10, 10),
        make_item("second", 7, 9),
        make_item("third", 8),
    ]

    top = aggregator.compute(items).top_rated

    assert [item.id for item in top] == ["best", "first", "second", "third"]
    assert top[1].user_1_score == 8
    assert top[3].user_2_score is None


def test_most_controversial_orders_by_difference_and_limits_to_five(aggregator):
    items = [
        make_item("a", 5, 6),
        make_item("b", 1, 10),
        make_item("c", 3, 8),
        make_item("d", 2, 7),
        make_item("e", 4, 4),
        make_item("f", 9, 2),
        make_item("g", 6, 9),
        make_item("solo", 1),
    ]

    controversial = aggregator.compute(items).most_controversial

    assert len(controversial) == 5
    assert [item.id for item in controversial] == ["b", "f", "c", "d", "g"]
    assert controversial[0].difference == 9
    assert controversial[0].user_1_score == 1
    assert controversial[0].user_2_score == 10


def test_ranking_sizes_bounded_by_input(aggregator, scenario_items):
    stats = aggregator.compute(scenario_items)

    assert len(stats.top_rated) <= stats.total_items
    assert len(stats.most_controversial) <= stats.agreement_stats.total_both_rated


def test_custom_ranking_limits():
    aggregator = StatsAggregator(top_rated_limit=2, most_controversial_limit=1)
    items = [make_item(str(n), n, 10 - n) for n in range(1, 6)]

    stats = aggregator.compute(items)

    assert len(stats.top_rated) == 2
    assert len(stats.most_controversial) == 1


def test_evolution_groups_by_month(aggregator, mixed_items):
    evolution = aggregator.compute(mixed_items).average_evolution

    assert [point.month for point in evolution] == ["2024-03", "2024-04"]
    # March: m1 (8) and s1 (5); April: g1 (7) and m2 (6). s2 is unrated, m3 undated.
    assert evolution[0].average == 6.5
    assert evolution[0].count == 2
    assert evolution[1].average == 6.5
    assert evolution[1].count == 2


def test_evolution_uses_utc_months(aggregator):
    # 23:30 on Jan 31 at UTC-5 is already February in UTC
    eastern = timezone(timedelta(hours=-5))
    items = [
        make_item("late", 6, 6, date_added=datetime(2024, 1, 31, 23, 30, tzinfo=eastern)),
        make_item("naive", 8, 8, date_added=datetime(2023, 12, 31, 23, 59)),
    ]

    evolution = aggregator.compute(items).average_evolution

    assert [(p.month, p.average) for p in evolution] == [("2023-12", 8.0), ("2024-02", 6.0)]


def test_evolution_is_sorted_chronologically(aggregator):
    dates = [datetime(2023, 11, 1), datetime(2022, 2, 1), datetime(2023, 1, 1)]
    items = [make_item(str(i), 5, date_added=d) for i, d in enumerate(dates)]

    months = [point.month for point in aggregator.compute(items).average_evolution]

    assert months == ["2022-02", "2023-01", "2023-11"]


def test_undated_items_still_count_elsewhere(aggregator):
    items = [make_item("undated", 9, 3)]

    stats = aggregator.compute(items)

    assert stats.average_evolution == []
    assert stats.total_items == 1
    assert stats.agreement_stats.disagreement == 1


def test_filter_matches_prefiltered_input(aggregator, mixed_items):
    movies_only = [item for item in mixed_items if item.item_type == "movie"]

    filtered = aggregator.compute(mixed_items, "movie")
    prefiltered = aggregator.compute(movies_only, "all")

    assert filtered == prefiltered
    assert filtered.total_items == 3


def test_compute_is_deterministic(aggregator, mixed_items):
    first = json.dumps(aggregator.compute(mixed_items).to_dict(), sort_keys=True)
    second = json.dumps(aggregator.compute(mixed_items).to_dict(), sort_keys=True)

    assert first == second


def test_compute_does_not_mutate_input(aggregator, mixed_items):
    snapshot = [(item.id, dict(item.ratings), item.date_added) for item in mixed_items]

    aggregator.compute(mixed_items, "movie")

    assert [(item.id, dict(item.ratings), item.date_added) for item in mixed_items] == snapshot


def test_filter_by_content_type_all_returns_copy(mixed_items):
    result = filter_by_content_type(mixed_items, "all")

    assert result == mixed_items
    assert result is not mixed_items


def test_compute_stats_wrapper(scenario_items):
    assert compute_stats(scenario_items).agreement_stats.total_both_rated == 2


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
