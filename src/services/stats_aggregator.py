"""
Stats Aggregator.

Turns a list of rated items into per-user statistics, agreement tiers,
rankings and a month-bucketed evolution series.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

import config.settings as settings
from src.models.rating import RatedItem, round_score
from src.models.stats import (
    AgreementStats,
    ComputedStats,
    ControversialItem,
    EvolutionPoint,
    TopItem,
    UserStats,
    SCORE_BUCKETS,
    create_empty_distribution,
    create_empty_user_stats,
)

logger = logging.getLogger(__name__)

ALL_CONTENT = "all"


def _mean(values: Sequence[float]) -> float:
    return round_score(sum(values) / len(values))


def _month_key(moment) -> Optional[str]:
    """YYYY-MM of the instant in UTC; naive datetimes are taken as UTC."""
    if not isinstance(moment, datetime):
        return None
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return f"{moment.year:04d}-{moment.month:02d}"


class StatsAggregator:
    """
    Pure statistics computation over normalized items.

    Holds only the ranking sizes; compute() shares no state between calls
    and never mutates its input.
    """

    def __init__(self, top_rated_limit: int = 10, most_controversial_limit: int = 5):
        """
        Initialize aggregator.

        Args:
            top_rated_limit: Size of the top-rated ranking
            most_controversial_limit: Size of the most-controversial ranking
        """
        self.top_rated_limit = top_rated_limit
        self.most_controversial_limit = most_controversial_limit

    def compute(
        self,
        items: Sequence[RatedItem],
        content_filter: str = ALL_CONTENT
    ) -> ComputedStats:
        """
        Compute statistics for the items matching a content filter.

        Args:
            items: Normalized items (may be empty)
            content_filter: "all" or a single item type

        Returns:
            ComputedStats; a zero-value result when nothing matches
        """
        selected = filter_by_content_type(items, content_filter)

        if not selected:
            logger.debug(f"No items for filter '{content_filter}', returning empty stats")
            return ComputedStats()

        # Per-item averages are derived once and reused by every step
        averages = [(item, item.average_score) for item in selected]
        averaged = [(item, avg) for item, avg in averages if avg is not None]

        stats = ComputedStats(
            total_items=len(selected),
            average_score=_mean([avg for _, avg in averaged]) if averaged else 0,
            user_1=self.user_stats(selected, settings.USER_ROLES[0]),
            user_2=self.user_stats(selected, settings.USER_ROLES[1]),
            agreement_stats=self.agreement_stats(selected),
            top_rated=self.top_rated(averaged),
            most_controversial=self.most_controversial(selected),
            average_evolution=self.evolution(averaged)
        )

        logger.debug(
            f"Computed stats for '{content_filter}': {stats.total_items} items, "
            f"{len(averaged)} rated, {len(stats.average_evolution)} months"
        )
        return stats

    def user_stats(self, items: Sequence[RatedItem], role: str) -> UserStats:
        """Count, average and histogram of one user's scores."""
        scores = [s for s in (item.score_for(role) for item in items) if s is not None]

        if not scores:
            return create_empty_user_stats()

        distribution = create_empty_distribution()
        for score in scores:
            # Out-of-range or fractional scores count toward totals but have no bucket
            if math.isfinite(score) and score == int(score) and int(score) in SCORE_BUCKETS:
                distribution[int(score)] += 1

        return UserStats(
            total_ratings=len(scores),
            average_score=_mean(scores),
            distribution=distribution
        )

    def agreement_stats(self, items: Sequence[RatedItem]) -> Optional[AgreementStats]:
        """Four-tier agreement classification over both-rated items."""
        differences = [difference for _, difference in _both_rated_differences(items)]

        if not differences:
            return None

        perfect = close = moderate = disagree = 0
        for difference in differences:
            if difference == 0:
                perfect += 1
            elif difference <= 1:
                close += 1
            elif difference <= 2:
                moderate += 1
            else:
                disagree += 1

        return AgreementStats(
            total_both_rated=len(differences),
            perfect_agreement=perfect,
            close_agreement=close,
            moderate_agreement=moderate,
            disagreement=disagree,
            average_difference=_mean(differences)
        )

    def top_rated(self, averaged: List[tuple]) -> List[TopItem]:
        """Highest per-item averages; ties keep input order."""
        ranked = sorted(averaged, key=lambda pair: pair[1], reverse=True)
        return [
            TopItem(
                id=item.id,
                item_type=item.item_type,
                title=item.title,
                poster_path=item.poster_path,
                average_score=avg,
                user_1_score=item.score_for(settings.USER_ROLES[0]),
                user_2_score=item.score_for(settings.USER_ROLES[1])
            )
            for item, avg in ranked[:self.top_rated_limit]
        ]

    def most_controversial(self, items: Sequence[RatedItem]) -> List[ControversialItem]:
        """Largest score differences between the two users; ties keep input order."""
        ranked = sorted(
            _both_rated_differences(items),
            key=lambda pair: pair[1],
            reverse=True
        )
        return [
            ControversialItem(
                id=item.id,
                item_type=item.item_type,
                title=item.title,
                poster_path=item.poster_path,
                difference=difference,
                user_1_score=item.score_for(settings.USER_ROLES[0]),
                user_2_score=item.score_for(settings.USER_ROLES[1])
            )
            for item, difference in ranked[:self.most_controversial_limit]
        ]

    def evolution(self, averaged: List[tuple]) -> List[EvolutionPoint]:
        """Monthly mean of per-item averages, oldest month first."""
        by_month: Dict[str, List[float]] = {}

        skipped = 0
        for item, avg in averaged:
            month = _month_key(item.date_added)
            if month is None:
                skipped += 1
                continue
            by_month.setdefault(month, []).append(avg)

        if skipped:
            logger.debug(f"Excluded {skipped} items without a usable date from evolution")

        return [
            EvolutionPoint(month=month, average=_mean(values), count=len(values))
            for month, values in sorted(by_month.items())
        ]


def filter_by_content_type(items: Sequence[RatedItem], content_filter: str) -> List[RatedItem]:
    """'all' returns every item; otherwise only items of that type."""
    if content_filter == ALL_CONTENT:
        return list(items)
    return [item for item in items if item.item_type == content_filter]


def _both_rated_differences(items: Sequence[RatedItem]) -> List[tuple]:
    pairs = []
    for item in items:
        first = item.score_for(settings.USER_ROLES[0])
        second = item.score_for(settings.USER_ROLES[1])
        if first is None or second is None:
            continue
        pairs.append((item, abs(first - second)))
    return pairs


def compute_stats(items: Sequence[RatedItem], content_filter: str = ALL_CONTENT) -> ComputedStats:
    """Convenience wrapper using the default ranking sizes."""
    return StatsAggregator().compute(items, content_filter)


# Design Rationale and Trade-offs:
#
# 1. compute() is a pure function of its input
#    - No I/O, no clock; evolution months come from item dates only
#    - Same input gives the same output, including tie order
#
# 2. Stable sorts for rankings
#    - sorted(..., reverse=True) keeps input order among equal keys
#    - Trade-off: tie order depends on the normalizer emitting a fixed order
#
# 3. Scores are opaque numbers
#    - Out-of-range values count toward totals and averages
#    - Only integer scores 1..10 fill histogram buckets
