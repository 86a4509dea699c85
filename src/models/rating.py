"""
Rating data model.

Represents a rateable work (movie, series or game) reduced to the fields
statistics need, plus the helpers that derive per-item values from ratings.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Dict, Optional

import config.settings as settings


def round_score(value: float, places: int = 2) -> float:
    """
    Round half away from zero to a fixed number of decimals.

    The built-in round() uses banker's rounding on binary floats, so
    2.675 would come out as 2.67. Going through the decimal repr keeps
    the result stable for display aggregates.
    """
    if not math.isfinite(value):
        return value
    exact = Decimal(repr(value))
    quantum = Decimal(1).scaleb(-places)
    with localcontext() as ctx:
        # quantize needs every integer digit plus the decimals within precision
        ctx.prec = max(28, exact.adjusted() + places + 2)
        return float(exact.quantize(quantum, rounding=ROUND_HALF_UP))


def is_score(value) -> bool:
    """True for int/float scores; bool is rejected even though it subclasses int."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass
class Rating:
    """
    One user's rating of an item.
    The score is not validated here; range checks belong to the record store.
    """
    score: float  # Nominally an integer 1-10
    comment: Optional[str] = None

    @classmethod
    def from_dict(cls, data) -> Optional["Rating"]:
        """Build a Rating from a stored entry, or None if it carries no numeric score."""
        if not isinstance(data, dict) or not is_score(data.get("score")):
            return None
        return cls(score=data["score"], comment=data.get("comment"))

    def to_dict(self) -> dict:
        data = {"score": self.score}
        if self.comment is not None:
            data["comment"] = self.comment
        return data


@dataclass
class RatedItem:
    """
    Normalized unit of statistics input.
    Built fresh from upstream records on every aggregation.
    """
    id: str
    item_type: str  # "movie", "series" or "game"
    title: str
    date_added: Optional[datetime] = None  # None when the upstream date is unusable
    ratings: Dict[str, Rating] = field(default_factory=dict)  # user role -> Rating
    poster_path: Optional[str] = None
    release_year: str = ""

    def score_for(self, role: str) -> Optional[float]:
        """Score given by a user, or None if that user has not rated."""
        rating = self.ratings.get(role)
        if rating is None or not is_score(rating.score):
            return None
        return rating.score

    @property
    def average_score(self) -> Optional[float]:
        return calculate_average_score(self.ratings)

    @property
    def both_rated(self) -> bool:
        return check_both_rated(self.ratings)


def _present_scores(ratings: Dict) -> list:
    scores = []
    for role in settings.USER_ROLES:
        rating = ratings.get(role)
        if isinstance(rating, Rating):
            score = rating.score
        elif isinstance(rating, dict):
            score = rating.get("score")
        else:
            score = None
        if is_score(score):
            scores.append(score)
    return scores


def calculate_average_score(ratings: Dict) -> Optional[float]:
    """
    Mean of whichever user scores are present, rounded to 2 decimals.

    Accepts either Rating objects or raw stored dicts as values.

    Returns:
        The per-item average, or None when nobody has rated
    """
    scores = _present_scores(ratings)
    if not scores:
        return None
    return round_score(sum(scores) / len(scores))


def check_both_rated(ratings: Dict) -> bool:
    """True when both users have a numeric score."""
    return len(_present_scores(ratings)) == len(settings.USER_ROLES)


# Design Rationale and Trade-offs:
#
# 1. Rounding through decimal on the shortest float repr
#    - Half away from zero, so 2.675 becomes 2.68
#    - Context precision grows with the magnitude of the value
#    - Trade-off: slower than round(), irrelevant at this scale
#
# 2. bool is not a score
#    - True would otherwise pass as 1
