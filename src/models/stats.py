"""
Statistics data models.

Output shapes of the stats aggregator and the persisted global snapshot.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

SCORE_BUCKETS = range(1, 11)


def create_empty_distribution() -> Dict[int, int]:
    """Histogram with all ten score buckets set to zero."""
    return {score: 0 for score in SCORE_BUCKETS}


@dataclass
class UserStats:
    """Rating count, average and score histogram for one user."""
    total_ratings: int = 0
    average_score: float = 0
    distribution: Dict[int, int] = field(default_factory=create_empty_distribution)

    def to_dict(self) -> dict:
        return {
            "total_ratings": self.total_ratings,
            "average_score": self.average_score,
            # JSON object keys are strings
            "distribution": {str(k): v for k, v in self.distribution.items()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "UserStats":
        distribution = create_empty_distribution()
        for key, value in data.get("distribution", {}).items():
            distribution[int(key)] = value
        return cls(
            total_ratings=data.get("total_ratings", 0),
            average_score=data.get("average_score", 0),
            distribution=distribution
        )


def create_empty_user_stats() -> UserStats:
    return UserStats()


@dataclass
class AgreementStats:
    """
    Agreement between the two users over items both have rated.
    The four tier counts always sum to total_both_rated.
    """
    total_both_rated: int
    perfect_agreement: int  # difference == 0
    close_agreement: int  # difference <= 1
    moderate_agreement: int  # difference <= 2
    disagreement: int  # difference > 2
    average_difference: float

    def to_dict(self) -> dict:
        return {
            "total_both_rated": self.total_both_rated,
            "perfect_agreement": self.perfect_agreement,
            "close_agreement": self.close_agreement,
            "moderate_agreement": self.moderate_agreement,
            "disagreement": self.disagreement,
            "average_difference": self.average_difference
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["AgreementStats"]:
        if data is None:
            return None
        return cls(**data)


@dataclass
class TopItem:
    """Entry of the top-rated ranking."""
    id: str
    item_type: str
    title: str
    average_score: float
    poster_path: Optional[str] = None
    user_1_score: Optional[float] = None
    user_2_score: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "item_type": self.item_type,
            "title": self.title,
            "poster_path": self.poster_path,
            "average_score": self.average_score,
            "user_1_score": self.user_1_score,
            "user_2_score": self.user_2_score
        }


@dataclass
class ControversialItem:
    """Entry of the most-controversial ranking."""
    id: str
    item_type: str
    title: str
    difference: float
    user_1_score: float
    user_2_score: float
    poster_path: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "item_type": self.item_type,
            "title": self.title,
            "poster_path": self.poster_path,
            "difference": self.difference,
            "user_1_score": self.user_1_score,
            "user_2_score": self.user_2_score
        }


@dataclass
class EvolutionPoint:
    month: str  # YYYY-MM
    average: float
    count: int

    def to_dict(self) -> dict:
        return {"month": self.month, "average": self.average, "count": self.count}


@dataclass
class ComputedStats:
    """
    Result of one aggregation run.

    agreement_stats is None when no item has been rated by both users,
    which keeps "no comparable data" apart from "perfect agreement".
    """
    total_items: int = 0
    average_score: float = 0
    user_1: UserStats = field(default_factory=create_empty_user_stats)
    user_2: UserStats = field(default_factory=create_empty_user_stats)
    agreement_stats: Optional[AgreementStats] = None
    top_rated: List[TopItem] = field(default_factory=list)
    most_controversial: List[ControversialItem] = field(default_factory=list)
    average_evolution: List[EvolutionPoint] = field(default_factory=list)

    def user_stats(self, role: str) -> UserStats:
        return getattr(self, role)

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "total_items": self.total_items,
            "average_score": self.average_score,
            "user_1": self.user_1.to_dict(),
            "user_2": self.user_2.to_dict(),
            "agreement_stats": self.agreement_stats.to_dict() if self.agreement_stats else None,
            "top_rated": [item.to_dict() for item in self.top_rated],
            "most_controversial": [item.to_dict() for item in self.most_controversial],
            "average_evolution": [point.to_dict() for point in self.average_evolution]
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ComputedStats":
        """Rebuild from a dict produced by to_dict()."""
        return cls(
            total_items=data.get("total_items", 0),
            average_score=data.get("average_score", 0),
            user_1=UserStats.from_dict(data.get("user_1", {})),
            user_2=UserStats.from_dict(data.get("user_2", {})),
            agreement_stats=AgreementStats.from_dict(data.get("agreement_stats")),
            top_rated=[TopItem(**item) for item in data.get("top_rated", [])],
            most_controversial=[
                ControversialItem(**item) for item in data.get("most_controversial", [])
            ],
            average_evolution=[
                EvolutionPoint(**point) for point in data.get("average_evolution", [])
            ]
        )


@dataclass
class ContentTypeStats:
    """Per content type summary stored inside the global snapshot."""
    total: int = 0
    average_score: float = 0
    user_1: UserStats = field(default_factory=create_empty_user_stats)
    user_2: UserStats = field(default_factory=create_empty_user_stats)
    agreement: Optional[AgreementStats] = None

    @classmethod
    def from_computed(cls, stats: ComputedStats) -> "ContentTypeStats":
        return cls(
            total=stats.total_items,
            average_score=stats.average_score,
            user_1=stats.user_1,
            user_2=stats.user_2,
            agreement=stats.agreement_stats
        )

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "average_score": self.average_score,
            "user_1": self.user_1.to_dict(),
            "user_2": self.user_2.to_dict(),
            "agreement": self.agreement.to_dict() if self.agreement else None
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ContentTypeStats":
        return cls(
            total=data.get("total", 0),
            average_score=data.get("average_score", 0),
            user_1=UserStats.from_dict(data.get("user_1", {})),
            user_2=UserStats.from_dict(data.get("user_2", {})),
            agreement=AgreementStats.from_dict(data.get("agreement"))
        )


@dataclass
class GlobalStats:
    """
    Persisted snapshot: all-content statistics plus one block per content type.
    """
    overall: ComputedStats
    by_type: Dict[str, ContentTypeStats] = field(default_factory=dict)
    last_updated: str = ""  # ISO-8601 UTC

    def to_dict(self) -> dict:
        return {
            "overall": self.overall.to_dict(),
            "by_type": {
                item_type: type_stats.to_dict()
                for item_type, type_stats in self.by_type.items()
            },
            "last_updated": self.last_updated
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GlobalStats":
        return cls(
            overall=ComputedStats.from_dict(data.get("overall", {})),
            by_type={
                item_type: ContentTypeStats.from_dict(type_data)
                for item_type, type_data in data.get("by_type", {}).items()
            },
            last_updated=data.get("last_updated", "")
        )


# Design Rationale and Trade-offs:
#
# 1. Distribution keys are ints in memory and strings in JSON
#    - from_dict() converts them back
#
# 2. agreement_stats is None when nothing is both-rated
#    - Same rule for the overall and per-type blocks
