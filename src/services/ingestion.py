"""
Record Source.

Provides raw movie, series and game records, either from the JSON record
store or from a deterministic mock catalogue for demos and tests.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import config.settings as settings
from src.models.rating import calculate_average_score, check_both_rated
from src.utils.storage import StorageManager

logger = logging.getLogger(__name__)

# (title, release date, user_1 score, user_2 score)
MOCK_MOVIES = [
    ("Parasite", "2019-05-30", 9, 10),
    ("Dune", "2021-09-15", 8, 6),
    ("The Matrix", "1999-03-31", 10, 9),
    ("Cats", "2019-12-20", 2, 6),
    ("Arrival", "2016-11-11", 8, 8),
    ("Oppenheimer", "2023-07-21", 9, None),
    ("Tenet", "2020-08-26", 5, 7),
    ("Barbie", "2023-07-21", None, 8),
]

MOCK_SERIES = [
    ("Breaking Bad", "2008-01-20", 10, 10),
    ("Lost", "2004-09-22", 6, 9),
    ("The Office", "2005-03-24", 8, 7),
    ("Severance", "2022-02-18", 9, None),
    ("Dark", "2017-12-01", None, None),
]

MOCK_GAMES = [
    ("Hades", "2020-09-17", 9, 8),
    ("Elden Ring", "2022-02-25", 10, 5),
    ("Stardew Valley", "2016-02-26", 7, 9),
    ("Celeste", "2018-01-25", 8, None),
]


class RecordSource:
    """
    Yields raw records per content type.

    In store mode records come from StorageManager. In mock mode a fixed
    catalogue is generated, spread over consecutive months so the evolution
    series has more than one point.
    """

    def __init__(self, storage: Optional[StorageManager] = None, use_mock_data: bool = False):
        """
        Initialize record source.

        Args:
            storage: Record store (required unless use_mock_data is set)
            use_mock_data: If True, generate mock records instead of reading the store
        """
        if storage is None and not use_mock_data:
            raise ValueError("A StorageManager is required when mock data is disabled")

        self.storage = storage
        self.use_mock_data = use_mock_data

        if use_mock_data:
            logger.info("Initialized RecordSource in MOCK mode")
        else:
            logger.info("Initialized RecordSource in STORE mode")

    def fetch_records(self, category: str) -> List[Dict]:
        """
        Fetch all records of one content type.

        Args:
            category: "movie", "series" or "game"

        Returns:
            List of record dicts
        """
        if category not in settings.CONTENT_TYPES:
            raise ValueError(f"Invalid category: {category}. Must be one of {settings.CONTENT_TYPES}")

        if self.use_mock_data:
            records = self._generate_mock_records(category)
        else:
            records = self.storage.load_records(category)

        logger.info(f"Fetched {len(records)} {category} records")
        return records

    def fetch_all(self) -> Dict[str, List[Dict]]:
        """Fetch every content type, keyed by category."""
        return {category: self.fetch_records(category) for category in settings.CONTENT_TYPES}

    def _generate_mock_records(self, category: str) -> List[Dict]:
        """
        Generate the mock catalogue for one content type.

        Records use the same field names as the store so they go through
        normalization unchanged.
        """
        templates = {"movie": MOCK_MOVIES, "series": MOCK_SERIES, "game": MOCK_GAMES}[category]
        start = datetime(2024, 1, 10, 20, 0, tzinfo=timezone.utc)

        records = []
        for index, (title, released, score_1, score_2) in enumerate(templates):
            ratings = {}
            if score_1 is not None:
                ratings["user_1"] = {"score": score_1}
            if score_2 is not None:
                ratings["user_2"] = {"score": score_2}

            # Roughly two items per month
            added = (start + timedelta(days=15 * index)).isoformat()
            record = {
                "id": f"{category}-{index + 1}",
                "ratings": ratings,
                "average_score": calculate_average_score(ratings),
                "both_rated": check_both_rated(ratings),
            }

            if category == "movie":
                record.update(title=title, release_date=released, watched_date=added)
            elif category == "series":
                record.update(title=title, first_air_date=released, started_watching_date=added)
            else:
                record.update(name=title, released=released, started_playing_date=added)

            records.append(record)

        return records


# Design Rationale and Trade-offs:
#
# 1. Mock catalogue spaced 15 days apart from a fixed start date
#    - Evolution gets several months of points
#    - Output is identical across runs
