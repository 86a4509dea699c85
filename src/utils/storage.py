"""
Storage utility.

JSON-file record store for movies, series and games, plus the persisted
global stats snapshot.
"""

import json
import os
import logging
from typing import Dict, List, Optional

import config.settings as settings
from src.models.rating import calculate_average_score, check_both_rated, is_score

logger = logging.getLogger(__name__)


class StorageManager:
    """
    Manages file I/O for all data persistence.

    Handles:
    - Records per category (data/movies.json, data/series.json, data/games.json)
    - Global stats snapshot (data/stats/global.json)
    """

    def __init__(
        self,
        data_root: str,
        category_files: Dict[str, str] = None,
        score_range: tuple = (settings.SCORE_MIN, settings.SCORE_MAX)
    ):
        """
        Initialize storage manager.

        Args:
            data_root: Root data directory (e.g., /path/to/data)
            category_files: Mapping of content type to file name
            score_range: Inclusive (min, max) accepted by update_rating
        """
        self.data_root = data_root
        self.category_files = category_files or settings.CATEGORY_FILES
        self.score_min, self.score_max = score_range
        self.stats_dir = os.path.join(data_root, "stats")
        self.global_stats_path = os.path.join(self.stats_dir, "global.json")

        os.makedirs(self.data_root, exist_ok=True)
        os.makedirs(self.stats_dir, exist_ok=True)

        logger.info(f"Initialized StorageManager with data_root={data_root}")

    def _category_path(self, category: str) -> str:
        if category not in self.category_files:
            raise ValueError(
                f"Unknown category: {category}. Must be one of {sorted(self.category_files)}"
            )
        return os.path.join(self.data_root, self.category_files[category])

    def load_records(self, category: str) -> List[Dict]:
        """
        Load all records of a category.

        Args:
            category: "movie", "series" or "game"

        Returns:
            List of record dicts; empty if the file is missing or unreadable
        """
        filepath = self._category_path(category)

        if not os.path.exists(filepath):
            logger.debug(f"No {category} records found at {filepath}")
            return []

        try:
            with open(filepath, 'r') as f:
                records = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load {category} records from {filepath}: {e}")
            return []

        if not isinstance(records, list):
            logger.error(f"Expected a list of records in {filepath}, got {type(records).__name__}")
            return []

        logger.debug(f"Loaded {len(records)} {category} records from {filepath}")
        return records

    def save_records(self, category: str, records: List[Dict]) -> None:
        """
        Save all records of a category, replacing the file.

        Args:
            category: "movie", "series" or "game"
            records: List of record dicts
        """
        filepath = self._category_path(category)

        try:
            with open(filepath, 'w') as f:
                json.dump(records, f, indent=2, default=str)
            logger.info(f"Saved {len(records)} {category} records to {filepath}")
        except Exception as e:
            logger.error(f"Failed to save {category} records: {e}")
            raise

    def update_rating(
        self,
        category: str,
        item_id: str,
        user_role: str,
        score: int,
        comment: Optional[str] = None
    ) -> Dict:
        """
        Set one user's rating on a record and refresh its derived fields.

        Args:
            category: "movie", "series" or "game"
            item_id: Record id
            user_role: "user_1" or "user_2"
            score: Integer score within the configured range
            comment: Optional free-text comment

        Returns:
            The updated record

        Raises:
            ValueError: If the role or score is invalid
            KeyError: If no record has this id
        """
        if user_role not in settings.USER_ROLES:
            raise ValueError(f"Invalid user role: {user_role}. Must be one of {settings.USER_ROLES}")

        if not is_score(score) or not (self.score_min <= score <= self.score_max) or score != int(score):
            raise ValueError(
                f"Invalid score: {score}. Must be an integer {self.score_min}-{self.score_max}"
            )

        rating = {"score": int(score)}
        if comment:
            rating["comment"] = comment

        return self._modify_ratings(category, item_id, lambda ratings: ratings.update({user_role: rating}))

    def remove_rating(self, category: str, item_id: str, user_role: str) -> Dict:
        """
        Delete one user's rating from a record and refresh its derived fields.

        Raises:
            ValueError: If the role is invalid
            KeyError: If no record has this id
        """
        if user_role not in settings.USER_ROLES:
            raise ValueError(f"Invalid user role: {user_role}. Must be one of {settings.USER_ROLES}")

        return self._modify_ratings(category, item_id, lambda ratings: ratings.pop(user_role, None))

    def _modify_ratings(self, category: str, item_id: str, change) -> Dict:
        records = self.load_records(category)

        for record in records:
            if str(record.get("id")) == str(item_id):
                ratings = record.get("ratings") or {}
                change(ratings)
                record["ratings"] = ratings
                # Redundant fields kept in sync for readers of the raw records
                record["average_score"] = calculate_average_score(ratings)
                record["both_rated"] = check_both_rated(ratings)
                self.save_records(category, records)
                # The snapshot no longer matches the records
                self.clear_global_stats()
                return record

        raise KeyError(f"No {category} record with id {item_id}")

    def save_global_stats(self, stats: Dict) -> str:
        """
        Save the global stats snapshot.

        Args:
            stats: JSON-serializable stats dict

        Returns:
            Path of the written file
        """
        filepath = self.global_stats_path

        try:
            with open(filepath, 'w') as f:
                json.dump(stats, f, indent=2)
            logger.info(f"Saved global stats to {filepath}")
        except Exception as e:
            logger.error(f"Failed to save global stats: {e}")
            raise

        return filepath

    def load_global_stats(self) -> Optional[Dict]:
        """
        Load the global stats snapshot.

        Returns:
            Stats dict, or None if no snapshot exists or it cannot be read
        """
        filepath = self.global_stats_path

        if not os.path.exists(filepath):
            logger.debug("No global stats snapshot found")
            return None

        try:
            with open(filepath, 'r') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load global stats: {e}")
            return None

    def clear_global_stats(self) -> bool:
        """
        Delete the global stats snapshot so the next read recalculates it.

        Returns:
            True if a snapshot was removed
        """
        if not os.path.exists(self.global_stats_path):
            return False

        try:
            os.remove(self.global_stats_path)
            logger.info(f"Cleared stale global stats at {self.global_stats_path}")
        except OSError as e:
            logger.error(f"Failed to clear global stats: {e}")
            raise

        return True


# Design Rationale and Trade-offs:
#
# 1. One JSON file per content type
#    - Matches the record categories the normalizer consumes
#    - A rating write rewrites the whole category file
#    - Trade-off: no partial writes, acceptable for a two-user catalogue
#
# 2. Rating writes delete stats/global.json
#    - The next get_global_stats() call recalculates from current records
#    - save_records() leaves it in place; bulk replacements use recalculate
#    - Trade-off: the first read after a write pays for a full recompute
#
# 3. Missing or unreadable files load as empty / None
#    - Writes log and re-raise
