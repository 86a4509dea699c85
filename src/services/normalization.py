"""
Record Normalization.

Converts category-specific records (movies, series, games) from the
record store into the common RatedItem shape used by the aggregator.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

import config.settings as settings
from src.models.rating import RatedItem, Rating

logger = logging.getLogger(__name__)


def parse_instant(value) -> Optional[datetime]:
    """
    Parse a stored date into a datetime.

    Accepts datetime objects, ISO-8601 strings (a trailing "Z" is allowed),
    epoch seconds, and timestamp dicts with "seconds"/"nanoseconds" keys.

    Returns:
        datetime, or None if the value is missing or unparseable
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        return value

    try:
        if isinstance(value, dict) and "seconds" in value:
            seconds = value["seconds"] + value.get("nanoseconds", 0) / 1e9
            return datetime.fromtimestamp(seconds, tz=timezone.utc)

        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return datetime.fromtimestamp(value, tz=timezone.utc)

        if isinstance(value, str):
            text = value.strip()
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            return datetime.fromisoformat(text)

    except (TypeError, ValueError, OverflowError, OSError) as e:
        logger.debug(f"Unparseable date {value!r}: {e}")
        return None

    logger.debug(f"Unsupported date value {value!r}")
    return None


def release_year(value) -> str:
    """Year string of a release date ("2019-07-26" -> "2019"), empty when unknown."""
    if not isinstance(value, str) or len(value) < 4 or not value[:4].isdigit():
        return ""
    return value[:4]


def parse_ratings(raw) -> Dict[str, Rating]:
    """Keep only the user entries that carry a numeric score."""
    if not isinstance(raw, dict):
        return {}

    ratings = {}
    for role in settings.USER_ROLES:
        rating = Rating.from_dict(raw.get(role))
        if rating is not None:
            ratings[role] = rating
    return ratings


class RecordNormalizer:
    """
    Maps each content type onto RatedItem.

    Uses the date that marks when an item entered the tracked history:
    - movie: watched_date
    - series: started_watching_date
    - game: started_playing_date, falling back to played_date
    """

    def movie_to_item(self, movie: Dict) -> RatedItem:
        return RatedItem(
            id=str(movie["id"]),
            item_type="movie",
            title=movie.get("title", ""),
            date_added=parse_instant(movie.get("watched_date")),
            ratings=parse_ratings(movie.get("ratings")),
            poster_path=movie.get("poster_path"),
            release_year=release_year(movie.get("release_date"))
        )

    def series_to_item(self, series: Dict) -> RatedItem:
        return RatedItem(
            id=str(series["id"]),
            item_type="series",
            title=series.get("title", ""),
            date_added=parse_instant(series.get("started_watching_date")),
            ratings=parse_ratings(series.get("ratings")),
            poster_path=series.get("poster_path"),
            release_year=release_year(series.get("first_air_date"))
        )

    def game_to_item(self, game: Dict) -> RatedItem:
        return RatedItem(
            id=str(game["id"]),
            item_type="game",
            title=game.get("name", ""),
            date_added=parse_instant(
                game.get("started_playing_date") or game.get("played_date")
            ),
            ratings=parse_ratings(game.get("ratings")),
            poster_path=game.get("background_image"),
            release_year=release_year(game.get("released"))
        )

    def normalize(
        self,
        movies: List[Dict],
        series: List[Dict],
        games: List[Dict]
    ) -> List[RatedItem]:
        """
        Normalize all categories into one list.

        Args:
            movies: Movie records
            series: Series records
            games: Game records

        Returns:
            Movies, then series, then games, each in record order
        """
        converters = (
            (movies, self.movie_to_item),
            (series, self.series_to_item),
            (games, self.game_to_item),
        )

        items = []
        for records, convert in converters:
            for record in records:
                try:
                    items.append(convert(record))
                except KeyError as e:
                    logger.warning(f"Skipping record without {e}: {record!r}")

        undated = sum(1 for item in items if item.date_added is None)
        logger.info(
            f"Normalized {len(items)} items "
            f"({len(movies)} movies, {len(series)} series, {len(games)} games)"
        )
        if undated:
            logger.warning(f"{undated} items have no usable date and will be left out of evolution")

        return items


# Design Rationale and Trade-offs:
#
# 1. One mapping method per category
#    - Date and title fields differ per category (watched_date, name, ...)
#
# 2. Bad records are skipped with a warning
#    - A record without an id cannot be ranked or updated
#    - Trade-off: silently smaller totals if the store is damaged
