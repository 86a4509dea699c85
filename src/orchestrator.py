"""
Stats Orchestrator.

Coordinates record fetching, normalization, aggregation, persistence
and report export.
"""

import logging
from datetime import datetime, timezone
from typing import List, Tuple

from src.models.rating import RatedItem
from src.models.stats import ComputedStats, ContentTypeStats, GlobalStats
from src.services.ingestion import RecordSource
from src.services.normalization import RecordNormalizer
from src.services.reporting import StatsReporter
from src.services.stats_aggregator import StatsAggregator, ALL_CONTENT
from src.utils.storage import StorageManager
import config.settings as settings

logger = logging.getLogger(__name__)


class StatsOrchestrator:
    """
    Runs the stats pipeline:

    1. Fetch records → 2. Normalize → 3. Aggregate → 4. Persist / Export
    """

    def __init__(self, data_root: str, output_dir: str, use_mock_data: bool = False):
        """
        Initialize orchestrator.

        Args:
            data_root: Root directory of the record store
            output_dir: Directory for exported reports
            use_mock_data: Read the mock catalogue instead of the store
        """
        self.data_root = data_root
        self.output_dir = output_dir

        logger.info("Initializing stats pipeline components...")

        self.storage = StorageManager(
            data_root,
            category_files=settings.CATEGORY_FILES,
            score_range=(settings.SCORE_MIN, settings.SCORE_MAX)
        )
        self.source = RecordSource(storage=self.storage, use_mock_data=use_mock_data)
        self.normalizer = RecordNormalizer()
        self.aggregator = StatsAggregator(
            top_rated_limit=settings.TOP_RATED_LIMIT,
            most_controversial_limit=settings.MOST_CONTROVERSIAL_LIMIT
        )
        self.reporter = StatsReporter()

    def build_items(self) -> List[RatedItem]:
        """Fetch every category and normalize into RatedItems."""
        records = self.source.fetch_all()
        return self.normalizer.normalize(records["movie"], records["series"], records["game"])

    def compute(self, content_filter: str = ALL_CONTENT) -> ComputedStats:
        """Aggregate the current records for one content filter."""
        if content_filter not in settings.CONTENT_FILTERS:
            logger.warning(f"Unknown content filter '{content_filter}', result will be empty")

        items = self.build_items()
        stats = self.aggregator.compute(items, content_filter)

        logger.info(
            f"Stats for '{content_filter}': {stats.total_items} items, "
            f"average {stats.average_score}"
        )
        return stats

    def calculate_global_stats(self) -> GlobalStats:
        """
        Recalculate the global snapshot from scratch and persist it.

        Returns:
            GlobalStats with the all-content block and one block per content type
        """
        items = self.build_items()

        global_stats = GlobalStats(
            overall=self.aggregator.compute(items, ALL_CONTENT),
            by_type={
                item_type: ContentTypeStats.from_computed(
                    self.aggregator.compute(items, item_type)
                )
                for item_type in settings.CONTENT_TYPES
            },
            last_updated=datetime.now(timezone.utc).isoformat()
        )

        self.storage.save_global_stats(global_stats.to_dict())
        logger.info(f"Global stats recalculated over {global_stats.overall.total_items} items")
        return global_stats

    def get_global_stats(self, recalculate: bool = False) -> GlobalStats:
        """
        Return the persisted snapshot, calculating it on first access.

        Args:
            recalculate: Ignore any existing snapshot and rebuild it
        """
        if not recalculate:
            data = self.storage.load_global_stats()
            if data is not None:
                logger.info(f"Using stored global stats from {data.get('last_updated', '?')}")
                return GlobalStats.from_dict(data)
            logger.info("No stored global stats, calculating for the first time")

        return self.calculate_global_stats()

    def update_rating(self, category: str, item_id: str, user_role: str, score: int, comment: str = None) -> GlobalStats:
        """
        Store one user's rating and refresh the global snapshot.

        Returns:
            The recalculated GlobalStats
        """
        self.storage.update_rating(category, item_id, user_role, score, comment)
        return self.calculate_global_stats()

    def remove_rating(self, category: str, item_id: str, user_role: str) -> GlobalStats:
        """Delete one user's rating and refresh the global snapshot."""
        self.storage.remove_rating(category, item_id, user_role)
        return self.calculate_global_stats()

    def run(
        self,
        content_filter: str = ALL_CONTENT,
        recalculate: bool = False
    ) -> Tuple[ComputedStats, str]:
        """
        Compute stats for a filter, refresh the global snapshot and export a report.

        Returns:
            (stats for the filter, path to the JSON report)
        """
        stats = self.compute(content_filter)
        self.get_global_stats(recalculate=recalculate)

        output_path = self.reporter.export(stats, self.output_dir, content_filter)
        logger.info(f"Pipeline complete! Report: {output_path}")
        return stats, output_path


# Design Rationale and Trade-offs:
#
# 1. Snapshot is computed on first access and reused afterwards
#    - StorageManager deletes it on every rating write
#    - update_rating() / remove_rating() here recompute it immediately
#    - Trade-off: a full recompute per write, fine at catalogue scale
#
# 2. Items are rebuilt from the store for every compute()
#    - No in-memory cache to invalidate
#    - Trade-off: repeated reads of small JSON files
