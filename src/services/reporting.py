"""
Stats Reporter.

Exports computed statistics as CSV tables and a JSON document.
"""

import json
import logging
import os
from datetime import datetime, timezone

import pandas as pd

from src.models.stats import ComputedStats

logger = logging.getLogger(__name__)

EVOLUTION_COLUMNS = ["month", "average", "count"]
TOP_RATED_COLUMNS = [
    "id", "item_type", "title", "poster_path", "average_score", "user_1_score", "user_2_score"
]
CONTROVERSIAL_COLUMNS = [
    "id", "item_type", "title", "poster_path", "difference", "user_1_score", "user_2_score"
]


class StatsReporter:
    """
    Writes one report per content filter:
    - stats_<filter>_evolution.csv
    - stats_<filter>_top_rated.csv
    - stats_<filter>_controversial.csv
    - stats_<filter>.json (full stats + metadata)
    """

    def export(
        self,
        stats: ComputedStats,
        output_dir: str,
        content_filter: str = "all"
    ) -> str:
        """
        Export statistics to output_dir.

        Args:
            stats: Aggregation result
            output_dir: Directory to write into (created if missing)
            content_filter: Filter the stats were computed with, used in file names

        Returns:
            Path to the JSON report
        """
        os.makedirs(output_dir, exist_ok=True)
        prefix = os.path.join(output_dir, f"stats_{content_filter}")

        tables = {
            "evolution": self._frame(
                [point.to_dict() for point in stats.average_evolution], EVOLUTION_COLUMNS
            ),
            "top_rated": self._frame(
                [item.to_dict() for item in stats.top_rated], TOP_RATED_COLUMNS
            ),
            "controversial": self._frame(
                [item.to_dict() for item in stats.most_controversial], CONTROVERSIAL_COLUMNS
            ),
        }

        for name, df in tables.items():
            path = f"{prefix}_{name}.csv"
            df.to_csv(path, index=False)
            logger.info(f"Saved {name} table to {path} ({len(df)} rows)")

        report = {
            "content_filter": content_filter,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "stats": stats.to_dict(),
        }
        json_path = f"{prefix}.json"
        with open(json_path, 'w') as f:
            json.dump(report, f, indent=2)

        logger.info(f"Stats report saved to {json_path}")
        return json_path

    def summary_frame(self, stats: ComputedStats) -> pd.DataFrame:
        """One row per user: ratings, average and the ten histogram buckets."""
        rows = []
        for role in ("user_1", "user_2"):
            user = stats.user_stats(role)
            row = {"user": role, "total_ratings": user.total_ratings, "average_score": user.average_score}
            row.update({str(score): count for score, count in user.distribution.items()})
            rows.append(row)
        return pd.DataFrame(rows)

    @staticmethod
    def _frame(rows, columns) -> pd.DataFrame:
        if not rows:
            return pd.DataFrame(columns=columns)
        return pd.DataFrame(rows, columns=columns)


# Design Rationale and Trade-offs:
#
# 1. pandas for CSV tables
#    - Empty results still write header rows
#
# 2. JSON report carries the full ComputedStats plus metadata
#    - generated_at and content_filter sit next to the stats block
