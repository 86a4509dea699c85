"""
Configuration settings for Duo Stats.

Centralized configuration for the record store, aggregation and reporting.
"""

import os
from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
DATA_ROOT = PROJECT_ROOT / "data"
OUTPUT_ROOT = PROJECT_ROOT / "output"

# Users and content
USER_ROLES = ("user_1", "user_2")
CONTENT_TYPES = ("movie", "series", "game")
CONTENT_FILTERS = ("all",) + CONTENT_TYPES

# Record store file per content type
CATEGORY_FILES = {
    "movie": "movies.json",
    "series": "series.json",
    "game": "games.json",
}

# Rating scale
SCORE_MIN = 1
SCORE_MAX = 10

# Aggregation
TOP_RATED_LIMIT = 10
MOST_CONTROVERSIAL_LIMIT = 5

# Ingestion
USE_MOCK_DATA = os.getenv("DUO_STATS_USE_MOCK_DATA", "false").lower() in ("1", "true", "yes")

# Logging
LOG_LEVEL = "INFO"  # DEBUG, INFO, WARNING, ERROR
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = "duo_stats.log"


# Design Rationale and Trade-offs:
#
# 1. Module constants as the single source of truth
#    - USER_ROLES, CONTENT_TYPES and CATEGORY_FILES are imported by models,
#      services and storage alike
#    - Trade-off: changing a role name needs a data migration of stored records
#
# 2. Mock mode from an environment variable
#    - DUO_STATS_USE_MOCK_DATA, overridden by the --mock CLI flag
#
# 3. Ranking sizes are fixed (10 top rated, 5 controversial)
#    - StatsAggregator accepts other limits for callers that need them
