"""
Duo Stats - Two-user media rating statistics

CLI entry point for computing and exporting rating statistics.
"""

import argparse
import logging
import sys

from src.orchestrator import StatsOrchestrator
import config.settings as settings


def setup_logging(log_level: str = "INFO"):
    """Configure logging for the entire application."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=settings.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(settings.LOG_FILE)
        ]
    )


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Duo Stats - rating statistics for movies, series and games",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Stats over everything in the record store
  python main.py

  # Only movies, forcing a fresh global snapshot
  python main.py --filter movie --recalculate

  # Demo run on the built-in mock catalogue
  python main.py --mock --output-dir /tmp/duo-stats
        """
    )

    parser.add_argument(
        "--filter",
        default="all",
        choices=list(settings.CONTENT_FILTERS),
        help="Content type to include (default: all)"
    )

    parser.add_argument(
        "--data-root",
        default=str(settings.DATA_ROOT),
        help=f"Record store directory (default: {settings.DATA_ROOT})"
    )

    parser.add_argument(
        "--output-dir",
        default=str(settings.OUTPUT_ROOT),
        help=f"Report directory (default: {settings.OUTPUT_ROOT})"
    )

    parser.add_argument(
        "--mock",
        action="store_true",
        default=settings.USE_MOCK_DATA,
        help="Use the built-in mock catalogue instead of the record store"
    )

    parser.add_argument(
        "--recalculate",
        action="store_true",
        help="Rebuild the stored global stats snapshot"
    )

    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level (default: {settings.LOG_LEVEL})"
    )

    args = parser.parse_args()

    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    print("=" * 60)
    print("Duo Stats - Rating Statistics")
    print("=" * 60)
    print(f"Filter: {args.filter}")
    print(f"Data root: {args.data_root}")
    print(f"Mock Data: {args.mock}")
    print("=" * 60)
    print()

    try:
        orchestrator = StatsOrchestrator(
            data_root=args.data_root,
            output_dir=args.output_dir,
            use_mock_data=args.mock
        )

        stats, output_path = orchestrator.run(
            content_filter=args.filter,
            recalculate=args.recalculate
        )

        agreement = stats.agreement_stats

        print()
        print("=" * 60)
        print("✅ Stats computed successfully!")
        print("=" * 60)
        print(f"Items: {stats.total_items}")
        print(f"Average score: {stats.average_score}")
        if agreement:
            print(
                f"Both rated: {agreement.total_both_rated} "
                f"(average difference {agreement.average_difference})"
            )
        else:
            print("Both rated: none")
        print()
        print(orchestrator.reporter.summary_frame(stats).to_string(index=False))
        print()
        print(f"Report: {output_path}")
        print("=" * 60)

        logger.info("Duo Stats completed successfully")
        sys.exit(0)

    except KeyboardInterrupt:
        logger.warning("Run interrupted by user")
        print("\n⚠️  Run interrupted")
        sys.exit(1)

    except Exception as e:
        logger.error(f"Stats run failed: {e}", exc_info=True)
        print(f"\n❌ Stats run failed: {e}")
        print(f"Check {settings.LOG_FILE} for details")
        sys.exit(1)


if __name__ == "__main__":
    main()


# Design Rationale and Trade-offs:
#
# 1. --filter choices come from settings.CONTENT_FILTERS
#    - argparse rejects unknown filters before any I/O
#
# 2. Exit code 1 on any pipeline error
#    - The error is logged with its traceback first
