"""
Export measurements per day to CSV and upload them to the bucket.

Usage:
    python -m csv_uploader          # last 2 days only
    python -m csv_uploader all      # regenerate everything since START_DATE

Exit status is 0 when every day succeeded (or had no data), 1 on the first
failed day or when the watchdog fires.
"""
import argparse
import logging
import os
import sys
from typing import List, Optional

import psycopg2

from csv_uploader.config import MODE_ALL, MODE_RECENT, RunConfig
from csv_uploader.errors import ConfigError
from csv_uploader.etl.day_export import DayExporter
from csv_uploader.etl.scheduler import DateRangeScheduler
from csv_uploader.monitoring import ExportMetricsLogger, run_watchdog
from csv_uploader.storage import (
    FileSink, MeasurementSource, ObjectStoreUploader,
    get_db_connection, get_minio_client
)

logger = logging.getLogger("csv_uploader")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="csv-uploader",
        description="Export daily measurement CSVs and upload them to object storage",
    )
    parser.add_argument(
        "mode",
        nargs="?",
        default=MODE_RECENT,
        help="'all' to regenerate every day since START_DATE (default: last 2 days)",
    )
    return parser


def setup_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format=LOG_FORMAT,
        force=True,
    )


def run(config: RunConfig, conn, client) -> int:
    """Run the export with already constructed clients. Returns the exit status."""
    exporter = DayExporter(
        source=MeasurementSource(conn),
        sink=FileSink(config.export_dir),
        uploader=ObjectStoreUploader(client, config.bucket),
        metrics=ExportMetricsLogger(),
    )
    result = DateRangeScheduler(exporter).run(config.mode, config.start_date)

    if not result.ok:
        failure = result.failure
        if failure is not None:
            logger.error(f"Export failed for {failure.day} at stage '{failure.failed_stage}': {failure.error}")
    return result.exit_code


def main(argv: Optional[List[str]] = None) -> int:
    args = create_parser().parse_args(argv)
    setup_logging()

    try:
        config = RunConfig.from_env(mode=MODE_ALL if args.mode == MODE_ALL else MODE_RECENT)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    # Armed as soon as its duration is known; everything before this is local
    # and cannot hang. Covers connecting as well as the run itself.
    with run_watchdog(config.process_timeout):
        try:
            conn = get_db_connection()
        except psycopg2.Error as e:
            logger.error(f"Cannot connect to PostgreSQL: {e}")
            return 1

        try:
            return run(config, conn, get_minio_client())
        finally:
            conn.close()


if __name__ == "__main__":
    sys.exit(main())
