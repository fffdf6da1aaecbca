"""PostgreSQL storage operations - stream a day's measurements"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, Iterator

import psycopg2
from psycopg2 import sql

from csv_uploader.config import DB_CONFIG, DB_FETCH_SIZE, MEASUREMENTS_TABLE
from csv_uploader.errors import StoreQueryError

logger = logging.getLogger(__name__)

CURSOR_NAME = "csv_uploader_day_stream"


def get_db_connection():
    """Get PostgreSQL connection"""
    return psycopg2.connect(
        host=DB_CONFIG["host"],
        port=DB_CONFIG["port"],
        user=DB_CONFIG["user"],
        password=DB_CONFIG["password"],
        dbname=DB_CONFIG["database"]
    )


@dataclass(frozen=True)
class DayWindow:
    """Closed UTC interval covering one calendar day."""
    day: date
    start: datetime
    end: datetime

    @property
    def filename(self) -> str:
        return f"{self.day.isoformat()}.csv"


def day_window(reference_date: date) -> DayWindow:
    """
    Window exported by the task handed `reference_date`.

    Each task exports the day before its reference date, so a task for
    2024-01-03 queries 2024-01-02T00:00:00Z through 2024-01-02T23:59:59.999Z.
    """
    if isinstance(reference_date, datetime):
        reference_date = reference_date.astimezone(timezone.utc).date()
    day = reference_date - timedelta(days=1)
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    end = datetime.combine(day, time(23, 59, 59, 999000), tzinfo=timezone.utc)
    return DayWindow(day=day, start=start, end=end)


class MeasurementSource:
    """
    Streams raw measurement records for one UTC day.

    Uses a named (server-side) cursor so rows are fetched in batches of
    `fetch_size` only as fast as the consumer iterates. The connection is
    long-lived and shared across days; each day's stream runs in its own
    transaction, which is rolled back once the stream ends.
    """

    def __init__(self, conn, table: str = MEASUREMENTS_TABLE, fetch_size: int = DB_FETCH_SIZE):
        self.conn = conn
        self.table = table
        self.fetch_size = fetch_size

    def _query(self):
        return sql.SQL(
            "SELECT data FROM {table} WHERE date_utc BETWEEN %s AND %s"
        ).format(table=sql.Identifier(self.table))

    def stream(self, window: DayWindow) -> Iterator[Dict[str, Any]]:
        """
        Yield the `data` payload of every measurement inside `window`.

        Raises:
            StoreQueryError: connection loss or query failure, including
                failures in the middle of the stream
        """
        logger.info(
            f"Streaming {self.table} for {window.day} "
            f"({window.start.isoformat()} - {window.end.isoformat()})"
        )
        cur = None
        try:
            # No forced timeout, a full day can take a long time to read
            with self.conn.cursor() as setup:
                setup.execute("SET LOCAL statement_timeout = 0")

            cur = self.conn.cursor(name=CURSOR_NAME)
            cur.itersize = self.fetch_size
            cur.execute(self._query(), (window.start, window.end))

            for row in cur:
                yield row[0]

        except psycopg2.Error as e:
            logger.error(f"Query error for {window.day}: {e}")
            raise StoreQueryError(f"Query on {self.table} failed: {e}", day=window.day) from e
        finally:
            self._close(cur)

    def _close(self, cur) -> None:
        if cur is not None and not cur.closed:
            try:
                cur.close()
            except psycopg2.Error as e:
                logger.warning(f"Error closing cursor: {e}")
        try:
            self.conn.rollback()
        except psycopg2.Error as e:
            # Connection already gone; the stream error (if any) is what gets reported
            logger.warning(f"Error ending day transaction: {e}")
