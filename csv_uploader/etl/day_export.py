"""
Day export task: one UTC day end-to-end.

Flow:
1. Stream the day's measurements from PostgreSQL (server-side cursor)
2. Flatten each record
3. Encode to CSV and write <YYYY-MM-DD>.csv
4. Upload to the bucket, then delete the local file

Stages pull from each other as iterators, so the cursor is only read as fast
as rows are written to disk. A day without rows completes without a file.
"""
import logging
from dataclasses import dataclass
from datetime import date
from itertools import chain
from typing import Optional

from csv_uploader.errors import ExportError
from csv_uploader.etl.transform import RecordTransformer
from csv_uploader.monitoring.export_metrics import ExportMetricsLogger
from csv_uploader.storage.file_sink import FileSink
from csv_uploader.storage.minio_storage import ObjectStoreUploader
from csv_uploader.storage.postgres import MeasurementSource, day_window

logger = logging.getLogger(__name__)

STATUS_SUCCESS = 'success'
STATUS_NO_DATA = 'no_data'
STATUS_FAILED = 'failed'


@dataclass
class DayResult:
    """Outcome of one day's export."""
    day: date
    status: str  # 'success', 'no_data', 'failed'
    object_name: Optional[str] = None
    rows: int = 0
    size: int = 0
    error: Optional[ExportError] = None

    @property
    def ok(self) -> bool:
        return self.status != STATUS_FAILED

    @property
    def failed_stage(self) -> Optional[str]:
        return self.error.stage if self.error is not None else None


class DayExporter:
    """Runs the export for a single reference date, with injected collaborators."""

    def __init__(
        self,
        source: MeasurementSource,
        sink: FileSink,
        uploader: ObjectStoreUploader,
        metrics: ExportMetricsLogger = None,
    ):
        self.source = source
        self.sink = sink
        self.uploader = uploader
        self.metrics = metrics or ExportMetricsLogger()

    def run(self, reference_date: date) -> DayResult:
        """
        Export the day before `reference_date`.

        Never raises ExportError: failures come back as a 'failed' DayResult
        carrying the error, after the local file (if any) has been removed.
        """
        window = day_window(reference_date)
        logger.info(f"Grabbing data for {window.day.isoformat()}")

        try:
            with self.metrics.track(window.day) as metrics:
                result = self._export(window)
                metrics.status = result.status
                metrics.rows = result.rows
                metrics.bytes_written = result.size
                return result
        except ExportError as e:
            if e.day is None:
                e.day = window.day
            logger.error(f"Export of {window.day} failed at stage '{e.stage}': {e}")
            return DayResult(day=window.day, status=STATUS_FAILED, error=e)

    def _export(self, window) -> DayResult:
        transformer = RecordTransformer()
        records = iter(self.source.stream(window))

        try:
            first = next(records, None)
            if first is None:
                logger.info(f"No data found for {window.day}, skipping upload.")
                return DayResult(day=window.day, status=STATUS_NO_DATA)

            rows = transformer.transform(chain([first], records))
            written = self.sink.write(rows, window.filename)
        finally:
            # Ends the day transaction even when a later stage stopped reading early
            close = getattr(records, "close", None)
            if close is not None:
                close()

        uploaded = self.uploader.upload_and_cleanup(written["path"], day=window.day)

        return DayResult(
            day=window.day,
            status=STATUS_SUCCESS,
            object_name=uploaded["object"],
            rows=written["rows"],
            size=written["size"],
        )
