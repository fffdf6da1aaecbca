"""Export Metrics - Track per-day export performance."""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

logger = logging.getLogger(__name__)


@dataclass
class ExportMetrics:
    """Metrics of one day's export."""
    day: date
    duration_seconds: float = 0.0
    rows: int = 0
    bytes_written: int = 0
    status: str = 'running'
    stage: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def throughput(self) -> float:
        """Rows per second."""
        if self.duration_seconds > 0:
            return self.rows / self.duration_seconds
        return 0.0


class ExportMetricsLogger:
    """Collects day metrics for the run and writes a summary line per day."""

    def __init__(self):
        self.history: List[ExportMetrics] = []

    def log(self, metrics: ExportMetrics) -> None:
        self.history.append(metrics)
        if metrics.status == 'failed':
            logger.error(
                f"Export metrics {metrics.day}: failed at {metrics.stage} after "
                f"{metrics.duration_seconds:.2f}s - {metrics.error_message}"
            )
        else:
            logger.info(
                f"Export metrics {metrics.day}: {metrics.status}, {metrics.rows} rows, "
                f"{metrics.bytes_written} bytes in {metrics.duration_seconds:.2f}s "
                f"({metrics.throughput:.0f} rows/s)"
            )

    @contextmanager
    def track(self, day: date):
        """Context manager to track a day's duration and outcome."""
        metrics = ExportMetrics(day=day)
        start = time.time()

        try:
            yield metrics
            if metrics.status == 'running':
                metrics.status = 'success'
        except Exception as e:
            metrics.status = 'failed'
            metrics.stage = getattr(e, 'stage', None)
            metrics.error_message = str(e)
            raise
        finally:
            metrics.duration_seconds = time.time() - start
            self.log(metrics)
