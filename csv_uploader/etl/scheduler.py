"""Sequential, fail-fast scheduling of day exports over a date range"""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, Iterator, List, Optional

from csv_uploader.config import MODE_ALL
from csv_uploader.etl.day_export import DayExporter, DayResult

logger = logging.getLogger(__name__)

RECENT_DAYS = 2


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def reference_dates(start: date, now: datetime) -> Iterator[date]:
    """
    Every calendar day from `start` whose UTC midnight lies before `now`.

    `now` is exclusive: today is included once it has started, and each
    reference date exports the day before it.
    """
    current = start
    while datetime.combine(current, time.min, tzinfo=timezone.utc) < now:
        yield current
        current += timedelta(days=1)


def range_start(mode: str, history_start: date, now: datetime) -> date:
    """First reference date for the mode: full history, or the last two days."""
    if mode == MODE_ALL:
        return history_start
    # Reference dates today-1 and today export the two most recent full days
    return now.date() - timedelta(days=RECENT_DAYS - 1)


@dataclass
class RunResult:
    """Outcome of a whole run."""
    results: List[DayResult] = field(default_factory=list)
    planned: int = 0

    @property
    def ok(self) -> bool:
        return all(r.ok for r in self.results) and len(self.results) == self.planned

    @property
    def failure(self) -> Optional[DayResult]:
        return next((r for r in self.results if not r.ok), None)

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1


class DateRangeScheduler:
    """Runs one DayExporter task per reference date, strictly in order."""

    def __init__(self, exporter: DayExporter, clock: Callable[[], datetime] = utc_now):
        self.exporter = exporter
        self.clock = clock

    def run(self, mode: str, history_start: date) -> RunResult:
        now = self.clock()
        start = range_start(mode, history_start, now)
        days = list(reference_dates(start, now))

        if mode == MODE_ALL:
            logger.info("Regenerating everything, hold on to your hats!")
        else:
            logger.info(f"Generating data for last {RECENT_DAYS} days only.")
        logger.info(f"Scheduled {len(days)} day exports from {start} to {now.date()}")

        run = RunResult(planned=len(days))
        for reference_date in days:
            result = self.exporter.run(reference_date)
            run.results.append(result)
            if not result.ok:
                logger.error(
                    f"Stopping run: {result.day} failed at stage '{result.failed_stage}', "
                    f"{len(days) - len(run.results)} day(s) not started"
                )
                return run

        logger.info("Everything done successfully!")
        return run
