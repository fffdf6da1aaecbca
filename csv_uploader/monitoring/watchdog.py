"""Watchdog - force the process down if the whole run hangs."""

import logging
import os
import threading
from contextlib import contextmanager
from typing import Callable, Optional

from csv_uploader.errors import WatchdogTimeoutError

logger = logging.getLogger(__name__)

EXIT_FAILURE = 1


def _flush_handlers() -> None:
    """Flush root handlers whose lock is free; a handler stuck in emit is skipped."""
    for handler in logging.getLogger().handlers:
        lock = handler.lock
        if lock is not None and not lock.acquire(blocking=False):
            continue
        try:
            handler.flush()
        except (OSError, ValueError):
            pass
        finally:
            if lock is not None:
                lock.release()


def _hard_exit(code: int) -> None:
    _flush_handlers()
    os._exit(code)


class Watchdog:
    """
    One-shot timer guarding the entire run.

    Armed once at run start and disarmed when the run reaches a terminal
    state. If it fires first, the process exits with status 1 without
    unwinding in-flight stages (a stalled socket read would never unwind).
    """

    def __init__(self, seconds: float, on_expire: Optional[Callable[[int], None]] = None):
        self.seconds = seconds
        self.on_expire = on_expire or _hard_exit
        self.fired = False
        self.error: Optional[WatchdogTimeoutError] = None
        self._timer: Optional[threading.Timer] = None

    @property
    def armed(self) -> bool:
        return self._timer is not None and self._timer.is_alive()

    def arm(self) -> None:
        if self._timer is not None:
            raise RuntimeError("Watchdog is already armed")
        self._timer = threading.Timer(self.seconds, self._expire)
        # Never keep the process alive just to fire
        self._timer.daemon = True
        self._timer.start()
        logger.info(f"Watchdog armed for {self.seconds:g}s")

    def disarm(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            logger.debug("Watchdog disarmed")

    def _expire(self) -> None:
        self.fired = True
        self.error = WatchdogTimeoutError(f"Uh oh, process timed out after {self.seconds:g}s.")
        logger.error(str(self.error))
        self.on_expire(EXIT_FAILURE)


@contextmanager
def run_watchdog(seconds: float, on_expire: Optional[Callable[[int], None]] = None):
    """Context manager arming a Watchdog for the duration of the block."""
    dog = Watchdog(seconds, on_expire=on_expire)
    dog.arm()
    try:
        yield dog
    finally:
        dog.disarm()
