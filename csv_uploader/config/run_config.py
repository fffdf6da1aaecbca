"""Run configuration - history start date, watchdog duration, export mode"""
import os
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path

from csv_uploader.config.storage_config import MINIO_CONFIG
from csv_uploader.errors import ConfigError

MODE_ALL = "all"
MODE_RECENT = "recent"

RUN_CONFIG = {
    "start_date": os.getenv("START_DATE", "2015-06-01"),
    # Milliseconds, kept compatible with the existing task definitions
    "process_timeout_ms": os.getenv("PROCESS_TIMEOUT", str(10 * 60 * 1000)),
    "export_dir": os.getenv("EXPORT_DIR", "."),
}


@dataclass(frozen=True)
class RunConfig:
    """Snapshot of the run settings, read once at startup."""
    start_date: date
    process_timeout: float
    bucket: str
    mode: str = MODE_RECENT
    export_dir: Path = Path(".")

    @property
    def regenerate_all(self) -> bool:
        return self.mode == MODE_ALL

    @classmethod
    def from_env(cls, mode: str = MODE_RECENT, env: dict = None) -> "RunConfig":
        """
        Build the run config from environment variables.

        Args:
            mode: 'all' to regenerate the full history, anything else
                regenerates the last two days only
            env: Mapping to read instead of the module-level defaults

        Raises:
            ConfigError: START_DATE or PROCESS_TIMEOUT cannot be parsed
        """
        if env is None:
            settings = dict(RUN_CONFIG)
            bucket = MINIO_CONFIG["bucket"]
        else:
            settings = {
                "start_date": env.get("START_DATE", RUN_CONFIG["start_date"]),
                "process_timeout_ms": env.get("PROCESS_TIMEOUT", RUN_CONFIG["process_timeout_ms"]),
                "export_dir": env.get("EXPORT_DIR", RUN_CONFIG["export_dir"]),
            }
            bucket = env.get("BUCKET_NAME", MINIO_CONFIG["bucket"])

        try:
            start_date = datetime.strptime(settings["start_date"], "%Y-%m-%d").date()
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid START_DATE {settings['start_date']!r}: expected YYYY-MM-DD") from e

        try:
            timeout_ms = float(settings["process_timeout_ms"])
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid PROCESS_TIMEOUT {settings['process_timeout_ms']!r}") from e
        if timeout_ms <= 0:
            raise ConfigError(f"PROCESS_TIMEOUT must be positive, got {timeout_ms}")

        if not bucket:
            raise ConfigError("BUCKET_NAME must not be empty")

        return cls(
            start_date=start_date,
            process_timeout=timeout_ms / 1000.0,
            bucket=bucket,
            mode=MODE_ALL if mode == MODE_ALL else MODE_RECENT,
            export_dir=Path(settings["export_dir"]),
        )
