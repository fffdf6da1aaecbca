"""Local file output for a day's CSV"""
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable

from csv_uploader.etl.csv_encoder import CsvEncoder
from csv_uploader.errors import FileIOError

logger = logging.getLogger(__name__)

PARTIAL_SUFFIX = '.part'


def remove_file(path: Path) -> bool:
    """Delete `path`, tolerating it being already gone. Returns True if removed."""
    try:
        os.remove(path)
        return True
    except FileNotFoundError:
        logger.warning(f"File {path} already removed")
        return False
    except OSError as e:
        logger.error(f"Cannot remove {path}: {e}")
        raise FileIOError(f"Cannot remove {path}: {e}") from e


class FileSink:
    """
    Persists an encoded CSV stream to `<export_dir>/<filename>`.

    Output goes to a `.part` file first; it is flushed, fsynced, closed and
    renamed into place only once the whole stream has been written. Any error
    removes the partial file, so a finished `.csv` is the completion signal.
    """

    def __init__(self, export_dir: Path = Path('.'), encoder: CsvEncoder = None):
        self.export_dir = Path(export_dir)
        self.encoder = encoder or CsvEncoder()

    def write(self, rows: Iterable[Dict[str, Any]], filename: str) -> Dict[str, Any]:
        """
        Write `rows` as CSV to `filename`.

        Returns:
            Dict with path, rows and size of the completed file

        Raises:
            FileIOError: on disk errors (space, permissions, ...)
            Any error raised by the upstream stream or the encoder
        """
        path = self.export_dir / filename
        partial = path.with_name(path.name + PARTIAL_SUFFIX)

        try:
            self.export_dir.mkdir(parents=True, exist_ok=True)
            with open(partial, 'w', newline='', encoding='utf-8') as f:
                rows_written = self.encoder.encode(rows, f)
                f.flush()
                os.fsync(f.fileno())
            os.replace(partial, path)
            size = path.stat().st_size
        except OSError as e:
            self._discard(partial)
            logger.error(f"Write error for {path}: {e}")
            raise FileIOError(f"Cannot write {path}: {e}") from e
        except BaseException:
            self._discard(partial)
            raise

        logger.info(f"File {path} has been saved to disk ({rows_written} rows, {size} bytes).")
        return {"path": path, "rows": rows_written, "size": size}

    def _discard(self, partial: Path) -> None:
        try:
            if partial.exists():
                os.remove(partial)
        except OSError as e:
            logger.warning(f"Could not remove partial file {partial}: {e}")
