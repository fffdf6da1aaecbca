"""CSV encoding of flattened measurement rows"""
import json
import logging
from itertools import islice
from typing import Any, Dict, Iterable, Iterator, List, TextIO

import pandas as pd

from csv_uploader.errors import EncodingError

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    'location',
    'city',
    'country',
    'utc',
    'local',
    'parameter',
    'value',
    'unit',
    'latitude',
    'longitude',
    'attribution',
]

CHUNK_SIZE = 10000


def _chunks(rows: Iterable[Dict[str, Any]], size: int) -> Iterator[List[Dict[str, Any]]]:
    it = iter(rows)
    while True:
        chunk = list(islice(it, size))
        if not chunk:
            return
        yield chunk


def _cell(value: Any) -> Any:
    """Nested values (attribution lists, ...) are written as JSON text."""
    if isinstance(value, (dict, list, tuple)):
        try:
            return json.dumps(value, ensure_ascii=False, default=str)
        except (TypeError, ValueError) as e:
            raise EncodingError(f"Cannot serialize value {value!r}: {e}") from e
    return value


class CsvEncoder:
    """
    Writes rows as CSV with a fixed header and column order.

    Rows are consumed in chunks of `chunk_size`, so at most one chunk is held
    in memory regardless of the day's size. Missing fields become empty cells,
    unknown fields are dropped.
    """

    def __init__(self, columns: List[str] = None, chunk_size: int = CHUNK_SIZE):
        self.columns = list(columns or CSV_COLUMNS)
        self.chunk_size = chunk_size

    def _frame(self, chunk: List[Dict[str, Any]]) -> pd.DataFrame:
        try:
            records = [{col: _cell(row.get(col)) for col in self.columns} for row in chunk]
            return pd.DataFrame(records, columns=self.columns, dtype=object)
        except AttributeError as e:
            raise EncodingError(f"Malformed row in chunk: {e}") from e

    def encode(self, rows: Iterable[Dict[str, Any]], out: TextIO) -> int:
        """
        Encode `rows` into the text stream `out`.

        Returns:
            Number of data rows written (header excluded)
        """
        written = 0
        header = True

        for chunk in _chunks(rows, self.chunk_size):
            frame = self._frame(chunk)
            frame.to_csv(out, header=header, index=False, na_rep='', lineterminator='\n')
            header = False
            written += len(frame)

        if header:
            # Empty input still gets the header row
            pd.DataFrame(columns=self.columns).to_csv(out, index=False, lineterminator='\n')

        logger.debug(f"Encoded {written} rows")
        return written
