"""Flatten raw measurement records into the CSV row shape"""
import logging
from typing import Any, Dict, Iterable, Iterator, Mapping

from csv_uploader.errors import EncodingError

logger = logging.getLogger(__name__)

PROGRESS_EVERY = 10000


def flatten_record(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Replace the nested `date` and `coordinates` objects with scalar fields.

    date{utc, local}                  -> utc, local
    coordinates{latitude, longitude}  -> latitude, longitude

    Records without coordinates keep no latitude/longitude keys, which the
    encoder renders as empty cells. Already flattened records pass through
    unchanged.

    Raises:
        EncodingError: record is not a mapping, or has no usable date
    """
    if not isinstance(raw, Mapping):
        raise EncodingError(f"Expected a mapping record, got {type(raw).__name__}")

    data = dict(raw)

    if "date" in data:
        when = data.pop("date")
        if not isinstance(when, Mapping):
            raise EncodingError(f"Malformed date field: {when!r}")
        data["utc"] = when.get("utc")
        data["local"] = when.get("local")
    elif "utc" not in data:
        raise EncodingError(f"Record has no date: {raw!r}")

    if "coordinates" in data:
        coords = data.pop("coordinates")
        if coords:
            if not isinstance(coords, Mapping):
                raise EncodingError(f"Malformed coordinates field: {coords!r}")
            data["latitude"] = coords.get("latitude")
            data["longitude"] = coords.get("longitude")

    return data


class RecordTransformer:
    """Maps a stream of raw records to flattened rows, counting as it goes."""

    def __init__(self, progress_every: int = PROGRESS_EVERY):
        self.progress_every = progress_every
        self.processed = 0

    def transform(self, records: Iterable[Mapping[str, Any]]) -> Iterator[Dict[str, Any]]:
        for raw in records:
            data = flatten_record(raw)
            self.processed += 1
            if self.processed % self.progress_every == 0:
                logger.info(f"Processed {self.processed} records.")
            yield data
