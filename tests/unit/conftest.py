"""Fakes standing in for the PostgreSQL connection and the MinIO client."""
import os
import sys
from pathlib import Path

import psycopg2
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from csv_uploader.errors import StoreQueryError


def make_record(i=0, coordinates=True, **overrides):
    """Raw measurement as stored in the `data` column."""
    record = {
        "location": f"Station {i}",
        "city": "Paris",
        "country": "FR",
        "date": {
            "utc": f"2024-01-02T{i % 24:02d}:00:00.000Z",
            "local": f"2024-01-02T{(i + 1) % 24:02d}:00:00+01:00",
        },
        "parameter": "pm25",
        "value": 10.5 + i,
        "unit": "µg/m³",
        "attribution": [{"name": "Airparif", "url": "https://www.airparif.asso.fr"}],
    }
    if coordinates:
        record["coordinates"] = {"latitude": 48.8566 + i, "longitude": 2.3522 - i}
    record.update(overrides)
    return record


class FakeCursor:
    """Mimics the bits of a psycopg2 (named) cursor the source uses."""

    def __init__(self, conn, name=None):
        self.conn = conn
        self.name = name
        self.itersize = None
        self.closed = False
        self.query = None
        self.params = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False

    def execute(self, query, params=None):
        self.query = query
        self.params = params
        self.conn.executed.append((self.name, query, params))
        if self.name is not None and self.conn.fail_on_execute:
            raise psycopg2.ProgrammingError("relation does not exist")

    def __iter__(self):
        for i, row in enumerate(self.conn.rows):
            if self.conn.fail_after is not None and i >= self.conn.fail_after:
                raise psycopg2.OperationalError("server closed the connection unexpectedly")
            yield (row,)

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, rows=None, fail_after=None, fail_on_execute=False):
        self.rows = list(rows or [])
        self.fail_after = fail_after
        self.fail_on_execute = fail_on_execute
        self.executed = []
        self.cursors = []
        self.rollbacks = 0
        self.closed = False

    def cursor(self, name=None):
        cur = FakeCursor(self, name=name)
        self.cursors.append(cur)
        return cur

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        self.closed = True


class FakeMinio:
    """Records fput_object calls; reads the file like the SDK would."""

    def __init__(self, error=None, chunk=64):
        self.error = error
        self.chunk = chunk
        self.uploads = []

    def fput_object(self, bucket_name, object_name, file_path, content_type=None,
                    metadata=None, progress=None, **kwargs):
        with open(file_path, 'rb') as f:
            data = f.read()
        if progress is not None:
            progress.set_meta(object_name=object_name, total_length=len(data))
            for offset in range(0, len(data), self.chunk):
                progress.update(len(data[offset:offset + self.chunk]))
        if self.error is not None:
            raise self.error
        self.uploads.append({
            "bucket": bucket_name,
            "object": object_name,
            "path": Path(file_path),
            "content_type": content_type,
            "metadata": metadata,
            "data": data,
        })

        class Result:
            etag = "etag-" + object_name
        return Result()


class FakeSource:
    """Stands in for MeasurementSource: yields canned records per window."""

    def __init__(self, records=None, fail_after=None, per_day=None):
        self.records = list(records or [])
        self.fail_after = fail_after
        self.per_day = per_day or {}
        self.windows = []

    def stream(self, window):
        self.windows.append(window)
        records = self.per_day.get(window.day, self.records)
        for i, record in enumerate(records):
            if self.fail_after is not None and i >= self.fail_after:
                raise StoreQueryError("connection lost", day=window.day)
            yield record


@pytest.fixture
def records():
    return [make_record(i) for i in range(5)]


@pytest.fixture
def fake_minio():
    return FakeMinio()


@pytest.fixture
def export_dir(tmp_path):
    path = tmp_path / "export"
    path.mkdir()
    return path
