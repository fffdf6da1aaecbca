"""Unit tests for CSV encoding."""
import csv
import io
import json

import pytest

from conftest import make_record
from csv_uploader.errors import EncodingError
from csv_uploader.etl.csv_encoder import CSV_COLUMNS, CsvEncoder
from csv_uploader.etl.transform import RecordTransformer

EXPECTED_HEADER = "location,city,country,utc,local,parameter,value,unit,latitude,longitude,attribution"


def encode(rows, **kwargs):
    out = io.StringIO()
    count = CsvEncoder(**kwargs).encode(rows, out)
    return out.getvalue(), count


def parse(text):
    return list(csv.DictReader(io.StringIO(text)))


class TestCsvEncoder:
    """Tests for CsvEncoder."""

    def test_header_is_fixed(self, records):
        """Should always start with the fixed header."""
        text, _ = encode(RecordTransformer().transform(records))
        assert text.splitlines()[0] == EXPECTED_HEADER
        assert ",".join(CSV_COLUMNS) == EXPECTED_HEADER

    def test_header_independent_of_optional_fields(self):
        """Should emit the same header when no record has coordinates."""
        rows = RecordTransformer().transform([make_record(i, coordinates=False) for i in range(3)])
        text, _ = encode(rows)
        assert text.splitlines()[0] == EXPECTED_HEADER

    def test_empty_input_writes_header_only(self):
        """Should write just the header for an empty stream."""
        text, count = encode([])
        assert text.splitlines() == [EXPECTED_HEADER]
        assert count == 0

    def test_one_row_per_record(self, records):
        """Should write one row per record, in order."""
        text, count = encode(RecordTransformer().transform(records))
        rows = parse(text)
        assert count == len(records)
        assert [r["location"] for r in rows] == [r["location"] for r in records]

    def test_missing_coordinates_render_empty(self):
        """Should write empty latitude/longitude cells when coordinates are missing."""
        rows = RecordTransformer().transform([make_record(0, coordinates=False)])
        parsed = parse(encode(rows)[0])
        assert parsed[0]["latitude"] == ""
        assert parsed[0]["longitude"] == ""

    def test_coordinates_round_trip(self, records):
        """Should keep latitude/longitude string values through encode and parse."""
        parsed = parse(encode(RecordTransformer().transform(records))[0])
        assert len(parsed) == len(records)
        for raw, row in zip(records, parsed):
            assert row["latitude"] == str(raw["coordinates"]["latitude"])
            assert row["longitude"] == str(raw["coordinates"]["longitude"])

    def test_escapes_special_characters(self):
        """Should quote values containing delimiters, quotes and newlines."""
        record = make_record(0, location='Station "A", north\nside')
        parsed = parse(encode(RecordTransformer().transform([record]))[0])
        assert parsed[0]["location"] == 'Station "A", north\nside'

    def test_nested_values_written_as_json(self):
        """Should serialize list/dict values as JSON text."""
        record = make_record(0)
        parsed = parse(encode(RecordTransformer().transform([record]))[0])
        assert json.loads(parsed[0]["attribution"]) == record["attribution"]

    def test_unknown_fields_dropped(self):
        """Should ignore fields outside the fixed columns."""
        record = make_record(0, sourceName="internal")
        text, _ = encode(RecordTransformer().transform([record]))
        assert "internal" not in text
        assert len(parse(text)[0]) == len(CSV_COLUMNS)

    def test_header_written_once_across_chunks(self):
        """Should stream in chunks without repeating the header."""
        records = [make_record(i) for i in range(7)]
        text, count = encode(RecordTransformer().transform(records), chunk_size=3)
        assert count == 7
        assert text.count(EXPECTED_HEADER) == 1
        assert len(parse(text)) == 7

    def test_consumes_lazily(self):
        """Should not pull more than one chunk ahead of what it writes."""
        pulled = []

        def source():
            for i in range(10):
                pulled.append(i)
                yield make_record(i)

        pulled_at_write = []

        class RecordingBuffer(io.StringIO):
            def write(self, s):
                pulled_at_write.append(len(pulled))
                return super().write(s)

        CsvEncoder(chunk_size=2).encode(RecordTransformer().transform(source()), RecordingBuffer())
        assert len(pulled) == 10
        assert pulled_at_write[0] == 2

    def test_non_mapping_row_raises(self):
        """Should raise EncodingError for rows that are not mappings."""
        with pytest.raises(EncodingError):
            encode([["not", "a", "row"]])
