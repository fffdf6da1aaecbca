"""ETL module - record flattening and CSV encoding.

The day task and scheduler live in `etl.day_export` and `etl.scheduler`.
"""
from .transform import RecordTransformer, flatten_record
from .csv_encoder import CsvEncoder, CSV_COLUMNS

__all__ = ['RecordTransformer', 'flatten_record', 'CsvEncoder', 'CSV_COLUMNS']
