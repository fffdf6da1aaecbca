"""Configuration module exports"""
from .database_config import DB_CONFIG, MEASUREMENTS_TABLE, DB_FETCH_SIZE
from .storage_config import MINIO_CONFIG, CSV_CONTENT_TYPE, PUBLIC_READ_ACL
from .run_config import RUN_CONFIG, RunConfig, MODE_ALL, MODE_RECENT

__all__ = [
    'DB_CONFIG',
    'MEASUREMENTS_TABLE',
    'DB_FETCH_SIZE',
    'MINIO_CONFIG',
    'CSV_CONTENT_TYPE',
    'PUBLIC_READ_ACL',
    'RUN_CONFIG',
    'RunConfig',
    'MODE_ALL',
    'MODE_RECENT',
]
