"""Storage module exports"""
from .postgres import get_db_connection, day_window, DayWindow, MeasurementSource
from .file_sink import FileSink, remove_file
from .minio_storage import get_minio_client, ObjectStoreUploader, UploadProgress

__all__ = [
    'get_db_connection',
    'day_window',
    'DayWindow',
    'MeasurementSource',
    'FileSink',
    'remove_file',
    'get_minio_client',
    'ObjectStoreUploader',
    'UploadProgress',
]
