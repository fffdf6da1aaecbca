"""Daily CSV export of measurements from PostgreSQL to object storage."""

__version__ = "1.0.0"
